"""Candidate pool loading: recipe notes with frontmatter, or a YAML/JSON list."""

from __future__ import annotations

import json
import logging
import math
import re
from fractions import Fraction
from pathlib import Path

import frontmatter
import yaml

from meal_scheduler.models import Candidate, Ingredient
from meal_scheduler.units import UNIT_ALIASES, normalize_unit

logger = logging.getLogger(__name__)

# "1 1/2", "1/2", "1.5", "2"
QTY_RE = re.compile(r"^(\d+\s+\d+/\d+|\d+/\d+|\d+(?:\.\d+)?)\s+(.+)$")


def normalize_time(raw: str | int | float | None) -> int | None:
    """Parse varied time formats into integer minutes.

    Handles: "10 minutes", "5 mins", "5 min", 15, "3 hours",
    "1 hour 30 minutes", "" -> None.
    """
    if raw is None:
        return None
    if isinstance(raw, (int, float)):
        return int(raw) if raw > 0 else None

    s = str(raw).strip()
    if not s:
        return None

    total = 0

    m = re.search(r"(\d+)\s*(?:hours?|hrs?|h)\b", s, re.IGNORECASE)
    if m:
        total += int(m.group(1)) * 60

    m = re.search(r"(\d+)\s*(?:minutes?|mins?|m)\b", s, re.IGNORECASE)
    if m:
        total += int(m.group(1))

    if total > 0:
        return total

    m = re.match(r"(\d+)$", s)
    if m:
        return int(m.group(1))

    return None


def parse_quantity(raw: str) -> float | None:
    """Parse "2", "1.5", "1/2" or "1 1/2" into a float."""
    try:
        return float(sum(Fraction(part) for part in raw.split()))
    except (ValueError, ZeroDivisionError):
        return None


def parse_ingredient_line(line: str) -> Ingredient | None:
    """Parse "500 ml milk" or "2 eggs" into an Ingredient.

    Returns None when the line does not start with a quantity.
    """
    m = QTY_RE.match(line.strip())
    if not m:
        return None
    qty = parse_quantity(m.group(1))
    if qty is None:
        return None

    rest = m.group(2).strip()
    head, _, tail = rest.partition(" ")
    if head.lower().rstrip(".") in UNIT_ALIASES and tail.strip():
        return Ingredient(name=tail.strip(), qty=qty, unit=normalize_unit(head))
    return Ingredient(name=rest, qty=qty, unit=normalize_unit(None))


def _ingredient_from_mapping(data: dict) -> Ingredient | None:
    name = _to_str(data.get("name") or data.get("item"))
    qty = _to_float(data.get("qty"))
    if not name or qty is None:
        return None
    return Ingredient(name=name, qty=qty, unit=normalize_unit(data.get("unit")))


def _to_float(val: object) -> float | None:
    if val is None or val == "":
        return None
    try:
        return float(val)
    except (ValueError, TypeError):
        return None


def _to_str(val: object) -> str | None:
    if val is None or val == "":
        return None
    return str(val).strip()


def _to_list(val: object) -> list[str]:
    if not val:
        return []
    if isinstance(val, str):
        return [t.strip() for t in val.split(",") if t.strip()]
    return [str(t).strip() for t in val if str(t).strip()]


def _to_lines(val: object) -> list[str]:
    if isinstance(val, str):
        return [s.strip() for s in val.splitlines() if s.strip()]
    return _to_list(val)


def candidate_from_mapping(meta: dict, default_id: str) -> Candidate:
    """Build a Candidate from a frontmatter block or a pool list entry.

    Plain `meal_type`, `cuisine` and `main_ingredient` fields become
    prefixed tags when the matching tag is not already present.
    """
    title = _to_str(meta.get("title")) or default_id

    tags = _to_list(meta.get("tags"))
    lowered = [t.lower() for t in tags]
    for field_name, prefix in (
        ("meal_type", "slot:"),
        ("main_ingredient", "prot:"),
        ("cuisine", "cuisine:"),
    ):
        value = _to_str(meta.get(field_name))
        if value and not any(t.startswith(prefix) for t in lowered):
            tags.append(f"{prefix}{value.lower()}")

    items = meta.get("ingredients")
    items = _to_list(items) if isinstance(items, str) else (items or [])
    names: list[str] = []
    measured: list[Ingredient] = []
    for item in items:
        if isinstance(item, dict):
            ing = _ingredient_from_mapping(item)
        else:
            ing = parse_ingredient_line(str(item))
        if ing is not None:
            measured.append(ing)
            names.append(ing.name)
        elif isinstance(item, dict):
            name = _to_str(item.get("name") or item.get("item"))
            if name:
                names.append(name)
            else:
                logger.debug("%s: ingredient %r has no name", title, item)
        else:
            names.append(str(item).strip())

    raw_minutes = meta.get("minutes", meta.get("total_time"))
    if isinstance(raw_minutes, (int, float)) and not isinstance(raw_minutes, bool):
        minutes = float(raw_minutes)
    else:
        minutes = normalize_time(raw_minutes)
    cost = _to_float(meta.get("cost"))

    return Candidate(
        id=_to_str(meta.get("id")) or default_id,
        title=title,
        minutes=float(minutes) if minutes is not None else math.nan,
        cost=cost if cost is not None else math.nan,
        ingredients=tuple(names),
        tags=tuple(tags),
        steps=tuple(_to_lines(meta.get("steps"))),
        measured=tuple(measured),
        coverage=_to_float(meta.get("coverage")),
        price_confidence=_to_float(meta.get("price_confidence")),
    )


def parse_candidate_file(file_path: Path) -> Candidate | None:
    """Parse a single recipe note into a Candidate."""
    try:
        post = frontmatter.load(file_path)
    except Exception:
        logger.debug("SKIP (unreadable frontmatter): %s", file_path.name)
        return None

    meta = post.metadata
    if meta.get("type") != "recipe":
        return None

    return candidate_from_mapping(meta, default_id=file_path.stem)


def discover_recipe_files(recipes_path: Path, limit: int | None = None) -> list[Path]:
    """Find all .md files in the recipes directory."""
    files = sorted(recipes_path.glob("*.md"))
    if limit:
        files = files[:limit]
    return files


def load_pool(path: Path) -> list[Candidate]:
    """Load candidates from a directory of notes or a YAML/JSON list file.

    Raises FileNotFoundError if path does not exist.
    """
    if not path.exists():
        raise FileNotFoundError(f"Candidate pool not found: {path}")

    if path.is_dir():
        pool = []
        for f in discover_recipe_files(path):
            candidate = parse_candidate_file(f)
            if candidate is None:
                logger.debug("SKIP (not a recipe): %s", f.name)
                continue
            pool.append(candidate)
        logger.info("Loaded %d candidates from %s", len(pool), path)
        return pool

    with open(path) as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f) or []

    if isinstance(data, dict):
        data = data.get("candidates", [])
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of candidates")

    pool = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            logger.warning("%s: entry %d is not a mapping, skipped", path, i)
            continue
        pool.append(candidate_from_mapping(item, default_id=f"{path.stem}-{i}"))
    logger.info("Loaded %d candidates from %s", len(pool), path)
    return pool
