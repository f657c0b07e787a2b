"""Recipe scaling by a ratio."""

from __future__ import annotations

import json
import math
import sys
from difflib import SequenceMatcher
from pathlib import Path

from meal_scheduler.models import Candidate, Ingredient


# Display fractions; 0 and 1 round to the nearest whole number
FRACTIONS = [
    (0.0, ""),
    (1 / 8, "1/8"),
    (1 / 4, "1/4"),
    (1 / 3, "1/3"),
    (1 / 2, "1/2"),
    (2 / 3, "2/3"),
    (3 / 4, "3/4"),
    (1.0, ""),
]


class InvalidRatioError(ValueError):
    """Raised when a scale ratio is non-finite or not positive."""


def scale_recipe(ratio: float, ingredients: list[Ingredient]) -> list[Ingredient]:
    """Multiply every quantity by ratio, preserving units."""
    if not math.isfinite(ratio) or ratio <= 0:
        raise InvalidRatioError(f"Invalid scale ratio {ratio}")
    return [
        Ingredient(name=ing.name, qty=round(ing.qty * ratio, 4), unit=ing.unit)
        for ing in ingredients
    ]


def scale_to_servings(
    ingredients: list[Ingredient],
    base_servings: float,
    target_servings: float,
) -> list[Ingredient]:
    """Scale from base_servings to target_servings."""
    if not base_servings:
        raise InvalidRatioError("Base servings must be non-zero")
    return scale_recipe(target_servings / base_servings, ingredients)


def fuzzy_match_candidate(name: str, pool: list[Candidate]) -> Candidate | None:
    """Find the best matching candidate by fuzzy title matching."""
    name_lower = name.lower()

    best_match: tuple[float, Candidate | None] = (0.0, None)

    for c in pool:
        title_lower = c.title.lower()

        if title_lower == name_lower:
            return c

        # Substring match gets a boost
        score = SequenceMatcher(None, name_lower, title_lower).ratio()
        if name_lower in title_lower or title_lower in name_lower:
            score = max(score, 0.8)

        if score > best_match[0]:
            best_match = (score, c)

    if best_match[1] and best_match[0] > 0.4:
        return best_match[1]

    return None


def round_to_fraction(qty: float) -> str:
    """Round a quantity to a practical cooking fraction (eighths, thirds, quarters)."""
    if qty == 0:
        return "0"

    whole = int(qty)
    frac_val, frac_str = min(FRACTIONS, key=lambda f: abs((qty - whole) - f[0]))
    if frac_val == 1.0:
        whole, frac_str = whole + 1, ""

    if whole and frac_str:
        return f"{whole} {frac_str}"
    if whole:
        return str(whole)
    return frac_str or f"{qty:.2f}"


def scaled_data(candidate: Candidate, ratio: float) -> dict:
    """Scale a candidate's measured ingredients, returning formatted data."""
    scaled = scale_recipe(ratio, list(candidate.measured))
    return {
        "title": candidate.title,
        "ratio": ratio,
        "items": [
            {
                "name": new.name,
                "original_qty": old.qty,
                "scaled_qty": new.qty,
                "scaled_qty_display": round_to_fraction(new.qty),
                "unit": new.unit.value,
            }
            for old, new in zip(candidate.measured, scaled)
        ],
    }


def format_scaled_markdown(data: dict) -> str:
    """Format a scaled recipe as markdown."""
    lines = [
        f"# {data['title']} (x{data['ratio']:g})",
        "",
        "## Ingredients",
        "",
    ]
    for item in data["items"]:
        unit = "" if item["unit"] == "unit" else f" {item['unit']}"
        lines.append(f"- {item['scaled_qty_display']}{unit} {item['name']}")
    lines.append("")
    return "\n".join(lines)


def format_scaled_json(data: dict) -> str:
    return json.dumps(data, indent=2)


def run_scale(
    pool_path: Path,
    recipe_name: str,
    ratio: float,
    output_format: str = "markdown",
) -> None:
    """CLI entry point for scale command."""
    from meal_scheduler.indexer import load_pool

    try:
        pool = load_pool(pool_path)
    except (FileNotFoundError, ValueError) as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)

    candidate = fuzzy_match_candidate(recipe_name, pool)

    if not candidate:
        print(f"Recipe not found: {recipe_name}", file=sys.stderr)
        sys.exit(1)

    if not candidate.measured:
        print(f"Recipe '{candidate.title}' has no measured ingredients.", file=sys.stderr)
        sys.exit(1)

    try:
        data = scaled_data(candidate, ratio)
    except InvalidRatioError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)

    if output_format == "json":
        print(format_scaled_json(data))
    else:
        print(format_scaled_markdown(data))
