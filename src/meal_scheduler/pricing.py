"""Ingredient and recipe cost against a read-only price book."""

from __future__ import annotations

import dataclasses
import json
import logging
import re
import sys
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from pathlib import Path

import yaml

from meal_scheduler.models import Candidate, Ingredient, PriceBook, PriceEntry, Unit
from meal_scheduler.units import IncompatibleUnitsError, convert, normalize_unit

logger = logging.getLogger(__name__)

DESCRIPTOR_RE = re.compile(
    r"\b(fresh|chopped|diced|minced|boneless|skinless|large|small|organic)\b",
    re.IGNORECASE,
)

# Confidence assigned to a book-priced ingredient, and to a recipe with no priced lines
PRICED_CONFIDENCE = 0.9
UNPRICED_CONFIDENCE = 0.2

CENT = Decimal("0.01")


class PriceOutcome(Enum):
    PRICED = "priced"
    NO_PRICE_ENTRY = "no_price_entry"
    INCOMPATIBLE_UNIT = "incompatible_unit"


@dataclass(frozen=True)
class CostRow:
    name: str
    qty: float
    unit: Unit
    outcome: PriceOutcome
    priced_as: Unit | None = None
    cost: float | None = None


def to_decimal(value: float) -> Decimal:
    # str() keeps the shortest repr, so 0.625 stays 0.625 rather than its binary expansion
    return Decimal(str(value))


def round_cents(value: float | Decimal) -> float:
    """Round half-up to cents."""
    if not isinstance(value, Decimal):
        value = to_decimal(value)
    return float(value.quantize(CENT, rounding=ROUND_HALF_UP))


def normalize_name(name: str) -> str:
    return re.sub(r"\s+", " ", name.strip().lower())


def to_price_key(name: str) -> str:
    """Align a free-text ingredient name to a price book key."""
    return normalize_name(DESCRIPTOR_RE.sub("", name))


def _price_line(ing: Ingredient, price_book: PriceBook) -> tuple[PriceOutcome, PriceEntry | None, float | None]:
    """Price one ingredient, returning the unrounded line cost when priced."""
    entry = price_book.get(to_price_key(ing.name))
    if entry is None:
        return PriceOutcome.NO_PRICE_ENTRY, None, None
    try:
        qty = convert(ing.qty, ing.unit, entry.unit)
    except IncompatibleUnitsError:
        return PriceOutcome.INCOMPATIBLE_UNIT, entry, None
    return PriceOutcome.PRICED, entry, qty * entry.amount_per_unit


def cost_breakdown(ingredients: list[Ingredient], price_book: PriceBook) -> list[CostRow]:
    """Per-ingredient cost rows; cost is None unless the line could be priced."""
    rows: list[CostRow] = []
    for ing in ingredients:
        outcome, entry, line_cost = _price_line(ing, price_book)
        rows.append(
            CostRow(
                name=ing.name,
                qty=ing.qty,
                unit=ing.unit,
                outcome=outcome,
                priced_as=entry.unit if outcome is PriceOutcome.PRICED else None,
                cost=round_cents(line_cost) if line_cost is not None else None,
            )
        )
    return rows


def total_cost(ingredients: list[Ingredient], price_book: PriceBook) -> float:
    """Sum priced ingredient costs, rounding to cents only at the end.

    Ingredients with no price entry, or whose unit dimension does not match
    their price entry, are left out of the sum.
    """
    total = Decimal(0)
    for ing in ingredients:
        outcome, entry, line_cost = _price_line(ing, price_book)
        if outcome is PriceOutcome.PRICED:
            total += to_decimal(line_cost)
        elif outcome is PriceOutcome.INCOMPATIBLE_UNIT:
            logger.debug(
                "Skipping %s: %s does not convert to priced unit %s",
                ing.name, ing.unit.value, entry.unit.value,
            )
        else:
            logger.debug("Skipping %s: no price entry", ing.name)
    return round_cents(total)


def pricing_coverage(rows: list[CostRow]) -> float:
    """Fraction of rows that could be priced."""
    if not rows:
        return 0.0
    priced = sum(1 for r in rows if r.outcome is PriceOutcome.PRICED)
    return priced / len(rows)


def price_candidate(candidate: Candidate, price_book: PriceBook) -> Candidate:
    """Return a copy of candidate with cost, coverage and confidence from the book."""
    if not candidate.measured:
        return candidate

    ingredients = list(candidate.measured)
    rows = cost_breakdown(ingredients, price_book)
    coverage = pricing_coverage(rows)
    confidence = coverage * PRICED_CONFIDENCE if coverage > 0 else UNPRICED_CONFIDENCE

    skipped = [r.name for r in rows if r.outcome is PriceOutcome.INCOMPATIBLE_UNIT]
    if skipped:
        logger.info(
            "%s: unit mismatch with price book for %s",
            candidate.title, ", ".join(skipped),
        )

    return dataclasses.replace(
        candidate,
        cost=total_cost(ingredients, price_book),
        coverage=round(coverage, 4),
        price_confidence=round(confidence, 4),
    )


def parse_price_book(data: dict) -> PriceBook:
    """Build a PriceBook from a mapping of name -> {unit, amount}."""
    book: PriceBook = {}
    for name, raw in (data or {}).items():
        if not isinstance(raw, dict):
            logger.warning("Price entry for '%s' is not a mapping, skipped", name)
            continue
        amount = raw.get("amount", raw.get("amount_per_unit"))
        try:
            amount = float(amount)
        except (TypeError, ValueError):
            logger.warning("Price entry for '%s' has no numeric amount, skipped", name)
            continue
        if amount < 0:
            logger.warning("Price entry for '%s' is negative, skipped", name)
            continue
        book[to_price_key(str(name))] = PriceEntry(
            unit=normalize_unit(raw.get("unit")),
            amount_per_unit=amount,
        )
    return book


def load_price_book(path: Path) -> PriceBook:
    """Load a price book from a YAML or JSON file."""
    with open(path) as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f) or {}
    book = parse_price_book(data)
    logger.info("Loaded %d price entries from %s", len(book), path)
    return book


def format_breakdown_markdown(title: str, rows: list[CostRow], total: float) -> str:
    """Format a per-ingredient cost breakdown as a markdown table."""
    lines = [
        f"# {title}",
        "",
        "| Ingredient | Qty | Unit | Cost | Note |",
        "|------------|-----|------|------|------|",
    ]
    for r in rows:
        cost = f"${r.cost:.2f}" if r.cost is not None else ""
        note = "" if r.outcome is PriceOutcome.PRICED else r.outcome.value.replace("_", " ")
        lines.append(f"| {r.name} | {r.qty:g} | {r.unit.value} | {cost} | {note} |")
    coverage = pricing_coverage(rows)
    lines.append("")
    lines.append(f"- Total: ${total:.2f}")
    lines.append(f"- Priced: {coverage:.0%} of ingredients")
    lines.append("")
    return "\n".join(lines)


def breakdown_to_dict(title: str, rows: list[CostRow], total: float) -> dict:
    return {
        "title": title,
        "total": total,
        "coverage": round(pricing_coverage(rows), 4),
        "rows": [
            {
                "name": r.name,
                "qty": r.qty,
                "unit": r.unit.value,
                "outcome": r.outcome.value,
                "priced_as": r.priced_as.value if r.priced_as else None,
                "cost": r.cost,
            }
            for r in rows
        ],
    }


def run_cost(
    pool_path: Path,
    price_book_path: Path,
    recipe_name: str | None = None,
    output_format: str = "markdown",
) -> None:
    """CLI entry point for cost command."""
    from meal_scheduler.indexer import load_pool
    from meal_scheduler.scaler import fuzzy_match_candidate

    try:
        pool = load_pool(pool_path)
        book = load_price_book(price_book_path)
    except (FileNotFoundError, ValueError) as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)

    if recipe_name:
        candidate = fuzzy_match_candidate(recipe_name, pool)
        if not candidate:
            print(f"Recipe not found: {recipe_name}", file=sys.stderr)
            sys.exit(1)
        pool = [candidate]

    reports = []
    for c in pool:
        ingredients = list(c.measured)
        reports.append(
            (c.title, cost_breakdown(ingredients, book), total_cost(ingredients, book))
        )

    if output_format == "json":
        print(json.dumps([breakdown_to_dict(*r) for r in reports], indent=2))
    else:
        print("\n".join(format_breakdown_markdown(*r) for r in reports))
