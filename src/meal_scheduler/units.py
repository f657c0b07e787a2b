"""Unit normalization and conversion between mass, volume and count units."""

from __future__ import annotations

import logging
import sys

from meal_scheduler.models import BASE_UNITS, Unit

logger = logging.getLogger(__name__)

# Free-text synonyms (lowercased, stripped) -> canonical unit
UNIT_ALIASES: dict[str, Unit] = {
    "g": Unit.G,
    "gram": Unit.G,
    "grams": Unit.G,
    "kg": Unit.KG,
    "kgs": Unit.KG,
    "kilogram": Unit.KG,
    "kilograms": Unit.KG,
    "ml": Unit.ML,
    "cc": Unit.ML,
    "milliliter": Unit.ML,
    "milliliters": Unit.ML,
    "l": Unit.L,
    "liter": Unit.L,
    "liters": Unit.L,
    "tbsp": Unit.TBSP,
    "tablespoon": Unit.TBSP,
    "tablespoons": Unit.TBSP,
    "tsp": Unit.TSP,
    "teaspoon": Unit.TSP,
    "teaspoons": Unit.TSP,
    "cup": Unit.CUP,
    "cups": Unit.CUP,
    "unit": Unit.UNIT,
    "piece": Unit.UNIT,
    "pieces": Unit.UNIT,
    "pc": Unit.UNIT,
    "pcs": Unit.UNIT,
    "ea": Unit.UNIT,
    "each": Unit.UNIT,
    "whole": Unit.UNIT,
}


class IncompatibleUnitsError(ValueError):
    """Raised when converting between units of different dimensions."""

    def __init__(self, from_unit: Unit, to_unit: Unit) -> None:
        self.from_unit = from_unit
        self.to_unit = to_unit
        super().__init__(
            f"Incompatible unit conversion: {from_unit.value} -> {to_unit.value} "
            f"({from_unit.dimension.value} vs {to_unit.dimension.value})"
        )


def normalize_unit(raw: str | Unit | None) -> Unit:
    """Map a free-text unit to one of the eight canonical units.

    Unrecognized or empty input defaults to the count unit.
    """
    if isinstance(raw, Unit):
        return raw
    key = (raw or "").strip().lower().rstrip(".")
    unit = UNIT_ALIASES.get(key)
    if unit is None:
        logger.debug("Unknown unit %r, treating as count unit", raw)
        return Unit.UNIT
    return unit


def same_dimension(a: Unit, b: Unit) -> bool:
    return a.dimension is b.dimension


def convert(value: float, from_unit: str | Unit, to_unit: str | Unit) -> float:
    """Convert a quantity between two units of the same dimension.

    Normalizes to the dimension's base unit (g, ml, unit) and scales into
    the target. Raises IncompatibleUnitsError across dimensions.
    """
    src = normalize_unit(from_unit)
    dst = normalize_unit(to_unit)
    if src is dst:
        return value
    if not same_dimension(src, dst):
        raise IncompatibleUnitsError(src, dst)
    base = value * src.to_base
    return base / dst.to_base


def to_base_unit(value: float, unit: str | Unit) -> tuple[float, Unit]:
    """Express a quantity in its dimension's base unit."""
    src = normalize_unit(unit)
    base = BASE_UNITS[src.dimension]
    return convert(value, src, base), base


def run_convert(value: float, from_unit: str, to_unit: str) -> None:
    """CLI entry point for convert command."""
    try:
        result = convert(value, from_unit, to_unit)
    except IncompatibleUnitsError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)
    print(f"{value:g} {normalize_unit(from_unit).value} = {result:g} {normalize_unit(to_unit).value}")
