"""Shared data models for the meal scheduler."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum


class Dimension(Enum):
    MASS = "mass"
    VOLUME = "volume"
    COUNT = "count"


class Unit(Enum):
    G = "g"
    KG = "kg"
    ML = "ml"
    L = "l"
    TBSP = "tbsp"
    TSP = "tsp"
    CUP = "cup"
    UNIT = "unit"

    @property
    def dimension(self) -> Dimension:
        return _UNIT_TABLE[self][0]

    @property
    def to_base(self) -> float:
        """Factor into the dimension's base unit (g, ml or unit)."""
        return _UNIT_TABLE[self][1]


_UNIT_TABLE: dict[Unit, tuple[Dimension, float]] = {
    Unit.G: (Dimension.MASS, 1.0),
    Unit.KG: (Dimension.MASS, 1000.0),
    Unit.ML: (Dimension.VOLUME, 1.0),
    Unit.L: (Dimension.VOLUME, 1000.0),
    Unit.TBSP: (Dimension.VOLUME, 15.0),
    Unit.TSP: (Dimension.VOLUME, 5.0),
    Unit.CUP: (Dimension.VOLUME, 240.0),
    Unit.UNIT: (Dimension.COUNT, 1.0),
}

BASE_UNITS: dict[Dimension, Unit] = {
    Dimension.MASS: Unit.G,
    Dimension.VOLUME: Unit.ML,
    Dimension.COUNT: Unit.UNIT,
}


@dataclass(frozen=True)
class Ingredient:
    name: str
    qty: float
    unit: Unit


@dataclass(frozen=True)
class PriceEntry:
    unit: Unit
    amount_per_unit: float  # USD per one `unit`


PriceBook = dict[str, PriceEntry]


class Slot(Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"
    DESSERT = "dessert"


class TimeWindow(Enum):
    ANY = "any"
    LE45 = "le45"
    LE30 = "le30"

    @property
    def max_minutes(self) -> int | None:
        if self is TimeWindow.LE45:
            return 45
        if self is TimeWindow.LE30:
            return 30
        return None


@dataclass(frozen=True)
class Candidate:
    """A proposed meal. Read-only once it reaches the scheduler."""
    id: str
    title: str
    minutes: float
    cost: float
    ingredients: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    steps: tuple[str, ...] = ()
    # Quantified ingredient lines, used for pricing and shopping lists
    measured: tuple[Ingredient, ...] = ()
    coverage: float | None = None
    price_confidence: float | None = None


@dataclass
class Weights:
    weight_cost: float = 0.5
    weight_time: float = 0.5
    diversity_weight: float = 0.35
    budget_over_penalty_rate: float = 0.1
    window_penalty: float = 0.5
    reuse_bonus: float = 0.05

    def __post_init__(self) -> None:
        for name in (
            "weight_cost",
            "weight_time",
            "diversity_weight",
            "budget_over_penalty_rate",
            "window_penalty",
            "reuse_bonus",
        ):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"Weight '{name}' must be a non-negative number, got {value!r}")

    @classmethod
    def from_tradeoff(cls, cost_vs_time: float, **kwargs: float) -> Weights:
        """Build weights from a single 0..1 slider (1 = cheapest, 0 = fastest)."""
        w = max(0.0, min(1.0, cost_vs_time))
        return cls(weight_cost=w, weight_time=1 - w, **kwargs)


@dataclass
class Constraints:
    budget_cap: float | None = None
    day_windows: dict[int, TimeWindow] = field(default_factory=dict)
    pantry_items: list[str] = field(default_factory=list)
    forbid_terms: list[str] = field(default_factory=list)

    def window_for(self, day_index: int) -> TimeWindow:
        return self.day_windows.get(day_index, TimeWindow.ANY)


@dataclass
class PlanOptions:
    meals_per_day: int = 2
    days: int = 7
    max_repeats_per_week: int = 3
    no_adjacent_same_title: bool = True

    def __post_init__(self) -> None:
        if not 1 <= self.meals_per_day <= 4:
            raise ValueError(f"meals_per_day must be between 1 and 4, got {self.meals_per_day}")
        if self.days < 1:
            raise ValueError(f"days must be at least 1, got {self.days}")
        if self.max_repeats_per_week < 1:
            raise ValueError(
                f"max_repeats_per_week must be at least 1, got {self.max_repeats_per_week}"
            )


@dataclass(frozen=True)
class PlanRecipe:
    id: str
    title: str
    minutes: float
    cost: float
    ingredients: tuple[str, ...] = ()
    steps: tuple[str, ...] = ()
    measured: tuple[Ingredient, ...] = ()

    @classmethod
    def from_candidate(cls, candidate: Candidate) -> PlanRecipe:
        return cls(
            id=candidate.id,
            title=candidate.title,
            minutes=candidate.minutes,
            cost=candidate.cost,
            ingredients=candidate.ingredients,
            steps=candidate.steps,
            measured=candidate.measured,
        )


@dataclass(frozen=True)
class PlanSlot:
    day_index: int
    slot: Slot
    recipe: PlanRecipe
    score: float = 0.0
    phase: str = "A"


@dataclass(frozen=True)
class CoverageGap:
    day_index: int
    slot: Slot
    reason: str


@dataclass
class PlanSummary:
    days: int
    slots_per_day: int
    total_cost: float = 0.0
    avg_minutes: float = 0.0
    avg_coverage: float = 0.0
    avg_price_confidence: float = 0.0
    cost_is_estimate: bool = True
    unfilled: int = 0
    score: float = 0.0
    budget_overage: float = 0.0


@dataclass
class MealPlan:
    slots: tuple[PlanSlot, ...]
    summary: PlanSummary
    gaps: tuple[CoverageGap, ...] = ()

    @property
    def is_complete(self) -> bool:
        return not self.gaps

    def slots_for_day(self, day: int) -> list[PlanSlot]:
        return [s for s in self.slots if s.day_index == day]

    def titles(self) -> list[str]:
        return [s.recipe.title for s in self.slots]
