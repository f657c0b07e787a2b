"""Per-cell candidate scoring. Lower is better."""

from __future__ import annotations

from dataclasses import dataclass

from meal_scheduler.candidates import PoolEntry
from meal_scheduler.constraints import HARD_BLOCK
from meal_scheduler.diversity import SchedulerState, diversity_penalty
from meal_scheduler.models import Candidate, Constraints, TimeWindow, Weights

# Extra weight on normalized cost once the running total is over the budget cap
BUDGET_PRESSURE_FACTOR = 1.25


@dataclass(frozen=True)
class PoolBounds:
    min_cost: float
    max_cost: float
    min_minutes: float
    max_minutes: float

    @classmethod
    def from_pool(cls, pool: list[PoolEntry]) -> PoolBounds:
        if not pool:
            return cls(0.0, 0.0, 0.0, 0.0)
        costs = [e.candidate.cost for e in pool]
        minutes = [e.candidate.minutes for e in pool]
        return cls(min(costs), max(costs), min(minutes), max(minutes))


def normalize(value: float, lo: float, hi: float) -> float:
    """Map value into [0, 1] over [lo, hi]; a degenerate range is the midpoint."""
    if hi <= lo:
        return 0.5
    return max(0.0, min(1.0, (value - lo) / (hi - lo)))


def pantry_overlap(candidate: Candidate, pantry_items: list[str]) -> int:
    if not candidate.ingredients or not pantry_items:
        return 0
    pantry = {p.strip().lower() for p in pantry_items}
    return sum(1 for ing in candidate.ingredients if ing.strip().lower() in pantry)


def exceeds_window(minutes: float, window: TimeWindow) -> bool:
    limit = window.max_minutes
    return limit is not None and minutes > limit


def score_candidate(
    entry: PoolEntry,
    day_index: int,
    bounds: PoolBounds,
    weights: Weights,
    constraints: Constraints,
    state: SchedulerState,
    blocked: bool = False,
) -> float:
    """Weighted cost/time blend with diversity, reuse, window and budget terms."""
    if blocked:
        return HARD_BLOCK

    c = entry.candidate
    cost_n = normalize(c.cost, bounds.min_cost, bounds.max_cost)
    time_n = normalize(c.minutes, bounds.min_minutes, bounds.max_minutes)

    score = weights.weight_cost * cost_n + weights.weight_time * time_n
    score += diversity_penalty(entry, state, weights.diversity_weight)
    score -= weights.reuse_bonus * pantry_overlap(c, constraints.pantry_items)

    if exceeds_window(c.minutes, constraints.window_for(day_index)):
        score += weights.window_penalty

    cap = constraints.budget_cap
    if cap is not None and state.running_cost > cap:
        score += BUDGET_PRESSURE_FACTOR * cost_n

    return score


def budget_overage(total_cost: float, cap: float | None) -> float:
    if cap is None or total_cost <= cap:
        return 0.0
    return total_cost - cap


def budget_overage_penalty(total_cost: float, cap: float | None, rate: float) -> float:
    """Soft weekly penalty, applied once to the plan score when over the cap."""
    return budget_overage(total_cost, cap) * rate
