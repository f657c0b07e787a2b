"""Plan summary statistics and display projections."""

from __future__ import annotations

import dataclasses
import logging

from meal_scheduler.candidates import PoolEntry, normalize_pool
from meal_scheduler.constraints import is_hard_blocked
from meal_scheduler.diversity import SchedulerState
from meal_scheduler.models import (
    Candidate,
    Constraints,
    CoverageGap,
    MealPlan,
    PlanRecipe,
    PlanSlot,
    PlanSummary,
    Slot,
    Weights,
)
from meal_scheduler.pricing import round_cents
from meal_scheduler.scoring import (
    PoolBounds,
    budget_overage,
    budget_overage_penalty,
    score_candidate,
)

logger = logging.getLogger(__name__)

# Below this average pricing coverage the plan's totals are approximate
ESTIMATE_COVERAGE_THRESHOLD = 0.7

SLOT_ORDER = list(Slot)


def _avg(values: list[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def empty_summary(days: int, slots_per_day: int) -> PlanSummary:
    return PlanSummary(days=days, slots_per_day=slots_per_day, cost_is_estimate=True)


def summarize(
    chosen: list[PlanSlot],
    pool: list[PoolEntry],
    days: int,
    slots_per_day: int,
    weights: Weights,
    constraints: Constraints,
    unfilled: int = 0,
) -> PlanSummary:
    """Totals over the chosen meals; pricing quality over the whole pool."""
    total_cost = round_cents(sum(s.recipe.cost for s in chosen))
    avg_coverage = _avg([e.candidate.coverage or 0.0 for e in pool])
    avg_confidence = _avg([e.candidate.price_confidence or 0.0 for e in pool])

    penalty = budget_overage_penalty(
        total_cost, constraints.budget_cap, weights.budget_over_penalty_rate
    )
    if penalty:
        logger.info(
            "Plan total %.2f is over the %.2f budget cap",
            total_cost, constraints.budget_cap,
        )

    return PlanSummary(
        days=days,
        slots_per_day=slots_per_day,
        total_cost=total_cost,
        avg_minutes=_avg([s.recipe.minutes for s in chosen]),
        avg_coverage=avg_coverage,
        avg_price_confidence=avg_confidence,
        cost_is_estimate=avg_coverage < ESTIMATE_COVERAGE_THRESHOLD,
        unfilled=unfilled,
        score=sum(s.score for s in chosen) + penalty,
        budget_overage=round_cents(budget_overage(total_cost, constraints.budget_cap)),
    )


def to_matrix(plan: MealPlan) -> list[list[tuple[Slot, PlanRecipe]]]:
    """Day-major view of the plan, each day ordered breakfast to dessert."""
    by_day: list[list[tuple[Slot, PlanRecipe]]] = [[] for _ in range(plan.summary.days)]
    for s in plan.slots:
        by_day[s.day_index].append((s.slot, s.recipe))
    for day in by_day:
        day.sort(key=lambda pair: SLOT_ORDER.index(pair[0]))
    return by_day


def _as_candidate(recipe: PlanRecipe) -> Candidate:
    return Candidate(
        id=recipe.id,
        title=recipe.title,
        minutes=recipe.minutes,
        cost=recipe.cost,
        ingredients=recipe.ingredients,
        steps=recipe.steps,
        measured=recipe.measured,
    )


def rescore_plan(
    plan: MealPlan,
    pool: list[Candidate],
    weights: Weights,
    constraints: Constraints,
) -> MealPlan:
    """Recompute cell scores and the summary for a plan edited after planning.

    Cells are replayed in plan order so the diversity and budget terms see
    the same running state they would have during planning. Recipes that are
    no longer in the pool are scored from their own fields. An edited-in
    recipe without a finite cost or time cannot be scored and its cell becomes
    a coverage gap.
    """
    entries = normalize_pool(pool)
    by_id = {e.candidate.id: e for e in entries}
    bounds = PoolBounds.from_pool(entries)
    state = SchedulerState()
    gaps = list(plan.gaps)

    for s in plan.slots:
        entry = by_id.get(s.recipe.id)
        if entry is None:
            own = normalize_pool([_as_candidate(s.recipe)])
            if not own:
                logger.warning(
                    "Cannot rescore %s on day %d: missing cost or time",
                    s.recipe.title,
                    s.day_index,
                )
                gaps.append(
                    CoverageGap(day_index=s.day_index, slot=s.slot, reason="unscorable recipe")
                )
                continue
            entry = own[0]
        score = score_candidate(
            entry,
            s.day_index,
            bounds,
            weights,
            constraints,
            state,
            blocked=is_hard_blocked(entry.tokens, constraints.forbid_terms),
        )
        state.record(entry, s.day_index, s.slot, score, s.phase)

    summary = summarize(
        state.chosen,
        entries,
        plan.summary.days,
        plan.summary.slots_per_day,
        weights,
        constraints,
        unfilled=len(gaps),
    )
    return dataclasses.replace(
        plan, slots=tuple(state.chosen), gaps=tuple(gaps), summary=summary
    )
