"""Weekly meal assignment: greedy scheduling over a phase relaxation ladder."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from meal_scheduler.aggregate import empty_summary, summarize
from meal_scheduler.candidates import PoolEntry, normalize_pool
from meal_scheduler.constraints import HARD_BLOCK, is_hard_blocked
from meal_scheduler.diversity import SchedulerState
from meal_scheduler.models import (
    Candidate,
    Constraints,
    CoverageGap,
    MealPlan,
    PlanOptions,
    Slot,
    Weights,
)
from meal_scheduler.scoring import PoolBounds, score_candidate
from meal_scheduler.slots import SlotRule, is_slot_compatible, slots_for_meals_per_day

logger = logging.getLogger(__name__)

DAY_NAMES = [
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
]


class RepeatRule(Enum):
    UNUSED = "unused"        # title not yet placed this week
    UNDER_CAP = "under_cap"  # placed fewer than max_repeats_per_week times


@dataclass(frozen=True)
class Phase:
    name: str
    repeat_rule: RepeatRule
    slot_rule: SlotRule
    block_adjacent: bool


# Evaluated in order; the first phase with any admissible candidate wins.
PHASES: tuple[Phase, ...] = (
    Phase("A", RepeatRule.UNUSED, SlotRule.EXACT, block_adjacent=False),
    Phase("B", RepeatRule.UNDER_CAP, SlotRule.EXACT, block_adjacent=True),
    Phase("C", RepeatRule.UNDER_CAP, SlotRule.EXACT, block_adjacent=False),
    Phase("D", RepeatRule.UNDER_CAP, SlotRule.BROADENED, block_adjacent=True),
    Phase("E", RepeatRule.UNDER_CAP, SlotRule.BROADENED, block_adjacent=False),
)


def day_label(day_index: int) -> str:
    if day_index < 7:
        return DAY_NAMES[day_index]
    return f"Day {day_index + 1}"


def phase_admits(
    phase: Phase,
    entry: PoolEntry,
    day_index: int,
    slot: Slot,
    state: SchedulerState,
    options: PlanOptions,
) -> bool:
    """Whether entry may fill (day_index, slot) under this phase."""
    used = state.title_count(entry)
    if phase.repeat_rule is RepeatRule.UNUSED:
        if used != 0:
            return False
    elif used >= options.max_repeats_per_week:
        return False

    if not is_slot_compatible(entry.meta, slot, phase.slot_rule):
        return False

    if phase.block_adjacent and options.no_adjacent_same_title:
        if state.appears_on_day(day_index - 1, entry.title_key):
            return False

    return True


def pick_for_slot(
    pool: list[PoolEntry],
    blocked: list[bool],
    day_index: int,
    slot: Slot,
    bounds: PoolBounds,
    weights: Weights,
    constraints: Constraints,
    options: PlanOptions,
    state: SchedulerState,
) -> tuple[PoolEntry, float, Phase] | None:
    """Best-scoring admissible entry from the first phase that admits any.

    Ties keep the earliest entry in pool order.
    """
    for phase in PHASES:
        best: PoolEntry | None = None
        best_score = HARD_BLOCK
        # Blocked entries are filtered here, so score_candidate never sees them
        for entry, is_blocked in zip(pool, blocked):
            if is_blocked:
                continue
            if not phase_admits(phase, entry, day_index, slot, state, options):
                continue
            score = score_candidate(
                entry, day_index, bounds, weights, constraints, state
            )
            if score < best_score:
                best, best_score = entry, score
        if best is not None:
            if phase is not PHASES[0]:
                logger.debug(
                    "%s %s filled in phase %s", day_label(day_index), slot.value, phase.name
                )
            return best, best_score, phase
    return None


def build_meal_plan(
    candidates: list[Candidate],
    weights: Weights,
    constraints: Constraints,
    options: PlanOptions | None = None,
) -> MealPlan:
    """Assign candidates to every day x slot cell.

    Hard-excluded candidates are never placed. Cells that no phase can fill
    are reported in plan.gaps rather than filled with a placeholder.
    """
    options = options or PlanOptions()
    day_slots = slots_for_meals_per_day(options.meals_per_day)

    pool = normalize_pool(candidates)
    if not pool:
        logger.warning("Candidate pool is empty; returning an empty plan")
        return MealPlan(slots=(), summary=empty_summary(options.days, len(day_slots)))

    blocked = [is_hard_blocked(e.tokens, constraints.forbid_terms) for e in pool]
    n_blocked = sum(blocked)
    if n_blocked:
        logger.info("%d of %d candidates hard-excluded", n_blocked, len(pool))

    bounds = PoolBounds.from_pool(pool)
    state = SchedulerState()
    gaps: list[CoverageGap] = []

    for d in range(options.days):
        for slot in day_slots:
            pick = pick_for_slot(
                pool, blocked, d, slot, bounds, weights, constraints, options, state
            )
            if pick is None:
                reason = (
                    "all candidates hard-excluded"
                    if n_blocked == len(pool)
                    else "no admissible candidate after phase E"
                )
                logger.warning("Unfilled: %s %s (%s)", day_label(d), slot.value, reason)
                gaps.append(CoverageGap(day_index=d, slot=slot, reason=reason))
                continue
            entry, score, phase = pick
            state.record(entry, d, slot, score, phase.name)

    summary = summarize(
        state.chosen,
        pool,
        options.days,
        len(day_slots),
        weights,
        constraints,
        unfilled=len(gaps),
    )
    return MealPlan(slots=tuple(state.chosen), summary=summary, gaps=tuple(gaps))


def plan_to_dict(plan: MealPlan) -> dict:
    s = plan.summary
    return {
        "summary": {
            "days": s.days,
            "slots_per_day": s.slots_per_day,
            "total_cost": s.total_cost,
            "avg_minutes": round(s.avg_minutes, 1),
            "avg_coverage": round(s.avg_coverage, 3),
            "avg_price_confidence": round(s.avg_price_confidence, 3),
            "cost_is_estimate": s.cost_is_estimate,
            "unfilled": s.unfilled,
            "score": round(s.score, 4),
            "budget_overage": s.budget_overage,
        },
        "slots": [
            {
                "day": p.day_index,
                "day_name": day_label(p.day_index),
                "slot": p.slot.value,
                "recipe_id": p.recipe.id,
                "recipe": p.recipe.title,
                "minutes": p.recipe.minutes,
                "cost": p.recipe.cost,
                "phase": p.phase,
                "score": round(p.score, 4),
                "ingredients": list(p.recipe.ingredients),
            }
            for p in plan.slots
        ],
        "gaps": [
            {"day": g.day_index, "slot": g.slot.value, "reason": g.reason}
            for g in plan.gaps
        ],
    }


def format_plan_json(plan: MealPlan) -> str:
    """Format a meal plan as JSON."""
    return json.dumps(plan_to_dict(plan), indent=2)


def format_plan_markdown(plan: MealPlan) -> str:
    """Format a meal plan as markdown tables, one per day."""
    s = plan.summary
    lines = [f"# Meal Plan: {s.days} days, {s.slots_per_day} meals/day", ""]

    gaps_by_day: dict[int, list[CoverageGap]] = {}
    for g in plan.gaps:
        gaps_by_day.setdefault(g.day_index, []).append(g)

    for d in range(s.days):
        day_slots = plan.slots_for_day(d)
        day_gaps = gaps_by_day.get(d, [])
        if not day_slots and not day_gaps:
            continue

        lines.append(f"## {day_label(d)}")
        lines.append("")
        lines.append("| Meal | Recipe | Minutes | Cost | Phase |")
        lines.append("|------|--------|---------|------|-------|")

        rows = [(p.slot, p) for p in day_slots] + [(g.slot, None) for g in day_gaps]
        for slot, p in sorted(rows, key=lambda r: list(Slot).index(r[0])):
            if p is None:
                lines.append(f"| {slot.value.title()} | **UNFILLED** | | | |")
                continue
            lines.append(
                f"| {slot.value.title()} "
                f"| {p.recipe.title} "
                f"| {p.recipe.minutes:.0f} "
                f"| ${p.recipe.cost:.2f} "
                f"| {p.phase} |"
            )
        day_cost = sum(p.recipe.cost for p in day_slots)
        lines.append(f"| **Total** | | | **${day_cost:.2f}** | |")
        lines.append("")

    unique_recipes = len({p.recipe.title.strip().lower() for p in plan.slots})
    estimate = " (estimate)" if s.cost_is_estimate else ""

    lines.append("## Weekly Summary")
    lines.append("")
    lines.append(f"- Total cost: ${s.total_cost:.2f}{estimate}")
    if s.budget_overage:
        lines.append(f"- Over budget by: ${s.budget_overage:.2f}")
    lines.append(f"- Average time: {s.avg_minutes:.0f} min")
    lines.append(f"- Pricing coverage: {s.avg_coverage:.0%} (confidence {s.avg_price_confidence:.0%})")
    lines.append(f"- Unique recipes: {unique_recipes}")
    if s.unfilled:
        lines.append(f"- Unfilled slots: {s.unfilled}")
    lines.append("")

    return "\n".join(lines)


def run_plan(
    pool_path: Path,
    config_path: Path | None = None,
    price_book_path: Path | None = None,
    days: int | None = None,
    meals_per_day: int | None = None,
    budget: float | None = None,
    cost_weight: float | None = None,
    pantry: str | None = None,
    forbid: str | None = None,
    output_format: str = "markdown",
    shopping_list: bool = False,
    save_plan: str | None = None,
    strict: bool = False,
) -> None:
    """CLI entry point for plan command."""
    from meal_scheduler.config import (
        apply_cli_overrides,
        constraints_from_config,
        load_config,
        options_from_config,
        weights_from_config,
    )
    from meal_scheduler.indexer import load_pool

    try:
        config = apply_cli_overrides(
            load_config(config_path),
            days=days,
            meals_per_day=meals_per_day,
            budget=budget,
            cost_weight=cost_weight,
            pantry=pantry,
            forbid=forbid,
        )
        weights = weights_from_config(config)
        constraints = constraints_from_config(config)
        options = options_from_config(config)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        candidates = load_pool(pool_path)
        book_path = price_book_path or config["pricing"].get("price_book")
        if book_path:
            from meal_scheduler.pricing import load_price_book, price_candidate

            book = load_price_book(Path(book_path))
            candidates = [price_candidate(c, book) for c in candidates]
    except (FileNotFoundError, ValueError) as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)

    plan = build_meal_plan(candidates, weights, constraints, options)

    plan_json_str = format_plan_json(plan)

    if save_plan is not None:
        save_path = "meal-plan.json" if save_plan == "auto" else save_plan
        with open(save_path, "w") as f:
            f.write(plan_json_str)
        print(f"Plan saved to {save_path}", file=sys.stderr)

    if output_format == "json":
        print(plan_json_str)
    else:
        print(format_plan_markdown(plan))

    if shopping_list:
        from meal_scheduler.shopping import (
            build_shopping_sections,
            format_shopping_json,
            format_shopping_markdown,
        )

        sections = build_shopping_sections(plan, constraints.pantry_items)
        if sections:
            if output_format == "json":
                print(format_shopping_json(sections))
            else:
                print("---")
                print()
                print(format_shopping_markdown(sections))

    if strict and not plan.is_complete:
        sys.exit(1)
