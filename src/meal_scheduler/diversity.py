"""Week-long repeat tracking for titles and diversity families."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from meal_scheduler.candidates import PoolEntry
from meal_scheduler.models import PlanRecipe, PlanSlot, Slot

# Penalty per prior use of the same protein+cuisine family
FAMILY_FACTOR = 0.35


@dataclass
class SchedulerState:
    """Mutable tracking for a single planning run.

    Counts span the whole plan, not a single day, so the repeat cap and the
    diversity penalty are week-level properties.
    """
    title_counts: Counter = field(default_factory=Counter)
    family_counts: Counter = field(default_factory=Counter)
    running_cost: float = 0.0
    chosen: list[PlanSlot] = field(default_factory=list)

    def title_count(self, entry: PoolEntry) -> int:
        return self.title_counts[entry.title_key]

    def family_count(self, entry: PoolEntry) -> int:
        return self.family_counts[entry.meta.family]

    def appears_on_day(self, day_index: int, title_key: str) -> bool:
        """True if a meal with this title was placed on day_index."""
        return any(
            s.day_index == day_index and s.recipe.title.strip().lower() == title_key
            for s in self.chosen
        )

    def record(
        self,
        entry: PoolEntry,
        day_index: int,
        slot: Slot,
        score: float,
        phase: str,
    ) -> PlanSlot:
        self.title_counts[entry.title_key] += 1
        self.family_counts[entry.meta.family] += 1
        self.running_cost += entry.candidate.cost
        placed = PlanSlot(
            day_index=day_index,
            slot=slot,
            recipe=PlanRecipe.from_candidate(entry.candidate),
            score=score,
            phase=phase,
        )
        self.chosen.append(placed)
        return placed


def diversity_penalty(entry: PoolEntry, state: SchedulerState, weight: float) -> float:
    return weight * state.family_count(entry) * FAMILY_FACTOR
