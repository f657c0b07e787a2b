"""Slot compatibility: which candidates may fill which meal slot."""

from __future__ import annotations

from enum import Enum

from meal_scheduler.candidates import CandidateMeta
from meal_scheduler.models import Slot


class SlotRule(Enum):
    EXACT = "exact"
    BROADENED = "broadened"


MEALS_PER_DAY_SLOTS: dict[int, list[Slot]] = {
    1: [Slot.DINNER],
    2: [Slot.LUNCH, Slot.DINNER],
    3: [Slot.BREAKFAST, Slot.LUNCH, Slot.DINNER],
    4: [Slot.BREAKFAST, Slot.LUNCH, Slot.DINNER, Slot.SNACK],
}

# Untagged candidates are implicitly midday/evening meals
UNTAGGED_SLOTS = frozenset({Slot.LUNCH, Slot.DINNER})

# Neighbours accepted once the slot rule is broadened. None stands for
# "untagged candidate".
BROADENED_NEIGHBOURS: dict[Slot, tuple[Slot | None, ...]] = {
    Slot.BREAKFAST: (Slot.BREAKFAST, Slot.SNACK),
    Slot.LUNCH: (Slot.LUNCH, Slot.DINNER, None),
    Slot.DINNER: (Slot.DINNER, Slot.LUNCH, None),
    Slot.SNACK: (Slot.SNACK, Slot.BREAKFAST, Slot.LUNCH),
    Slot.DESSERT: (Slot.DESSERT, Slot.SNACK),
}


def slots_for_meals_per_day(meals_per_day: int) -> list[Slot]:
    if meals_per_day <= 1:
        return list(MEALS_PER_DAY_SLOTS[1])
    return list(MEALS_PER_DAY_SLOTS[min(meals_per_day, 4)])


def matches_exact(meta: CandidateMeta, slot: Slot) -> bool:
    if not meta.slot_tagged:
        return slot in UNTAGGED_SLOTS
    return meta.slot is slot


def is_slot_compatible(meta: CandidateMeta, slot: Slot, rule: SlotRule) -> bool:
    if rule is SlotRule.EXACT:
        return matches_exact(meta, slot)
    for neighbour in BROADENED_NEIGHBOURS[slot]:
        if neighbour is None:
            if not meta.slot_tagged:
                return True
        elif matches_exact(meta, neighbour):
            return True
    return False
