"""Candidate pool validation and typed tag metadata."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from meal_scheduler.constraints import candidate_tokens, tokenize
from meal_scheduler.ingredient_groups import normalize_protein_family
from meal_scheduler.models import Candidate, Slot

logger = logging.getLogger(__name__)

SLOT_PREFIX = "slot:"
PROTEIN_PREFIX = "prot:"
CUISINE_PREFIX = "cuisine:"

# Title tokens used as a family key when a candidate has no protein/cuisine tags
TITLE_FAMILY_TOKENS = 3


@dataclass(frozen=True)
class CandidateMeta:
    slot: Slot | None
    slot_tagged: bool
    protein: str | None
    cuisine: str | None
    family: str


@dataclass(frozen=True)
class PoolEntry:
    """A validated candidate with its parsed metadata and filter tokens."""
    candidate: Candidate
    meta: CandidateMeta
    title_key: str
    tokens: tuple[str, ...]


def title_key(title: str) -> str:
    return title.strip().lower()


def _tag_value(tag: str, prefix: str) -> str | None:
    if tag.lower().startswith(prefix):
        return tag[len(prefix):].strip().lower()
    return None


def family_key(
    protein: str | None,
    cuisine: str | None,
    title: str,
    protein_tagged: bool = False,
) -> str:
    """Diversity family: protein+cuisine when tagged, else leading title tokens."""
    if protein_tagged or protein or cuisine:
        return f"prot:{protein or 'none'}|cuisine:{cuisine or 'gen'}"
    return "title:" + "|".join(tokenize(title)[:TITLE_FAMILY_TOKENS])


def parse_tags(tags: tuple[str, ...] | list[str], title: str = "") -> CandidateMeta:
    """Parse prefixed tags once into typed metadata."""
    slot: Slot | None = None
    slot_tagged = False
    protein: str | None = None
    protein_tagged = False
    cuisine: str | None = None

    for tag in tags:
        value = _tag_value(tag, SLOT_PREFIX)
        if value is not None:
            if slot_tagged:
                logger.debug("Extra slot tag '%s' on '%s' ignored", tag, title)
                continue
            slot_tagged = True
            try:
                slot = Slot(value)
            except ValueError:
                logger.warning("Unknown slot tag '%s' on '%s'; it will match no slot", tag, title)
            continue

        value = _tag_value(tag, PROTEIN_PREFIX)
        if value is not None:
            if not protein_tagged:
                protein_tagged = True
                protein = normalize_protein_family(value)
            continue

        value = _tag_value(tag, CUISINE_PREFIX)
        if value and cuisine is None:
            cuisine = value

    return CandidateMeta(
        slot=slot,
        slot_tagged=slot_tagged,
        protein=protein,
        cuisine=cuisine,
        family=family_key(protein, cuisine, title, protein_tagged),
    )


def is_valid(candidate: Candidate) -> bool:
    """Cost and minutes must both be finite numbers."""
    try:
        return math.isfinite(candidate.cost) and math.isfinite(candidate.minutes)
    except TypeError:
        return False


def normalize_pool(candidates: list[Candidate]) -> list[PoolEntry]:
    """Drop candidates with non-finite cost or time and annotate the rest.

    Pool order is preserved; it is the scheduler's tie-break order.
    """
    pool: list[PoolEntry] = []
    for c in candidates:
        if not is_valid(c):
            logger.warning(
                "Dropping '%s': cost=%r minutes=%r is not finite",
                c.title, c.cost, c.minutes,
            )
            continue
        pool.append(
            PoolEntry(
                candidate=c,
                meta=parse_tags(c.tags, c.title),
                title_key=title_key(c.title),
                tokens=candidate_tokens(c),
            )
        )
    if len(pool) < len(candidates):
        logger.info("Candidate pool: kept %d of %d", len(pool), len(candidates))
    return pool
