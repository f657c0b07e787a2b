"""Hard exclusion filter: diet, allergen, religious and dislike terms."""

from __future__ import annotations

import math
import re

from meal_scheduler.models import Candidate

# Score sentinel for a hard-excluded candidate. Never selectable in any phase.
HARD_BLOCK = math.inf

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")

# Explicit token expansions. Matching is by exact token, so every form that
# should block has to be listed (e.g. "cheese" blocks under dairy only
# because it is in the dairy list).
DIET_TERMS: dict[str, list[str]] = {
    "vegetarian": [
        "beef", "chicken", "poultry", "turkey", "pork", "bacon", "ham",
        "sausage", "lamb", "fish", "salmon", "tuna", "cod", "shrimp",
        "prawn", "crab", "anchovy", "gelatin",
    ],
    "pescatarian": [
        "beef", "chicken", "poultry", "turkey", "pork", "bacon", "ham",
        "sausage", "lamb", "gelatin",
    ],
}
DIET_TERMS["vegan"] = DIET_TERMS["vegetarian"] + [
    "dairy", "milk", "cheese", "butter", "cream", "yogurt", "feta",
    "egg", "eggs", "honey", "mayo",
]

ALLERGEN_TERMS: dict[str, list[str]] = {
    "dairy": ["dairy", "milk", "cheese", "yogurt", "feta", "butter", "cream", "whey", "casein"],
    "egg": ["egg", "eggs", "mayo"],
    "peanut": ["peanut", "peanuts"],
    "tree nut": ["almond", "almonds", "walnut", "walnuts", "pecan", "pecans",
                 "pistachio", "pistachios", "cashew", "cashews", "hazelnut", "hazelnuts"],
    "gluten": ["gluten", "wheat", "pasta", "bread", "tortilla", "semolina", "barley", "rye"],
    "soy": ["soy", "tofu", "soybean", "edamame", "tempeh"],
    "fish": ["fish", "salmon", "tuna", "cod", "anchovy", "sardine"],
    "shellfish": ["shellfish", "shrimp", "prawn", "lobster", "crab"],
    "sesame": ["sesame", "tahini"],
}

RELIGIOUS_TERMS: dict[str, list[str]] = {
    "halal": ["pork", "bacon", "ham", "lard", "gelatin", "wine", "beer", "rum"],
    "kosher": ["pork", "bacon", "ham", "lard", "shellfish", "shrimp", "prawn", "lobster", "crab"],
}

ALLERGEN_ALIASES: dict[str, str] = {
    "milk": "dairy",
    "eggs": "egg",
    "peanuts": "peanut",
    "tree nuts": "tree nut",
    "nut": "tree nut",
    "nuts": "tree nut",
    "wheat": "gluten",
    "soya": "soy",
}


def tokenize(text: str) -> list[str]:
    """Lower-case, strip punctuation and split into word tokens."""
    return _NON_ALNUM.sub(" ", (text or "").lower()).split()


def candidate_text(candidate: Candidate) -> list[str]:
    return [candidate.title, *candidate.ingredients, *candidate.tags]


def candidate_tokens(candidate: Candidate) -> tuple[str, ...]:
    """Token sequence over a candidate's title, ingredients and tags."""
    return tuple(tokenize(" ".join(candidate_text(candidate))))


def _contains_run(tokens: tuple[str, ...], run: list[str]) -> bool:
    n = len(run)
    return any(list(tokens[i:i + n]) == run for i in range(len(tokens) - n + 1))


def is_hard_blocked(tokens: tuple[str, ...], forbid_terms: list[str]) -> bool:
    """True if any forbid term matches the candidate tokens.

    Single-word terms match by exact token membership; multi-word terms
    must appear as a contiguous run of tokens.
    """
    if not forbid_terms:
        return False
    bag = set(tokens)
    for term in forbid_terms:
        parts = tokenize(term)
        if not parts:
            continue
        if len(parts) == 1:
            if parts[0] in bag:
                return True
        elif _contains_run(tokens, parts):
            return True
    return False


def expand_forbid_terms(
    diet: str | None = None,
    allergens: list[str] | None = None,
    religious: str | None = None,
    dislikes: list[str] | None = None,
) -> list[str]:
    """Expand diet, allergen, religious and dislike settings into forbid tokens."""
    terms: set[str] = set()

    if diet:
        terms.update(DIET_TERMS.get(diet.lower().strip(), []))

    for allergen in allergens or []:
        key = allergen.lower().strip()
        key = ALLERGEN_ALIASES.get(key, key)
        # Unknown allergens still block on their own name
        terms.update(ALLERGEN_TERMS.get(key, [key]))

    if religious:
        terms.update(RELIGIOUS_TERMS.get(religious.lower().strip(), []))

    for dislike in dislikes or []:
        d = dislike.lower().strip()
        if d:
            terms.add(d)

    terms.discard("")
    return sorted(terms)
