"""Protein family normalization for diversity tracking."""

from __future__ import annotations

# Map raw protein tag values (lowercased) to canonical family names.
PROTEIN_FAMILY_MAP: dict[str, str] = {
    # Poultry
    "chicken": "poultry",
    "turkey": "poultry",
    "duck": "poultry",
    "poultry": "poultry",
    # Beef
    "beef": "beef",
    "steak": "beef",
    "veal": "beef",
    # Pork
    "pork": "pork",
    "ham": "pork",
    "bacon": "pork",
    "sausage": "pork",
    "chorizo": "pork",
    # Lamb
    "lamb": "lamb",
    "mutton": "lamb",
    "goat": "lamb",
    # Seafood
    "fish": "seafood",
    "salmon": "seafood",
    "tuna": "seafood",
    "cod": "seafood",
    "tilapia": "seafood",
    "shrimp": "seafood",
    "prawn": "seafood",
    "crab": "seafood",
    "seafood": "seafood",
    # Legumes / plant protein
    "plant": "legumes",
    "beans": "legumes",
    "chickpeas": "legumes",
    "lentils": "legumes",
    "legumes": "legumes",
    # Soy
    "tofu": "soy",
    "tempeh": "soy",
    "edamame": "soy",
    # Eggs
    "egg": "eggs",
    "eggs": "eggs",
    # Dairy
    "dairy": "dairy",
    "cheese": "dairy",
    "yogurt": "dairy",
}


def normalize_protein_family(raw: str | None) -> str | None:
    """Return the canonical protein family for a tag value.

    Unmapped values are kept as-is (lowercased) so two recipes tagged with
    the same unusual protein still share a family. "none" and empty values
    mean no protein tag.
    """
    if raw is None:
        return None
    key = raw.lower().strip()
    if not key or key == "none":
        return None
    return PROTEIN_FAMILY_MAP.get(key, key)
