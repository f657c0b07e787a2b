"""Shopping list generation from a meal plan."""

from __future__ import annotations

import json
import logging
from collections import defaultdict

from meal_scheduler.models import MealPlan, Unit
from meal_scheduler.pricing import to_price_key
from meal_scheduler.units import to_base_unit

logger = logging.getLogger(__name__)

# Checked in order; the first section with a matching keyword wins
SECTION_KEYWORDS: dict[str, tuple[str, ...]] = {
    "Frozen": ("frozen", "ice cream"),
    "Spices & Condiments": (
        "salt", "black pepper", "cumin", "paprika", "oregano", "thyme",
        "cinnamon", "chili powder", "curry", "turmeric", "cayenne", "nutmeg",
        "garlic powder", "onion powder", "bay leaf", "hot sauce", "mustard",
        "ketchup", "mayo", "honey", "maple syrup", "soy sauce",
    ),
    "Meat & Seafood": (
        "chicken", "beef", "pork", "turkey", "salmon", "shrimp", "fish",
        "sausage", "bacon", "steak", "lamb", "tuna", "cod", "chorizo",
    ),
    "Dairy & Eggs": (
        "cheese", "milk", "cream", "yogurt", "butter", "egg", "parmesan",
        "mozzarella", "cheddar", "ricotta",
    ),
    "Pantry": (
        "rice", "pasta", "noodle", "flour", "sugar", "oil", "vinegar",
        "broth", "stock", "canned", "beans", "lentil", "chickpea", "oats",
        "tortilla", "bread", "tomato paste",
    ),
    "Produce": (
        "lettuce", "tomato", "onion", "garlic", "pepper", "carrot", "celery",
        "potato", "broccoli", "spinach", "kale", "cabbage", "zucchini",
        "mushroom", "avocado", "lemon", "lime", "ginger", "cilantro",
        "parsley", "basil", "cucumber", "apple", "banana", "berry",
    ),
}

SECTION_ORDER = [
    "Produce",
    "Meat & Seafood",
    "Dairy & Eggs",
    "Pantry",
    "Spices & Condiments",
    "Frozen",
    "Other",
]


def classify_section(item_name: str) -> str:
    """Classify an ingredient into a store section."""
    name_lower = item_name.lower()
    for section, keywords in SECTION_KEYWORDS.items():
        if any(kw in name_lower for kw in keywords):
            return section
    return "Other"


def display_quantity(qty: float, base_unit: Unit | None) -> tuple[float, str]:
    """Present a base-unit total in kg or l once it reaches a thousand."""
    if base_unit is None:
        return qty, ""
    if base_unit is Unit.G and qty >= 1000:
        return qty / 1000, Unit.KG.value
    if base_unit is Unit.ML and qty >= 1000:
        return qty / 1000, Unit.L.value
    if base_unit is Unit.UNIT:
        return qty, ""
    return qty, base_unit.value


def _in_pantry(key: str, pantry: set[str]) -> bool:
    return any(p in key or key in p for p in pantry)


def aggregate_ingredients(
    plan: MealPlan,
    pantry_staples: list[str] | None = None,
) -> dict[str, list[dict]]:
    """Sum ingredients across every planned meal, grouped by store section.

    Measured ingredients are summed per (price key, dimension) in base units,
    so 1 cup and 2 tbsp of milk land on one line while 2 eggs and 100 g of
    egg stay separate. Ingredients with no quantity are listed once, unsized.

    Returns:
        dict of section -> list of {item, qty, unit, recipes}
    """
    pantry = {to_price_key(p) for p in (pantry_staples or [])}

    agg: dict[tuple[str, Unit | None], dict] = {}

    def entry_for(key: tuple[str, Unit | None], name: str) -> dict:
        if key not in agg:
            agg[key] = {"item": name.strip(), "qty": 0.0, "unit": key[1], "recipes": []}
        return agg[key]

    for placed in plan.slots:
        recipe = placed.recipe
        measured_keys = set()
        for ing in recipe.measured:
            price_key = to_price_key(ing.name)
            measured_keys.add(price_key)
            if _in_pantry(price_key, pantry):
                continue
            qty, base = to_base_unit(ing.qty, ing.unit)
            entry = entry_for((price_key, base), ing.name)
            entry["qty"] += qty
            if recipe.title not in entry["recipes"]:
                entry["recipes"].append(recipe.title)

        for name in recipe.ingredients:
            price_key = to_price_key(name)
            if price_key in measured_keys or _in_pantry(price_key, pantry):
                continue
            entry = entry_for((price_key, None), name)
            if recipe.title not in entry["recipes"]:
                entry["recipes"].append(recipe.title)

    sections: dict[str, list[dict]] = defaultdict(list)
    for entry in agg.values():
        qty, unit = display_quantity(entry["qty"], entry["unit"])
        sections[classify_section(entry["item"])].append(
            {
                "item": entry["item"],
                "qty": round(qty, 3),
                "unit": unit,
                "recipes": entry["recipes"],
            }
        )

    ordered = {}
    for s in SECTION_ORDER:
        if s in sections:
            ordered[s] = sorted(sections[s], key=lambda x: (x["item"].lower(), x["unit"]))
    return ordered


def build_shopping_sections(
    plan: MealPlan,
    pantry_staples: list[str] | None = None,
) -> dict[str, list[dict]]:
    """Shopping list sections for a plan, minus pantry staples."""
    sections = aggregate_ingredients(plan, pantry_staples)
    if not sections:
        logger.warning("No ingredients to list")
    return sections


def format_qty(qty: float) -> str:
    """Format a quantity as a practical fraction or decimal."""
    if qty == 0:
        return ""

    fractions = {
        0.25: "1/4",
        0.33: "1/3",
        0.5: "1/2",
        0.67: "2/3",
        0.75: "3/4",
    }

    whole = int(qty)
    frac = qty - whole

    # Only small amounts read better as fractions; 250 g stays 250
    if frac > 0 and qty < 10:
        closest = min(fractions, key=lambda f: abs(f - frac))
        if abs(closest - frac) < 0.05:
            frac_str = fractions[closest]
            return f"{whole} {frac_str}" if whole > 0 else frac_str

    if whole == qty:
        return str(whole)
    return f"{qty:.1f}"


def format_shopping_markdown(sections: dict[str, list[dict]]) -> str:
    """Format aggregated shopping list as markdown with checkboxes."""
    lines = ["# Shopping List", ""]

    for section, items in sections.items():
        lines.append(f"## {section}")
        lines.append("")
        for entry in items:
            qty_str = format_qty(entry["qty"])
            unit_str = f" {entry['unit']}" if entry["unit"] else ""
            if qty_str:
                lines.append(f"- [ ] {qty_str}{unit_str} {entry['item']}")
            else:
                lines.append(f"- [ ] {entry['item']}")
        lines.append("")

    return "\n".join(lines)


def format_shopping_json(sections: dict[str, list[dict]]) -> str:
    """Format aggregated shopping list as JSON."""
    return json.dumps(sections, indent=2)
