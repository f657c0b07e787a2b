import pytest
from meal_scheduler.models import (
    Candidate,
    Constraints,
    Ingredient,
    PlanOptions,
    PriceEntry,
    Unit,
    Weights,
)


def make_candidate(
    id: str,
    title: str | None = None,
    minutes: float = 30,
    cost: float = 5.0,
    ingredients: tuple[str, ...] = (),
    tags: tuple[str, ...] = (),
    **kwargs,
) -> Candidate:
    return Candidate(
        id=id,
        title=title or id.replace("-", " ").title(),
        minutes=minutes,
        cost=cost,
        ingredients=ingredients,
        tags=tags,
        **kwargs,
    )


@pytest.fixture
def untagged_pool() -> list[Candidate]:
    """Five untagged lunch/dinner candidates with distinct cost and time."""
    return [
        make_candidate("lentil-soup", minutes=40, cost=3.0, ingredients=("lentils", "onion")),
        make_candidate("chicken-rice", minutes=25, cost=6.0, ingredients=("chicken", "rice")),
        make_candidate("veggie-pasta", minutes=20, cost=4.0, ingredients=("pasta", "tomato")),
        make_candidate("beef-tacos", minutes=35, cost=8.0, ingredients=("beef", "tortilla")),
        make_candidate("tofu-stir-fry", minutes=15, cost=5.0, ingredients=("tofu", "rice")),
    ]


@pytest.fixture
def tagged_pool() -> list[Candidate]:
    """Candidates covering breakfast, lunch, dinner and snack."""
    return [
        make_candidate("oatmeal", minutes=10, cost=1.5, ingredients=("oats", "milk"),
                       tags=("slot:breakfast",)),
        make_candidate("yogurt-bowl", minutes=5, cost=2.0, ingredients=("yogurt", "berries"),
                       tags=("slot:breakfast", "prot:dairy")),
        make_candidate("caesar-salad", minutes=15, cost=5.0, ingredients=("lettuce", "parmesan"),
                       tags=("slot:lunch",)),
        make_candidate("chicken-curry", minutes=45, cost=9.0, ingredients=("chicken", "rice"),
                       tags=("slot:dinner", "prot:chicken", "cuisine:in")),
        make_candidate("salmon-bake", minutes=30, cost=12.0, ingredients=("salmon", "potato"),
                       tags=("slot:dinner", "prot:salmon")),
        make_candidate("granola-bar", minutes=0, cost=1.0, ingredients=("oats", "honey"),
                       tags=("slot:snack",)),
    ]


@pytest.fixture
def price_book() -> dict[str, PriceEntry]:
    return {
        "milk": PriceEntry(unit=Unit.ML, amount_per_unit=0.00125),
        "flour": PriceEntry(unit=Unit.G, amount_per_unit=0.002),
        "egg": PriceEntry(unit=Unit.UNIT, amount_per_unit=0.25),
    }


@pytest.fixture
def pancake_ingredients() -> list[Ingredient]:
    return [
        Ingredient(name="milk", qty=500, unit=Unit.ML),
        Ingredient(name="flour", qty=300, unit=Unit.G),
        Ingredient(name="egg", qty=2, unit=Unit.UNIT),
        Ingredient(name="spinach", qty=100, unit=Unit.G),
    ]


@pytest.fixture
def candidate_factory():
    return make_candidate


@pytest.fixture
def default_weights() -> Weights:
    return Weights()


@pytest.fixture
def no_constraints() -> Constraints:
    return Constraints()


@pytest.fixture
def week_options() -> PlanOptions:
    return PlanOptions(meals_per_day=2, days=7, max_repeats_per_week=3)
