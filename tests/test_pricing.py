import json

import pytest
from meal_scheduler.models import Candidate, Ingredient, Unit
from meal_scheduler.pricing import (
    PriceOutcome,
    cost_breakdown,
    format_breakdown_markdown,
    load_price_book,
    parse_price_book,
    price_candidate,
    pricing_coverage,
    round_cents,
    to_price_key,
    total_cost,
)


class TestPriceKey:
    def test_descriptors_stripped(self):
        assert to_price_key("Fresh  Chopped Spinach") == "spinach"
        assert to_price_key("boneless skinless chicken breast") == "chicken breast"

    def test_plain(self):
        assert to_price_key("  Milk ") == "milk"


class TestRoundCents:
    def test_half_up(self):
        assert round_cents(1.725) == 1.73
        assert round_cents(0.125) == 0.13
        assert round_cents(2.0) == 2.0


class TestTotalCost:
    def test_price_table_example(self, price_book, pancake_ingredients):
        # 0.625 + 0.6 + 0.5, spinach has no entry
        assert total_cost(pancake_ingredients, price_book) == 1.73

    def test_converts_to_entry_unit(self, price_book):
        ings = [Ingredient("milk", 1, Unit.L), Ingredient("flour", 0.5, Unit.KG)]
        assert total_cost(ings, price_book) == 2.25

    def test_incompatible_unit_skipped(self, price_book):
        ings = [Ingredient("egg", 100, Unit.G), Ingredient("milk", 100, Unit.ML)]
        assert total_cost(ings, price_book) == 0.13

    def test_empty(self, price_book):
        assert total_cost([], price_book) == 0.0


class TestCostBreakdown:
    def test_rows(self, price_book, pancake_ingredients):
        rows = cost_breakdown(pancake_ingredients, price_book)
        assert [r.name for r in rows] == ["milk", "flour", "egg", "spinach"]
        assert rows[0].cost == 0.63
        assert rows[1].cost == 0.6
        assert rows[2].cost == 0.5
        assert rows[2].priced_as == Unit.UNIT

    def test_missing_entry_has_no_cost(self, price_book, pancake_ingredients):
        spinach = cost_breakdown(pancake_ingredients, price_book)[3]
        assert spinach.cost is None
        assert spinach.outcome == PriceOutcome.NO_PRICE_ENTRY
        assert spinach.priced_as is None

    def test_incompatible_outcome_is_distinct(self, price_book):
        rows = cost_breakdown([Ingredient("egg", 100, Unit.G)], price_book)
        assert rows[0].outcome == PriceOutcome.INCOMPATIBLE_UNIT
        assert rows[0].cost is None

    def test_coverage(self, price_book, pancake_ingredients):
        rows = cost_breakdown(pancake_ingredients, price_book)
        assert pricing_coverage(rows) == 0.75
        assert pricing_coverage([]) == 0.0


class TestPriceCandidate:
    def test_fills_cost_and_confidence(self, price_book, pancake_ingredients):
        c = Candidate(id="p", title="Pancakes", minutes=20, cost=float("nan"),
                      measured=tuple(pancake_ingredients))
        priced = price_candidate(c, price_book)
        assert priced.cost == 1.73
        assert priced.coverage == 0.75
        assert priced.price_confidence == pytest.approx(0.675)
        assert c.coverage is None

    def test_nothing_priced(self, price_book):
        c = Candidate(id="s", title="Salad", minutes=10, cost=0,
                      measured=(Ingredient("spinach", 100, Unit.G),))
        priced = price_candidate(c, price_book)
        assert priced.coverage == 0.0
        assert priced.price_confidence == 0.2

    def test_unmeasured_unchanged(self, price_book):
        c = Candidate(id="x", title="Toast", minutes=5, cost=1.0)
        assert price_candidate(c, price_book) is c


class TestPriceBookLoading:
    def test_parse(self):
        book = parse_price_book({
            "Fresh Milk": {"unit": "liters", "amount": 1.1},
            "egg": {"unit": "each", "amount_per_unit": "0.3"},
            "bad": {"unit": "g"},
            "worse": "1.0",
        })
        assert set(book) == {"milk", "egg"}
        assert book["milk"].unit == Unit.L
        assert book["egg"].amount_per_unit == 0.3

    def test_load_yaml(self, tmp_path):
        p = tmp_path / "prices.yaml"
        p.write_text("flour:\n  unit: kg\n  amount: 1.5\n")
        assert load_price_book(p)["flour"].amount_per_unit == 1.5

    def test_load_json(self, tmp_path):
        p = tmp_path / "prices.json"
        p.write_text(json.dumps({"rice": {"unit": "g", "amount": 0.003}}))
        assert load_price_book(p)["rice"].unit == Unit.G


class TestBreakdownMarkdown:
    def test_notes_skipped_rows(self, price_book, pancake_ingredients):
        rows = cost_breakdown(pancake_ingredients, price_book)
        md = format_breakdown_markdown("Pancakes", rows, 1.73)
        assert "| spinach | 100 | g |  | no price entry |" in md
        assert "- Total: $1.73" in md
