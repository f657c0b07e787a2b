import json

import pytest
from meal_scheduler.cli import build_parser
from meal_scheduler.planner import run_plan
from meal_scheduler.units import run_convert

POOL_YAML = """
- id: soup
  title: Lentil Soup
  minutes: 40
  ingredients: ["200 g lentils", "1 unit onion"]
- id: pasta
  title: Veggie Pasta
  minutes: 20
  cost: 4
  ingredients: ["250 g pasta", "2 tomato"]
- id: curry
  title: Chickpea Curry
  minutes: 35
  tags: [prot-free]
"""

PRICES_YAML = """
lentils: {unit: kg, amount: 3.0}
onion: {unit: unit, amount: 0.4}
pasta: {unit: g, amount: 0.004}
"""


class TestParser:
    def test_plan_args(self):
        args = build_parser().parse_args([
            "--log-level", "debug", "plan", "pool.yaml",
            "--days", "3", "--meals-per-day", "3", "--budget", "50",
            "--forbid", "peanut", "--strict", "--save-plan",
        ])
        assert args.command == "plan"
        assert args.pool == "pool.yaml"
        assert args.days == 3
        assert args.meals_per_day == 3
        assert args.budget == 50.0
        assert args.strict
        assert args.save_plan == "auto"
        assert args.log_level == "debug"

    def test_convert_args(self):
        args = build_parser().parse_args(["convert", "2", "cups", "ml"])
        assert (args.value, args.from_unit, args.to_unit) == (2.0, "cups", "ml")

    def test_scale_requires_ratio(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["scale", "pool.yaml", "Soup"])

    def test_meals_per_day_choices(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["plan", "pool.yaml", "--meals-per-day", "5"])


class TestRunConvert:
    def test_prints(self, capsys):
        run_convert(2, "cups", "ml")
        assert capsys.readouterr().out.strip() == "2 cup = 480 ml"

    def test_incompatible_exits(self, capsys):
        with pytest.raises(SystemExit) as exc:
            run_convert(1, "g", "ml")
        assert exc.value.code == 1
        assert "Incompatible" in capsys.readouterr().err


class TestRunPlan:
    def _write(self, tmp_path):
        pool = tmp_path / "pool.yaml"
        pool.write_text(POOL_YAML)
        prices = tmp_path / "prices.yaml"
        prices.write_text(PRICES_YAML)
        return pool, prices

    def test_priced_json_plan(self, tmp_path, capsys):
        pool, prices = self._write(tmp_path)
        run_plan(pool, config_path=tmp_path / "none.yaml", price_book_path=prices,
                 days=2, output_format="json")
        data = json.loads(capsys.readouterr().out)
        assert data["summary"]["unfilled"] == 0
        titles = {s["recipe"] for s in data["slots"]}
        # Curry has neither cost nor measured ingredients and is dropped
        assert "Chickpea Curry" not in titles
        soup = next(s for s in data["slots"] if s["recipe"] == "Lentil Soup")
        assert soup["cost"] == 1.0

    def test_strict_exits_on_gaps(self, tmp_path, capsys):
        pool, prices = self._write(tmp_path)
        with pytest.raises(SystemExit) as exc:
            run_plan(pool, config_path=tmp_path / "none.yaml", price_book_path=prices,
                     days=1, meals_per_day=3, strict=True)
        assert exc.value.code == 1
        assert "UNFILLED" in capsys.readouterr().out

    def test_save_plan_and_shopping_list(self, tmp_path, capsys):
        pool, prices = self._write(tmp_path)
        out = tmp_path / "plan.json"
        run_plan(pool, config_path=tmp_path / "none.yaml", price_book_path=prices,
                 days=1, save_plan=str(out), shopping_list=True)
        assert json.loads(out.read_text())["summary"]["days"] == 1
        assert "# Shopping List" in capsys.readouterr().out

    def test_missing_pool_exits(self, tmp_path, capsys):
        with pytest.raises(SystemExit):
            run_plan(tmp_path / "missing.yaml", config_path=tmp_path / "none.yaml")
        assert "not found" in capsys.readouterr().err

    def test_null_weight_reports_invalid_configuration(self, tmp_path, capsys):
        pool, prices = self._write(tmp_path)
        config = tmp_path / "meal-scheduler.yaml"
        config.write_text("weights:\n  weight_cost:\n")
        with pytest.raises(SystemExit) as exc:
            run_plan(pool, config_path=config, price_book_path=prices)
        assert exc.value.code == 1
        assert "Invalid configuration" in capsys.readouterr().err
