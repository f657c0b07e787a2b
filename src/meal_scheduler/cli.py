"""CLI entry point for the meal scheduler."""

from __future__ import annotations

import argparse
from pathlib import Path


def get_config_path(args: argparse.Namespace) -> Path | None:
    return Path(args.config) if args.config else None


def cmd_plan(args: argparse.Namespace) -> None:
    from meal_scheduler.planner import run_plan

    run_plan(
        pool_path=Path(args.pool),
        config_path=get_config_path(args),
        price_book_path=Path(args.price_book) if args.price_book else None,
        days=args.days,
        meals_per_day=args.meals_per_day,
        budget=args.budget,
        cost_weight=args.cost_weight,
        pantry=args.pantry,
        forbid=args.forbid,
        output_format=args.format,
        shopping_list=args.shopping_list,
        save_plan=args.save_plan,
        strict=args.strict,
    )


def cmd_cost(args: argparse.Namespace) -> None:
    from meal_scheduler.pricing import run_cost

    run_cost(
        pool_path=Path(args.pool),
        price_book_path=Path(args.price_book),
        recipe_name=args.recipe,
        output_format=args.format,
    )


def cmd_convert(args: argparse.Namespace) -> None:
    from meal_scheduler.units import run_convert

    run_convert(args.value, args.from_unit, args.to_unit)


def cmd_scale(args: argparse.Namespace) -> None:
    from meal_scheduler.scaler import run_scale

    run_scale(
        pool_path=Path(args.pool),
        recipe_name=args.recipe,
        ratio=args.ratio,
        output_format=args.format,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="meal-scheduler",
        description="Weekly meal scheduling from a candidate recipe pool",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to settings YAML (default: ./meal-scheduler.yaml if present)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default="info",
        help="Logging verbosity (default: info)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also write logs to this file",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    # plan
    p_plan = sub.add_parser("plan", help="Generate a weekly meal plan")
    p_plan.add_argument("pool", type=str, help="Recipe notes directory or YAML/JSON pool file")
    p_plan.add_argument("--price-book", type=str, help="Price book YAML/JSON; re-prices the pool")
    p_plan.add_argument("--days", type=int)
    p_plan.add_argument("--meals-per-day", type=int, choices=[1, 2, 3, 4])
    p_plan.add_argument("--budget", type=float, help="Weekly budget cap")
    p_plan.add_argument(
        "--cost-weight",
        type=float,
        help="0..1 trade-off: 1 favours cheap meals, 0 favours quick ones",
    )
    p_plan.add_argument(
        "--pantry", type=str, help="Comma-separated ingredients already on hand"
    )
    p_plan.add_argument(
        "--forbid", type=str, help="Comma-separated terms to exclude outright"
    )
    p_plan.add_argument(
        "--shopping-list",
        action="store_true",
        help="Append a shopping list to the plan output",
    )
    p_plan.add_argument(
        "--save-plan",
        nargs="?",
        const="auto",
        default=None,
        help="Save plan JSON to file. Optional path; defaults to meal-plan.json",
    )
    p_plan.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 if any slot is left unfilled",
    )
    p_plan.add_argument(
        "--format", type=str, choices=["json", "markdown"], default="markdown"
    )
    p_plan.set_defaults(func=cmd_plan)

    # cost
    p_cost = sub.add_parser("cost", help="Price recipes against a price book")
    p_cost.add_argument("pool", type=str, help="Recipe notes directory or YAML/JSON pool file")
    p_cost.add_argument("--price-book", type=str, required=True)
    p_cost.add_argument("--recipe", type=str, help="Only this recipe (fuzzy matched)")
    p_cost.add_argument(
        "--format", type=str, choices=["json", "markdown"], default="markdown"
    )
    p_cost.set_defaults(func=cmd_cost)

    # convert
    p_convert = sub.add_parser("convert", help="Convert a quantity between units")
    p_convert.add_argument("value", type=float)
    p_convert.add_argument("from_unit", type=str)
    p_convert.add_argument("to_unit", type=str)
    p_convert.set_defaults(func=cmd_convert)

    # scale
    p_scale = sub.add_parser("scale", help="Scale a recipe's ingredients by a ratio")
    p_scale.add_argument("pool", type=str, help="Recipe notes directory or YAML/JSON pool file")
    p_scale.add_argument("recipe", type=str, help="Recipe name (fuzzy matched)")
    p_scale.add_argument("--ratio", type=float, required=True)
    p_scale.add_argument(
        "--format", type=str, choices=["json", "markdown"], default="markdown"
    )
    p_scale.set_defaults(func=cmd_scale)

    return parser


def main() -> None:
    from meal_scheduler.log import setup_logging

    parser = build_parser()
    args = parser.parse_args()

    log_file = Path(args.log_file) if args.log_file else None
    setup_logging(level=args.log_level, log_file=log_file)

    args.func(args)


if __name__ == "__main__":
    main()
