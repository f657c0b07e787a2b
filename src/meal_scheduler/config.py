"""Settings loading with defaults, CLI override merging and model builders."""

from __future__ import annotations

import copy
import logging
from pathlib import Path

import yaml

from meal_scheduler.constraints import expand_forbid_terms
from meal_scheduler.models import Constraints, PlanOptions, TimeWindow, Weights

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "meal-scheduler.yaml"

DEFAULTS = {
    "weights": {
        "weight_cost": 0.5,
        "weight_time": 0.5,
        "diversity_weight": 0.35,
        "budget_over_penalty_rate": 0.1,
        "window_penalty": 0.5,
        "reuse_bonus": 0.05,
    },
    "planning": {
        "days": 7,
        "meals_per_day": 2,
        "max_repeats_per_week": 3,
        "no_adjacent_same_title": True,
    },
    "constraints": {
        "budget_cap": None,
        # day name or 0-based index -> any / le45 / le30
        "day_windows": {},
        "pantry_items": [],
    },
    "preferences": {
        "diet": None,
        "allergens": [],
        "religious": None,
        "dislikes": [],
    },
    "pricing": {
        "price_book": None,
    },
}

DAY_KEYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base, returning a new dict."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(config_path: Path | None = None) -> dict:
    """Load settings from a YAML file, falling back to defaults.

    With no path, meal-scheduler.yaml in the working directory is used if
    present.
    """
    if config_path is None:
        config_path = Path(DEFAULT_CONFIG_FILE)
        if not config_path.exists():
            return copy.deepcopy(DEFAULTS)
    elif not config_path.exists():
        logger.warning("Config file %s not found, using defaults", config_path)
        return copy.deepcopy(DEFAULTS)

    with open(config_path) as f:
        user_config = yaml.safe_load(f) or {}
    if not isinstance(user_config, dict):
        raise ValueError(f"{config_path}: top level must be a mapping")
    logger.debug("Loaded config from %s", config_path)
    return deep_merge(copy.deepcopy(DEFAULTS), user_config)


def _split(raw: object) -> list[str]:
    return [p.strip() for p in str(raw).split(",") if p.strip()]


def apply_cli_overrides(config: dict, **overrides: object) -> dict:
    """Apply CLI argument overrides to config.

    Supports flat keys that map into nested config:
      days -> planning.days
      meals_per_day -> planning.meals_per_day
      budget -> constraints.budget_cap
      cost_weight -> weights.weight_cost (weight_time becomes 1 - cost_weight)
      pantry -> constraints.pantry_items (comma-separated, appended)
      forbid -> preferences.dislikes (comma-separated, appended)
    """
    if overrides.get("days") is not None:
        config["planning"]["days"] = overrides["days"]
    if overrides.get("meals_per_day") is not None:
        config["planning"]["meals_per_day"] = overrides["meals_per_day"]
    if overrides.get("budget") is not None:
        config["constraints"]["budget_cap"] = overrides["budget"]
    if overrides.get("cost_weight") is not None:
        w = float(overrides["cost_weight"])
        config["weights"]["weight_cost"] = w
        config["weights"]["weight_time"] = 1 - w
    if overrides.get("pantry") is not None:
        config["constraints"]["pantry_items"] = (
            list(config["constraints"]["pantry_items"]) + _split(overrides["pantry"])
        )
    if overrides.get("forbid") is not None:
        config["preferences"]["dislikes"] = (
            list(config["preferences"]["dislikes"]) + _split(overrides["forbid"])
        )

    return config


def weights_from_config(config: dict) -> Weights:
    section = config.get("weights", {})
    known = {}
    for k, v in section.items():
        if k not in DEFAULTS["weights"]:
            continue
        try:
            known[k] = float(v)
        except (TypeError, ValueError):
            raise ValueError(f"Weight '{k}' must be a number, got {v!r}") from None
    unknown = set(section) - set(DEFAULTS["weights"])
    if unknown:
        logger.warning("Ignoring unknown weight keys: %s", ", ".join(sorted(unknown)))
    return Weights(**known)


def _day_index(key: object) -> int:
    if isinstance(key, int):
        if key < 0:
            raise ValueError(f"Day index must be non-negative, got {key}")
        return key
    name = str(key).strip().lower()
    if name.isdigit():
        return int(name)
    if name in DAY_KEYS:
        return DAY_KEYS.index(name)
    raise ValueError(f"Unknown day '{key}' in day_windows")


def parse_day_windows(raw: dict | None) -> dict[int, TimeWindow]:
    windows: dict[int, TimeWindow] = {}
    for key, value in (raw or {}).items():
        try:
            window = TimeWindow(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown time window '{value}' for {key}; expected any, le45 or le30"
            ) from None
        windows[_day_index(key)] = window
    return windows


def constraints_from_config(config: dict) -> Constraints:
    section = config.get("constraints", {})
    prefs = config.get("preferences", {})

    cap = section.get("budget_cap")
    if cap is not None:
        cap = float(cap)
        if cap < 0:
            raise ValueError(f"budget_cap must be non-negative, got {cap}")

    return Constraints(
        budget_cap=cap,
        day_windows=parse_day_windows(section.get("day_windows")),
        pantry_items=list(section.get("pantry_items") or []),
        forbid_terms=expand_forbid_terms(
            diet=prefs.get("diet"),
            allergens=prefs.get("allergens") or [],
            religious=prefs.get("religious"),
            dislikes=prefs.get("dislikes") or [],
        ),
    )


def options_from_config(config: dict) -> PlanOptions:
    section = config.get("planning", {})
    return PlanOptions(
        meals_per_day=int(section.get("meals_per_day", 2)),
        days=int(section.get("days", 7)),
        max_repeats_per_week=int(section.get("max_repeats_per_week", 3)),
        no_adjacent_same_title=bool(section.get("no_adjacent_same_title", True)),
    )
