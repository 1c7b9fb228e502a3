"""
Progression rule set injected into the recommendation engine.

DEFAULT_RULES mirrors the constants in config.py.  load_progression_rules()
builds the same structure from the bundled progression.yaml merged with the
user override, falling back to the Python defaults for anything missing.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Any

from .config import (
    DEFAULT_MUSCLE_BASE_WEIGHT_KG,
    GOAL_MUSCLE_SET_TARGETS,
    GOAL_WEIGHT_MULTIPLIERS,
    MUSCLE_BASE_WEIGHTS_KG,
    PROGRESSION_GOALS,
)
from .engine.config_loader import load_model_config
from .models import GOALS, GoalConfig, MuscleSetTargets, RepRange


@dataclass(frozen=True)
class ProgressionRules:
    """Goal table, no-history base weights and weekly muscle set targets."""

    goals: dict[str, GoalConfig] = field(default_factory=lambda: dict(PROGRESSION_GOALS))
    goal_weight_multipliers: dict[str, float] = field(
        default_factory=lambda: dict(GOAL_WEIGHT_MULTIPLIERS)
    )
    muscle_base_weights_kg: dict[str, float] = field(
        default_factory=lambda: dict(MUSCLE_BASE_WEIGHTS_KG)
    )
    default_muscle_base_weight_kg: float = DEFAULT_MUSCLE_BASE_WEIGHT_KG
    muscle_set_targets: dict[str, MuscleSetTargets] = field(
        default_factory=lambda: dict(GOAL_MUSCLE_SET_TARGETS)
    )

    def goal_config(self, goal: str) -> GoalConfig:
        return self.goals[goal]

    def base_weight_kg(self, muscle: str | None) -> float:
        if muscle is None:
            return self.default_muscle_base_weight_kg
        return self.muscle_base_weights_kg.get(muscle, self.default_muscle_base_weight_kg)


DEFAULT_RULES = ProgressionRules()


def _goal_from_dict(raw: dict[str, Any], default: GoalConfig) -> GoalConfig:
    rep_range = raw.get("rep_range", {})
    return GoalConfig(
        rep_range=RepRange(
            min=int(rep_range.get("min", default.rep_range.min)),
            max=int(rep_range.get("max", default.rep_range.max)),
        ),
        default_working_sets=int(raw.get("default_working_sets", default.default_working_sets)),
        upper_body_increase_percent=float(
            raw.get("upper_body_increase_percent", default.upper_body_increase_percent)
        ),
        lower_body_increase_percent=float(
            raw.get("lower_body_increase_percent", default.lower_body_increase_percent)
        ),
        deload_percent=float(raw.get("deload_percent", default.deload_percent)),
    )


def rules_from_config(cfg: dict[str, Any]) -> ProgressionRules:
    """
    Build ProgressionRules from a merged YAML dict.

    Invalid goal sections, multipliers, weekly set windows and base
    weights are reported with warnings.warn and replaced by the built-in
    defaults; nothing in the config raises.

    Args:
        cfg: Dict as returned by load_model_config()

    Returns:
        ProgressionRules
    """
    goals = dict(PROGRESSION_GOALS)
    multipliers = dict(GOAL_WEIGHT_MULTIPLIERS)
    targets = dict(GOAL_MUSCLE_SET_TARGETS)

    for name, raw in (cfg.get("goals") or {}).items():
        if name not in GOALS or not isinstance(raw, dict):
            warnings.warn(f"Ignoring unknown goal section in progression config: {name!r}")
            continue
        try:
            goals[name] = _goal_from_dict(raw, PROGRESSION_GOALS[name])
        except (TypeError, ValueError, AttributeError) as e:
            warnings.warn(f"Invalid goal section {name!r} in progression config: {e}")
            continue

        if "weight_multiplier" in raw:
            try:
                multipliers[name] = float(raw["weight_multiplier"])
            except (TypeError, ValueError) as e:
                warnings.warn(f"Invalid weight_multiplier for goal {name!r}: {e}")

        muscle_sets = raw.get("weekly_muscle_sets")
        if isinstance(muscle_sets, dict):
            try:
                min_sets = float(muscle_sets.get("min", targets[name].min_sets))
                max_sets = float(muscle_sets.get("max", targets[name].max_sets))
            except (TypeError, ValueError) as e:
                warnings.warn(f"Invalid weekly_muscle_sets for goal {name!r}: {e}")
                continue
            if min_sets > max_sets:
                warnings.warn(
                    f"Invalid weekly_muscle_sets for goal {name!r}: min {min_sets} is above max {max_sets}"
                )
                continue
            targets[name] = MuscleSetTargets(min_sets=min_sets, max_sets=max_sets)

    base_weights = dict(MUSCLE_BASE_WEIGHTS_KG)
    default_base = DEFAULT_MUSCLE_BASE_WEIGHT_KG
    base_section = cfg.get("muscle_base_weights_kg") or {}
    if isinstance(base_section, dict):
        for muscle, weight in base_section.items():
            try:
                value = float(weight)
            except (TypeError, ValueError) as e:
                warnings.warn(f"Invalid base weight for muscle {muscle!r}: {e}")
                continue
            if str(muscle).upper() == "DEFAULT":
                default_base = value
            else:
                base_weights[str(muscle).upper()] = value
    else:
        warnings.warn("muscle_base_weights_kg in progression config must be a mapping")

    return ProgressionRules(
        goals=goals,
        goal_weight_multipliers=multipliers,
        muscle_base_weights_kg=base_weights,
        default_muscle_base_weight_kg=default_base,
        muscle_set_targets=targets,
    )


def load_progression_rules() -> ProgressionRules:
    """Load rules from the bundled YAML plus the user override."""
    return rules_from_config(load_model_config())
