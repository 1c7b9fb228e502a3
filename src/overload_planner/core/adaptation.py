"""
Load/volume policy: baseline, streak progression and fatigue override.

The policy is an ordered pipeline of pure steps over a Prescription:

    baseline_prescription → apply_streak_progression → apply_fatigue_adjustment

Each step returns a new Prescription; reasons accumulate as an ordered
tuple of fragments and are joined once by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from .config import (
    BARBELL_MIN_WEIGHT_KG,
    DUMBBELL_WEIGHT_RANGE_KG,
    MACHINE_WEIGHT_RANGE_KG,
    MAX_EXTRA_WORKING_SETS,
    MIN_WORKING_SETS_UNDER_FATIGUE,
)
from .equipment import (
    classify_equipment,
    get_weight_increment,
    is_lower_body,
    round_half_up,
    round_load_change,
    round_to_available_increment,
    round_to_two_decimals,
)
from .metrics import working_sets
from .models import GoalConfig, HistoricalWorkout, MuscleFatigueContext, SetOutcome
from .rules import DEFAULT_RULES, ProgressionRules
from .units import convert_weight

NO_HISTORY_REASON = "No prior completed sessions. Using conservative muscle-group defaults."
HISTORY_BASELINE_REASON = "Using last workout performance as the baseline."
DOUBLE_PROGRESSION_REASON = "Progressing reps first at the same load (double progression)."
LOW_FATIGUE_REASON = "Weekly muscle workload is low, adding one working set for productive volume."


@dataclass(frozen=True)
class Prescription:
    """Working weight (None for unloaded exercises), reps, sets and reasons."""

    weight: float | None
    reps: int
    sets: int
    reasons: tuple[str, ...] = ()


def format_number(value: float) -> str:
    """Render 10.0 as "10" and 2.5 as "2.5"."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def fallback_working_weight_kg(
    primary_muscle: str | None,
    equipment: str | None,
    goal: str,
    rules: ProgressionRules = DEFAULT_RULES,
) -> float | None:
    """
    Starting load in kg for an exercise with no usable history.

    weight = base_weight(muscle) × goal_multiplier, then clamped per class:
      barbell  : ≥ 20
      dumbbell : 6–18
      machine  : 10–40

    Returns None for bodyweight equipment.
    """
    eq_class = classify_equipment(equipment)
    if eq_class == "bodyweight":
        return None

    weight = rules.base_weight_kg(primary_muscle) * rules.goal_weight_multipliers[goal]

    if eq_class == "barbell":
        return max(weight, BARBELL_MIN_WEIGHT_KG)
    if eq_class == "dumbbell":
        low, high = DUMBBELL_WEIGHT_RANGE_KG
        return max(low, min(high, weight))
    if eq_class == "machine":
        low, high = MACHINE_WEIGHT_RANGE_KG
        return max(low, min(high, weight))
    return weight


def baseline_prescription(
    latest_workout: HistoricalWorkout | None,
    latest_outcome: SetOutcome | None,
    goal_config: GoalConfig,
    is_weighted: bool,
    fallback_weight_kg: float | None,
    unit: str,
    equipment: str | None,
) -> Prescription:
    """
    Derive the starting point from the latest workout (or defaults).

    reps   = round(latest mean reps) or round(rep-range midpoint), clamped
    sets   = max(default sets, latest working-set count)
    weight = latest mean weight or converted fallback, rounded to the
             nearest increment; None unless the exercise is weighted

    Args:
        latest_workout: Most recent grouped workout, or None
        latest_outcome: Outcome of latest_workout, or None
        goal_config: Goal parameters
        is_weighted: False for bodyweight and timed exercises
        fallback_weight_kg: No-history load in kg (None for bodyweight)
        unit: Preferred unit
        equipment: Equipment tag

    Returns:
        Baseline Prescription
    """
    rep_range = goal_config.rep_range

    average_reps = latest_outcome.average_reps if latest_outcome else None
    if average_reps is not None:
        reps = round_half_up(average_reps)
    else:
        reps = round_half_up(rep_range.midpoint)

    latest_count = len(working_sets(latest_workout)) if latest_workout else 0
    sets = max(goal_config.default_working_sets, latest_count)

    weight: float | None = None
    if is_weighted:
        weight = latest_outcome.average_weight if latest_outcome else None
        if weight is None and fallback_weight_kg is not None:
            weight = convert_weight(fallback_weight_kg, "kg", unit)
        if weight is not None:
            weight = round_to_available_increment(weight, unit, equipment)

    reason = HISTORY_BASELINE_REASON if latest_workout else NO_HISTORY_REASON
    return Prescription(weight=weight, reps=rep_range.clamp(reps), sets=sets, reasons=(reason,))


def apply_streak_progression(
    p: Prescription,
    *,
    has_history: bool,
    success_streak: int,
    failure_streak: int,
    streak_threshold: int,
    goal_config: GoalConfig,
    primary_muscle: str | None,
    unit: str,
    equipment: str | None,
) -> Prescription:
    """
    Apply load progression, deload or double progression.

    Only runs with history; the chosen branch's reason replaces the
    baseline reason.

      success streak ≥ threshold (weight known): weight × (1 + pct) rounded
          up, reps = range min
      failure streak ≥ threshold (weight known): weight × (1 − deload)
          rounded to nearest; if not strictly lower, weight − increment
          (never below one increment); reps = range min
      otherwise: reps + 1, clamped
    """
    if not has_history:
        return p

    rep_range = goal_config.rep_range

    if success_streak >= streak_threshold and p.weight is not None:
        pct = (
            goal_config.lower_body_increase_percent
            if is_lower_body(primary_muscle)
            else goal_config.upper_body_increase_percent
        )
        return replace(
            p,
            weight=round_load_change(p.weight * (1 + pct), unit, equipment, "up"),
            reps=rep_range.min,
            reasons=(
                f"{success_streak} successful sessions. "
                f"Increased load by {round_half_up(pct * 100)}%.",
            ),
        )

    if failure_streak >= streak_threshold and p.weight is not None:
        increment = get_weight_increment(unit, equipment)
        deloaded = round_to_available_increment(
            p.weight * (1 - goal_config.deload_percent), unit, equipment
        )
        if deloaded >= p.weight:
            deloaded = round_to_two_decimals(max(increment, p.weight - increment))
        return replace(
            p,
            weight=deloaded,
            reps=rep_range.min,
            reasons=(
                f"{failure_streak} difficult sessions. "
                f"Deloaded by {round_half_up(goal_config.deload_percent * 100)}%.",
            ),
        )

    return replace(p, reps=rep_range.clamp(p.reps + 1), reasons=(DOUBLE_PROGRESSION_REASON,))


def apply_fatigue_adjustment(
    p: Prescription,
    fatigue: MuscleFatigueContext | None,
    *,
    has_history: bool,
    failure_streak: int,
    goal_config: GoalConfig,
    unit: str,
    equipment: str | None,
) -> Prescription:
    """
    Adjust volume for the primary muscle's weekly workload.

    HIGH: sets − 1 (min 2), reps − 1 (clamped); with an active failure
          streak the weight is also cut by the deload percent, rounded down.
    LOW : with history and no failure streak, sets + 1 up to default + 2.
    TARGET or no context: unchanged.
    """
    if fatigue is None:
        return p

    rep_range = goal_config.rep_range

    if fatigue.fatigue_status == "HIGH":
        sets = max(MIN_WORKING_SETS_UNDER_FATIGUE, p.sets - 1)
        weight = p.weight
        if weight is not None and failure_streak > 0:
            weight = round_load_change(
                weight * (1 - goal_config.deload_percent), unit, equipment, "down"
            )

        current = fatigue.current_week_effective_sets
        target_min = fatigue.target_min_sets
        target_max = fatigue.target_max_sets
        current = 0 if current is None else current
        if target_min is None:
            target_min = goal_config.default_working_sets
        if target_max is None:
            target_max = goal_config.default_working_sets + MAX_EXTRA_WORKING_SETS

        reasons = p.reasons + (
            f"Current weekly muscle workload is high ({format_number(current)} effective sets, "
            f"target {format_number(target_min)}-{format_number(target_max)}). "
            "Reduced volume for recovery.",
        )
        if sets < p.sets:
            reasons += (f"Working sets adjusted from {p.sets} to {sets}.",)

        return replace(
            p, weight=weight, reps=rep_range.clamp(p.reps - 1), sets=sets, reasons=reasons
        )

    if fatigue.fatigue_status == "LOW" and has_history and failure_streak == 0:
        sets = min(goal_config.default_working_sets + MAX_EXTRA_WORKING_SETS, p.sets + 1)
        if sets > p.sets:
            return replace(p, sets=sets, reasons=p.reasons + (LOW_FATIGUE_REASON,))

    return p
