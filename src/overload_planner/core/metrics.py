"""
Pure metric computation functions.

Groups historical sets into workouts, scores each workout against a goal's
rep range, and measures success/failure streaks.  All functions are pure
and typed for testability.
"""

import math
from typing import Literal, Sequence

from .config import OUTCOME_SET_RATIO
from .models import HistoricalSet, HistoricalWorkout, RepRange, SetOutcome
from .units import convert_weight


def mean(values: Sequence[float]) -> float | None:
    """Arithmetic mean, or None for an empty sequence."""
    if not values:
        return None
    return sum(values) / len(values)


def group_recent_workouts(
    sets: Sequence[HistoricalSet],
    analysis_workout_count: int = 3,
) -> list[HistoricalWorkout]:
    """
    Group set rows into workouts and keep the most recent ones.

    Sets inside a workout are ordered by set_index ascending; workouts are
    ordered by started_at descending (most recent first).  Python's sort is
    stable, so workouts sharing a start time keep their first-seen order.

    Args:
        sets: Historical set rows for one exercise (any order)
        analysis_workout_count: How many workouts to keep

    Returns:
        Up to analysis_workout_count workouts, newest first
    """
    by_workout: dict[str, HistoricalWorkout] = {}

    for s in sets:
        workout = by_workout.get(s.workout_session_id)
        if workout is None:
            by_workout[s.workout_session_id] = HistoricalWorkout(
                workout_session_id=s.workout_session_id,
                started_at=s.started_at,
                sets=[s],
            )
        else:
            workout.sets.append(s)

    workouts = [
        HistoricalWorkout(
            workout_session_id=w.workout_session_id,
            started_at=w.started_at,
            sets=sorted(w.sets, key=lambda s: s.set_index),
        )
        for w in by_workout.values()
    ]
    workouts.sort(key=lambda w: w.started_at, reverse=True)

    return workouts[:analysis_workout_count]


def working_sets(workout: HistoricalWorkout) -> list[HistoricalSet]:
    """
    Get the sets that count for progression analysis.

    Working set = not a warm-up, with both reps and weight recorded.
    """
    return [
        s for s in workout.sets
        if s.type != "WARMUP" and s.weight is not None and s.reps is not None
    ]


def outcome_threshold(set_count: int) -> int:
    """
    Number of sets needed for a success or failure verdict.

    threshold = ceil(set_count × 0.67)
    """
    return math.ceil(set_count * OUTCOME_SET_RATIO)


def evaluate_workout_outcome(
    workout: HistoricalWorkout,
    rep_range: RepRange,
    preferred_unit: str,
) -> SetOutcome:
    """
    Score one workout against the goal's rep range.

    success = #(reps ≥ rep_range.max) ≥ ceil(n × 0.67)
    failure = #(reps < rep_range.min) ≥ ceil(n × 0.67)

    Both flags are computed independently.  Weights recorded without a unit
    are taken to be in the preferred unit.

    Args:
        workout: Grouped workout
        rep_range: Goal rep range
        preferred_unit: Unit for average_weight

    Returns:
        SetOutcome; neutral (False, False, None, None) without working sets
    """
    sets = working_sets(workout)

    if not sets:
        return SetOutcome(success=False, failure=False, average_reps=None, average_weight=None)

    reps_values = [s.reps for s in sets]
    weights = [
        convert_weight(s.weight, s.weight_unit or preferred_unit, preferred_unit)  # type: ignore[arg-type]
        for s in sets
    ]

    threshold = outcome_threshold(len(reps_values))
    success_sets = sum(1 for r in reps_values if r >= rep_range.max)
    failure_sets = sum(1 for r in reps_values if r < rep_range.min)

    return SetOutcome(
        success=success_sets >= threshold,
        failure=failure_sets >= threshold,
        average_reps=mean(reps_values),  # type: ignore[arg-type]
        average_weight=mean(weights),
    )


def count_consecutive_outcomes(
    outcomes: Sequence[SetOutcome],
    key: Literal["success", "failure"],
) -> int:
    """
    Length of the leading run of outcomes where `key` is True.

    Outcomes must be ordered most recent first.  A neutral or mixed outcome
    ends both the success and the failure streak.
    """
    streak = 0
    for outcome in outcomes:
        if not getattr(outcome, key):
            break
        streak += 1
    return streak
