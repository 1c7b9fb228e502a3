"""
Recommendation generation for overload-planner.

Turns an exercise's recent history into a concrete prescription for the
next session: working weight, reps and sets, plus the list of suggested
sets (warm-ups first, then working sets).  Deterministic and pure; the
same request always yields the same recommendation.
"""

from .adaptation import (
    Prescription,
    apply_fatigue_adjustment,
    apply_streak_progression,
    baseline_prescription,
    fallback_working_weight_kg,
)
from .config import (
    FALLBACK_WORKING_WEIGHT,
    TIMED_SET_SECONDS,
    TIMED_SET_SECONDS_ENDURANCE,
    WARMUP_DEFAULT_REPS,
    WARMUP_PERCENTAGES,
    WARMUP_REP_SCHEME,
)
from .equipment import (
    equipment_tag,
    exercise_type,
    is_bodyweight_exercise,
    is_timed_exercise,
    normalize_attributes,
    primary_muscle,
    round_load_change,
    round_to_available_increment,
)
from .metrics import count_consecutive_outcomes, evaluate_workout_outcome, group_recent_workouts
from .models import (
    ExerciseRecommendation,
    RecommendationRequest,
    SetType,
    SuggestedWorkoutSet,
)
from .rules import DEFAULT_RULES, ProgressionRules


def create_weighted_set(
    set_index: int,
    weight: float,
    reps: int,
    unit: str,
    set_type: SetType,
    reason: str,
) -> SuggestedWorkoutSet:
    return SuggestedWorkoutSet(
        set_index=set_index,
        type=set_type,
        types=("WEIGHT", "REPS"),
        values_int=(weight, reps),
        units=(unit,),  # type: ignore[arg-type]
        recommendation_reason=reason,
    )


def create_bodyweight_set(set_index: int, reps: int, reason: str) -> SuggestedWorkoutSet:
    return SuggestedWorkoutSet(
        set_index=set_index,
        type="NORMAL",
        types=("REPS",),
        values_int=(reps,),
        recommendation_reason=reason,
    )


def create_timed_set(set_index: int, duration_sec: int, reason: str) -> SuggestedWorkoutSet:
    return SuggestedWorkoutSet(
        set_index=set_index,
        type="NORMAL",
        types=("TIME",),
        values_sec=(duration_sec,),
        recommendation_reason=reason,
    )


def build_warmup_sets(
    working_weight: float,
    unit: str,
    equipment: str | None,
    reason: str,
) -> list[SuggestedWorkoutSet]:
    """
    Ramp-up sets at 60 % and 80 % of the working weight.

    Each load is rounded up to the next increment; a warm-up that would
    reach the working weight is skipped.  Indices stay contiguous from 0.

    Args:
        working_weight: Working load in `unit`
        unit: "kg" or "lbs"
        equipment: Equipment tag
        reason: Recommendation reason attached to every set

    Returns:
        0–2 WARMUP sets
    """
    sets: list[SuggestedWorkoutSet] = []

    for position, percentage in enumerate(WARMUP_PERCENTAGES):
        weight = round_load_change(working_weight * percentage, unit, equipment, "up")
        if weight >= working_weight:
            continue
        reps = WARMUP_REP_SCHEME[position] if position < len(WARMUP_REP_SCHEME) else WARMUP_DEFAULT_REPS
        sets.append(create_weighted_set(len(sets), weight, reps, unit, "WARMUP", reason))

    return sets


def build_exercise_recommendation(
    request: RecommendationRequest,
    rules: ProgressionRules = DEFAULT_RULES,
) -> ExerciseRecommendation:
    """
    Prescribe the next session of one exercise.

    Pipeline:
      1. Classify the exercise from its attributes.
      2. Group the most recent workouts and score them against the goal.
      3. Baseline → streak progression → fatigue adjustment.
      4. Materialise the suggested sets for the exercise's shape.

    Never raises for missing attributes or empty history; those fall back
    to conservative defaults.

    Args:
        request: Exercise attributes, recent sets, options, fatigue context
        rules: Goal table and base weights (defaults to config.py values)

    Returns:
        ExerciseRecommendation
    """
    options = request.options
    goal = options.goal
    unit = options.preferred_unit
    goal_config = rules.goal_config(goal)

    attributes = normalize_attributes(request.attributes)
    muscle = primary_muscle(attributes) or options.fallback_primary_muscle
    equipment = equipment_tag(attributes)
    ex_type = exercise_type(attributes)

    timed = is_timed_exercise(ex_type)
    bodyweight = is_bodyweight_exercise(equipment, ex_type)
    weighted = not timed and not bodyweight

    workouts = group_recent_workouts(request.recent_sets, options.analysis_workout_count)
    outcomes = [evaluate_workout_outcome(w, goal_config.rep_range, unit) for w in workouts]

    success_streak = count_consecutive_outcomes(outcomes, "success")
    failure_streak = count_consecutive_outcomes(outcomes, "failure")

    latest_workout = workouts[0] if workouts else None
    latest_outcome = outcomes[0] if outcomes else None
    has_history = latest_workout is not None

    prescription: Prescription = baseline_prescription(
        latest_workout,
        latest_outcome,
        goal_config,
        is_weighted=weighted,
        fallback_weight_kg=fallback_working_weight_kg(muscle, equipment, goal, rules),
        unit=unit,
        equipment=equipment,
    )
    prescription = apply_streak_progression(
        prescription,
        has_history=has_history,
        success_streak=success_streak,
        failure_streak=failure_streak,
        streak_threshold=options.success_streak_threshold,
        goal_config=goal_config,
        primary_muscle=muscle,
        unit=unit,
        equipment=equipment,
    )
    prescription = apply_fatigue_adjustment(
        prescription,
        request.muscle_fatigue,
        has_history=has_history,
        failure_streak=failure_streak,
        goal_config=goal_config,
        unit=unit,
        equipment=equipment,
    )

    reason = " ".join(prescription.reasons)
    sets: list[SuggestedWorkoutSet] = []
    working_weight: float | None = None

    if timed:
        duration = TIMED_SET_SECONDS_ENDURANCE if goal == "ENDURANCE" else TIMED_SET_SECONDS
        sets = [create_timed_set(i, duration, reason) for i in range(prescription.sets)]
    elif bodyweight:
        sets = [create_bodyweight_set(i, prescription.reps, reason) for i in range(prescription.sets)]
    else:
        working_weight = prescription.weight
        if working_weight is None:
            working_weight = round_to_available_increment(FALLBACK_WORKING_WEIGHT, unit, equipment)

        if options.include_warmup_sets:
            sets.extend(build_warmup_sets(working_weight, unit, equipment, reason))

        first_index = len(sets)
        sets.extend(
            create_weighted_set(first_index + offset, working_weight, prescription.reps, unit, "NORMAL", reason)
            for offset in range(prescription.sets)
        )

    return ExerciseRecommendation(
        exercise_id=request.exercise_id,
        goal=goal,
        working_weight=working_weight,
        working_reps=prescription.reps,
        working_sets=prescription.sets,
        unit=unit,
        success_streak=success_streak,
        failure_streak=failure_streak,
        reason_fragments=prescription.reasons,
        sets=tuple(sets),
    )
