"""
Recommendation action: training log + engine for a batch of exercises.

The action checks that the caller owns the log, loads the catalog and set
history, derives this week's muscle workload and builds one
recommendation per requested exercise.  Failures are logged and reported
as a short server error; they are never raised to the caller.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Generic, Sequence, TypeVar

from .core.equipment import primary_muscle
from .core.models import ExerciseRecommendation, HistoricalSet, RecommendationOptions, RecommendationRequest
from .core.muscle_progress import aggregate_muscle_progress, fatigue_context_for, filter_recent
from .core.planner import build_exercise_recommendation
from .core.rules import DEFAULT_RULES, ProgressionRules
from .io.history_store import TrainingLogStore

logger = logging.getLogger(__name__)

UNAUTHORIZED = "Unauthorized"
RECOMMENDATION_FAILED = "Failed to generate workout recommendations"

T = TypeVar("T")


@dataclass(frozen=True)
class ActionResult(Generic[T]):
    """Either data or a short, user-safe server_error."""

    data: T | None = None
    server_error: str | None = None

    @property
    def ok(self) -> bool:
        return self.server_error is None


@dataclass(frozen=True)
class WorkoutRecommendations:
    recommendations: dict[str, ExerciseRecommendation] = field(default_factory=dict)
    goal: str = "HYPERTROPHY"
    preferred_unit: str = "lbs"
    analysis_workout_count: int = 3
    generated_at: datetime | None = None


def get_workout_recommendations(
    store: TrainingLogStore,
    user_id: str,
    session_user_id: str | None,
    exercise_ids: Sequence[str],
    options: RecommendationOptions | None = None,
    fallback_muscles: Sequence[str] = (),
    now: datetime | None = None,
    rules: ProgressionRules = DEFAULT_RULES,
) -> ActionResult[WorkoutRecommendations]:
    """
    Recommend the next session for each requested exercise.

    Unknown exercise ids are skipped.  The first fallback muscle stands in
    for exercises without a primary muscle.

    Args:
        store: Training log of the user
        user_id: User the recommendations are for
        session_user_id: Authenticated caller; must equal user_id
        exercise_ids: Exercises to prescribe, in output order
        options: Engine options (defaults to the profile's goal and unit)
        fallback_muscles: Muscles to assume when an exercise has none
        now: Reference time for the current week
        rules: Progression rule set

    Returns:
        ActionResult with WorkoutRecommendations, or a server_error of
        "Unauthorized" / "Failed to generate workout recommendations"
    """
    if not session_user_id or session_user_id != user_id:
        return ActionResult(server_error=UNAUTHORIZED)

    if now is None:
        now = datetime.now(timezone.utc)

    try:
        profile = store.load_profile()
        if profile.user_id != user_id:
            return ActionResult(server_error=UNAUTHORIZED)

        if options is None:
            options = RecommendationOptions(goal=profile.goal, preferred_unit=profile.preferred_unit)
        if options.fallback_primary_muscle is None and fallback_muscles:
            options = replace(options, fallback_primary_muscle=fallback_muscles[0])

        exercises = store.load_exercises()
        all_sets = store.load_sets()

        progress = aggregate_muscle_progress(
            filter_recent(all_sets, weeks=1, now=now),
            exercises,
            goal=options.goal,
            target_unit=options.preferred_unit,
            now=now,
            targets=rules.muscle_set_targets[options.goal],
        )

        sets_by_exercise: dict[str, list[HistoricalSet]] = {}
        for s in all_sets:
            if s.exercise_id is not None:
                sets_by_exercise.setdefault(s.exercise_id, []).append(s)

        recommendations: dict[str, ExerciseRecommendation] = {}
        for exercise_id in exercise_ids:
            exercise = exercises.get(exercise_id)
            if exercise is None:
                logger.info("Skipping unknown exercise id=%s", exercise_id)
                continue

            muscle = primary_muscle(exercise.attributes) or options.fallback_primary_muscle
            request = RecommendationRequest(
                exercise_id=exercise_id,
                attributes=list(exercise.attributes),
                recent_sets=sets_by_exercise.get(exercise_id, []),
                options=options,
                muscle_fatigue=fatigue_context_for(progress, muscle),
            )
            recommendations[exercise_id] = build_exercise_recommendation(request, rules)
    except Exception:
        logger.exception("Error generating workout recommendations for user=%s", user_id)
        return ActionResult(server_error=RECOMMENDATION_FAILED)

    logger.info("Generated %d recommendation(s) for user=%s", len(recommendations), user_id)
    return ActionResult(
        data=WorkoutRecommendations(
            recommendations=recommendations,
            goal=options.goal,
            preferred_unit=options.preferred_unit,
            analysis_workout_count=options.analysis_workout_count,
            generated_at=now,
        )
    )
