"""
Weekly muscle workload and volume read models.

Effective sets
--------------
Every qualifying set (not a warm-up, with any of reps/weight/duration)
credits the exercise's muscles:

  primary muscle        : 1.0
  each other secondary  : 0.5

An exercise with no primary muscle promotes its first secondary muscle to
1.0; that muscle still earns its 0.5 secondary credit (1.5 in total).  Set
volume is credited in the same proportion.

Fatigue status
--------------
For the goal's weekly target window [min, max]:

  current < min × 0.8  → LOW
  current > max × 1.1  → HIGH
  otherwise            → TARGET

"Current week" always comes from an explicit `now`; weeks start on Monday
(UTC).
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Mapping, Sequence

from .config import (
    HIGH_FATIGUE_RATIO,
    LOW_FATIGUE_RATIO,
    PRIMARY_MUSCLE_CREDIT,
    SECONDARY_MUSCLE_CREDIT,
    TOP_EXERCISES_PER_MUSCLE,
)
from .equipment import primary_muscle, round_to_two_decimals, secondary_muscles
from .models import (
    Exercise,
    ExerciseAttribute,
    FatigueStatus,
    HistoricalSet,
    LastPerformance,
    MuscleExerciseContribution,
    MuscleFatigueContext,
    MuscleProgressPoint,
    MuscleSetTargets,
    MuscleWeeklyPoint,
    WeeklyVolumePoint,
)
from .rules import DEFAULT_RULES
from .units import convert_weight


def _as_utc(dt: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def week_start(dt: datetime) -> date:
    """Monday (UTC) of the week containing dt."""
    day = _as_utc(dt).date()
    return day - timedelta(days=day.weekday())


def week_key(dt: datetime) -> str:
    """ISO date string of week_start(dt), e.g. "2026-02-16"."""
    return week_start(dt).isoformat()


def set_volume(s: HistoricalSet, target_unit: str) -> float:
    """
    Volume of one set in target_unit.

    volume = reps × weight   (weight converted; unit defaults to kg)
           | reps            (no weight)
           | duration_sec    (neither)
           | 0
    """
    if s.weight is not None and s.reps is not None:
        return s.reps * convert_weight(s.weight, s.weight_unit or "kg", target_unit)
    if s.reps is not None:
        return float(s.reps)
    if s.duration_sec is not None:
        return float(s.duration_sec)
    return 0.0


def is_qualifying_set(s: HistoricalSet) -> bool:
    """Working (non-warm-up) set that recorded something."""
    return s.type != "WARMUP" and s.is_trackable


def muscle_contributions(attributes: Iterable[ExerciseAttribute]) -> list[tuple[str, float]]:
    """
    (muscle, credit) pairs for one exercise.

    Secondary muscles are de-duplicated and never repeat the tagged primary
    muscle.  A promoted first secondary keeps its 0.5 secondary credit too.
    """
    attributes = list(attributes)
    tagged_primary = primary_muscle(attributes)
    secondaries = list(dict.fromkeys(secondary_muscles(attributes)))

    if tagged_primary is None and not secondaries:
        return []

    credited = tagged_primary if tagged_primary is not None else secondaries[0]

    contributions = [(credited, PRIMARY_MUSCLE_CREDIT)]
    contributions.extend(
        (muscle, SECONDARY_MUSCLE_CREDIT) for muscle in secondaries if muscle != tagged_primary
    )
    return contributions


def fatigue_status(effective_sets: float, targets: MuscleSetTargets) -> FatigueStatus:
    if effective_sets < targets.min_sets * LOW_FATIGUE_RATIO:
        return "LOW"
    if effective_sets > targets.max_sets * HIGH_FATIGUE_RATIO:
        return "HIGH"
    return "TARGET"


def aggregate_muscle_progress(
    sets: Sequence[HistoricalSet],
    exercises: Mapping[str, Exercise],
    goal: str = "HYPERTROPHY",
    target_unit: str = "lbs",
    now: datetime | None = None,
    targets: MuscleSetTargets | None = None,
) -> list[MuscleProgressPoint]:
    """
    Summarise weekly effective sets and volume per muscle.

    Args:
        sets: Completed set rows; each needs exercise_id to be credited
        exercises: Catalog by exercise id (for attributes and names)
        goal: Training goal selecting the weekly target window
        target_unit: Unit for volume figures
        now: Reference time for "current week" (defaults to UTC now)
        targets: Override for the goal's target window

    Returns:
        One point per muscle, sorted by current-week effective sets
        descending.  Empty if nothing qualifies.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    if targets is None:
        targets = DEFAULT_RULES.muscle_set_targets[goal]

    current_key = week_key(now)
    weekly: dict[str, dict[str, list[float]]] = {}
    per_exercise: dict[str, dict[str, list]] = {}

    for s in sets:
        if not is_qualifying_set(s) or s.exercise_id is None:
            continue
        exercise = exercises.get(s.exercise_id)
        if exercise is None:
            continue

        contributions = muscle_contributions(exercise.attributes)
        if not contributions:
            continue

        key = week_key(s.started_at)
        volume = set_volume(s, target_unit)

        for muscle, credit in contributions:
            bucket = weekly.setdefault(muscle, {}).setdefault(key, [0.0, 0.0])
            bucket[0] += credit
            bucket[1] += volume * credit

            entry = per_exercise.setdefault(muscle, {}).setdefault(
                exercise.exercise_id, [exercise.name or exercise.exercise_id, 0.0]
            )
            entry[1] += credit

    points: list[MuscleProgressPoint] = []
    midpoint = (targets.min_sets + targets.max_sets) / 2

    for muscle, weeks in weekly.items():
        current_sets, current_volume = weeks.get(current_key, [0.0, 0.0])

        series = tuple(
            MuscleWeeklyPoint(
                week_start=k,
                effective_sets=round_to_two_decimals(v[0]),
                total_volume=round_to_two_decimals(v[1]),
            )
            for k, v in sorted(weeks.items())
        )

        ranked = sorted(per_exercise[muscle].items(), key=lambda item: item[1][1], reverse=True)
        top = tuple(
            MuscleExerciseContribution(
                exercise_id=ex_id,
                exercise_name=name,
                effective_sets=round_to_two_decimals(effective),
            )
            for ex_id, (name, effective) in ranked[:TOP_EXERCISES_PER_MUSCLE]
        )

        points.append(
            MuscleProgressPoint(
                muscle=muscle,
                fatigue_status=fatigue_status(current_sets, targets),
                current_week_effective_sets=round_to_two_decimals(current_sets),
                current_week_total_volume=round_to_two_decimals(current_volume),
                target_min_sets=targets.min_sets,
                target_max_sets=targets.max_sets,
                fatigue_ratio=round_to_two_decimals(current_sets / midpoint) if midpoint > 0 else 0.0,
                weekly=series,
                top_exercises=top,
            )
        )

    points.sort(key=lambda p: p.current_week_effective_sets, reverse=True)
    return points


def fatigue_context_for(
    points: Iterable[MuscleProgressPoint],
    muscle: str | None,
) -> MuscleFatigueContext | None:
    """Engine fatigue context for one muscle, or None if it was not trained."""
    if muscle is None:
        return None
    for point in points:
        if point.muscle == muscle:
            return MuscleFatigueContext(
                fatigue_status=point.fatigue_status,
                current_week_effective_sets=point.current_week_effective_sets,
                target_min_sets=point.target_min_sets,
                target_max_sets=point.target_max_sets,
            )
    return None


def aggregate_weekly_volume(
    sets: Sequence[HistoricalSet],
    target_unit: str = "kg",
) -> list[WeeklyVolumePoint]:
    """
    Total volume and set count per week, ascending by week.

    Every set with positive volume counts, warm-ups included.
    """
    totals: dict[str, list[float]] = {}

    for s in sets:
        volume = set_volume(s, target_unit)
        if volume <= 0:
            continue
        bucket = totals.setdefault(week_key(s.started_at), [0.0, 0])
        bucket[0] += volume
        bucket[1] += 1

    return [
        WeeklyVolumePoint(
            week_start=k,
            total_volume=round_to_two_decimals(v[0]),
            sets_count=int(v[1]),
        )
        for k, v in sorted(totals.items())
    ]


def last_performance(
    sets: Sequence[HistoricalSet],
    exercise_id: str,
) -> LastPerformance | None:
    """
    Latest trackable set of the exercise's most recent session.

    Only the most recent session is considered; if none of its sets is
    trackable the result is None.
    """
    own = [s for s in sets if s.exercise_id == exercise_id]
    if not own:
        return None

    latest = max(own, key=lambda s: s.started_at)
    session_sets = sorted(
        (s for s in own if s.workout_session_id == latest.workout_session_id),
        key=lambda s: s.set_index,
        reverse=True,
    )

    for s in session_sets:
        if s.is_trackable:
            return LastPerformance(
                session_id=s.workout_session_id,
                exercise_id=exercise_id,
                started_at=s.started_at,
                set_index=s.set_index,
                type=s.type,
                reps=s.reps,
                weight=s.weight,
                weight_unit=s.weight_unit,
                duration_sec=s.duration_sec,
            )
    return None


def filter_recent(
    sets: Iterable[HistoricalSet],
    weeks: int,
    now: datetime | None = None,
) -> list[HistoricalSet]:
    """Sets started on or after midnight UTC, weeks × 7 days before now."""
    if now is None:
        now = datetime.now(timezone.utc)
    start_day = _as_utc(now).date() - timedelta(days=weeks * 7)
    cutoff = datetime.combine(start_day, time.min, tzinfo=timezone.utc)
    return [s for s in sets if _as_utc(s.started_at) >= cutoff]
