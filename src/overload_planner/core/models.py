"""
Data models for overload-planner.

All core dataclasses representing exercise attributes, historical sets,
workout outcomes, and the prescriptions produced by the engine.
Attribute names and values are plain upper-case strings; the classifier
normalizes any richer shapes before they reach these models.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

WeightUnit = Literal["kg", "lbs"]
Goal = Literal["STRENGTH", "HYPERTROPHY", "ENDURANCE"]
SetType = Literal["NORMAL", "WARMUP", "DROP", "FAILURE", "AMRAP", "BACKOFF"]
SetDimension = Literal["TIME", "WEIGHT", "REPS", "BODYWEIGHT", "NA"]
FatigueStatus = Literal["LOW", "TARGET", "HIGH"]
AttributeName = Literal[
    "PRIMARY_MUSCLE", "SECONDARY_MUSCLE", "EQUIPMENT", "TYPE", "MECHANICS_TYPE"
]

WEIGHT_UNITS: tuple[str, ...] = ("kg", "lbs")
GOALS: tuple[str, ...] = ("STRENGTH", "HYPERTROPHY", "ENDURANCE")
SET_TYPES: tuple[str, ...] = ("NORMAL", "WARMUP", "DROP", "FAILURE", "AMRAP", "BACKOFF")
FATIGUE_STATUSES: tuple[str, ...] = ("LOW", "TARGET", "HIGH")
ATTRIBUTE_NAMES: tuple[str, ...] = (
    "PRIMARY_MUSCLE",
    "SECONDARY_MUSCLE",
    "EQUIPMENT",
    "TYPE",
    "MECHANICS_TYPE",
)


@dataclass(frozen=True)
class ExerciseAttribute:
    """A single (name, value) tag describing an exercise, e.g. EQUIPMENT=BARBELL."""

    name: str
    value: str


@dataclass(frozen=True)
class Exercise:
    """
    Catalog entry for one exercise.

    Reference data only; the engine never mutates it.
    """

    exercise_id: str
    name: str
    attributes: tuple[ExerciseAttribute, ...] = ()


@dataclass
class HistoricalSet:
    """
    One completed (or attempted) set belonging to a workout session.

    Only sets with type != WARMUP and both reps and weight recorded take part
    in outcome evaluation.  A set with none of weight/reps/duration is
    non-trackable.
    """

    workout_session_id: str
    started_at: datetime
    set_index: int
    type: SetType = "NORMAL"
    reps: int | None = None
    weight: float | None = None
    weight_unit: WeightUnit | None = None
    duration_sec: int | None = None
    exercise_id: str | None = None  # only needed for per-muscle aggregation

    def __post_init__(self) -> None:
        """Validate set data."""
        if self.set_index < 0:
            raise ValueError("set_index must be non-negative")
        if self.type not in SET_TYPES:
            raise ValueError(f"Invalid set type: {self.type}")
        if self.reps is not None and self.reps < 0:
            raise ValueError("reps must be non-negative")
        if self.weight is not None and self.weight < 0:
            raise ValueError("weight must be non-negative")
        if self.weight_unit is not None and self.weight_unit not in WEIGHT_UNITS:
            raise ValueError(f"Invalid weight_unit: {self.weight_unit}")
        if self.duration_sec is not None and self.duration_sec < 0:
            raise ValueError("duration_sec must be non-negative")

    @property
    def is_trackable(self) -> bool:
        """True if the set recorded any of reps, weight or duration."""
        return self.reps is not None or self.weight is not None or self.duration_sec is not None


@dataclass
class HistoricalWorkout:
    """
    Sets of one workout session, ordered by set_index ascending.

    Derived from HistoricalSet rows on every call; never persisted.
    """

    workout_session_id: str
    started_at: datetime
    sets: list[HistoricalSet] = field(default_factory=list)


@dataclass(frozen=True)
class SetOutcome:
    """
    Verdict for one historical workout against a goal's rep range.

    success and failure are independent flags; a workout can be neither.
    """

    success: bool
    failure: bool
    average_reps: float | None
    average_weight: float | None


@dataclass(frozen=True)
class RepRange:
    """Inclusive target rep range for a training goal."""

    min: int
    max: int

    def __post_init__(self) -> None:
        if self.min < 0:
            raise ValueError("rep range min must be non-negative")
        if self.min > self.max:
            raise ValueError(f"rep range min {self.min} is above max {self.max}")

    def clamp(self, reps: int) -> int:
        """Clamp reps into [min, max]."""
        return max(self.min, min(self.max, reps))

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2


@dataclass(frozen=True)
class GoalConfig:
    """Static progression parameters for one training goal."""

    rep_range: RepRange
    default_working_sets: int
    upper_body_increase_percent: float
    lower_body_increase_percent: float
    deload_percent: float


@dataclass(frozen=True)
class MuscleSetTargets:
    """Goal-specific weekly effective-set window for a muscle."""

    min_sets: float
    max_sets: float


@dataclass(frozen=True)
class MuscleFatigueContext:
    """
    Weekly workload context for the exercise's primary muscle.

    Produced by the muscle aggregator; read-only to the engine.  Numeric
    fields are optional because callers may only know the status.
    """

    fatigue_status: FatigueStatus
    current_week_effective_sets: float | None = None
    target_min_sets: float | None = None
    target_max_sets: float | None = None

    def __post_init__(self) -> None:
        if self.fatigue_status not in FATIGUE_STATUSES:
            raise ValueError(f"Invalid fatigue_status: {self.fatigue_status}")


@dataclass
class RecommendationOptions:
    """
    Caller-tunable knobs for one recommendation request.

    analysis_workout_count is clamped to 1–5 and success_streak_threshold
    to 1–4.  The threshold applies to both success and failure streaks.
    """

    goal: Goal = "HYPERTROPHY"
    preferred_unit: WeightUnit = "lbs"
    include_warmup_sets: bool = True
    analysis_workout_count: int = 3
    success_streak_threshold: int = 2
    fallback_primary_muscle: str | None = None

    def __post_init__(self) -> None:
        """Validate enums and clamp the numeric options."""
        if self.goal not in GOALS:
            raise ValueError(f"Invalid goal: {self.goal}. Must be one of {GOALS}")
        if self.preferred_unit not in WEIGHT_UNITS:
            raise ValueError(
                f"Invalid preferred_unit: {self.preferred_unit}. Must be one of {WEIGHT_UNITS}"
            )
        self.analysis_workout_count = max(1, min(5, int(self.analysis_workout_count)))
        self.success_streak_threshold = max(1, min(4, int(self.success_streak_threshold)))


@dataclass
class RecommendationRequest:
    """Everything the engine needs to prescribe the next session of one exercise."""

    exercise_id: str
    attributes: list[ExerciseAttribute] = field(default_factory=list)
    recent_sets: list[HistoricalSet] = field(default_factory=list)
    options: RecommendationOptions = field(default_factory=RecommendationOptions)
    muscle_fatigue: MuscleFatigueContext | None = None


@dataclass(frozen=True)
class SuggestedWorkoutSet:
    """
    One prescribed set.

    ``types`` lists the recorded dimensions (e.g. ["WEIGHT", "REPS"]) and
    ``values_int`` / ``values_sec`` hold the matching values in order.
    """

    set_index: int
    type: SetType
    types: tuple[SetDimension, ...]
    values_int: tuple[float, ...] = ()
    values_sec: tuple[int, ...] = ()
    units: tuple[WeightUnit, ...] = ()
    recommendation_reason: str = ""

    @property
    def weight(self) -> float | None:
        if "WEIGHT" not in self.types:
            return None
        return self.values_int[self.types.index("WEIGHT")]

    @property
    def reps(self) -> int | None:
        if "REPS" not in self.types:
            return None
        return int(self.values_int[self.types.index("REPS")])


@dataclass(frozen=True)
class ExerciseRecommendation:
    """The engine's prescription for the next session of one exercise."""

    exercise_id: str
    goal: Goal
    working_weight: float | None
    working_reps: int
    working_sets: int
    unit: WeightUnit
    success_streak: int
    failure_streak: int
    reason_fragments: tuple[str, ...]
    sets: tuple[SuggestedWorkoutSet, ...]

    @property
    def reason(self) -> str:
        """Human-readable explanation assembled from the ordered fragments."""
        return " ".join(self.reason_fragments)


@dataclass(frozen=True)
class MuscleWeeklyPoint:
    """Effective sets and volume credited to a muscle in one ISO week."""

    week_start: str  # ISO date of the Monday (UTC)
    effective_sets: float
    total_volume: float


@dataclass(frozen=True)
class MuscleExerciseContribution:
    """How many effective sets one exercise credited to a muscle."""

    exercise_id: str
    exercise_name: str
    effective_sets: float


@dataclass(frozen=True)
class MuscleProgressPoint:
    """Weekly workload summary for one muscle."""

    muscle: str
    fatigue_status: FatigueStatus
    current_week_effective_sets: float
    current_week_total_volume: float
    target_min_sets: float
    target_max_sets: float
    fatigue_ratio: float
    weekly: tuple[MuscleWeeklyPoint, ...] = ()
    top_exercises: tuple[MuscleExerciseContribution, ...] = ()


@dataclass(frozen=True)
class WeeklyVolumePoint:
    """Total volume across all exercises for one ISO week."""

    week_start: str
    total_volume: float
    sets_count: int


@dataclass(frozen=True)
class LastPerformance:
    """The latest trackable set logged for an exercise."""

    session_id: str
    exercise_id: str
    started_at: datetime
    set_index: int
    type: SetType
    reps: int | None
    weight: float | None
    weight_unit: WeightUnit | None
    duration_sec: int | None


@dataclass
class UserProfile:
    """Owner of a training log and their recommendation defaults."""

    user_id: str
    preferred_unit: WeightUnit = "lbs"
    goal: Goal = "HYPERTROPHY"

    def __post_init__(self) -> None:
        if not self.user_id or not self.user_id.strip():
            raise ValueError("user_id must be a non-empty string")
        if self.preferred_unit not in WEIGHT_UNITS:
            raise ValueError(f"Invalid preferred_unit: {self.preferred_unit}")
        if self.goal not in GOALS:
            raise ValueError(f"Invalid goal: {self.goal}")
