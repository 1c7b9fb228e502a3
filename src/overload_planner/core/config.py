"""
Configuration constants for the progressive-overload model.

All adjustable parameters are centralized here for easy tuning.  The goal
table and muscle base weights can also be overridden from YAML; see
core/engine/config_loader.py and core/rules.py.
"""

from typing import Final

from .models import GoalConfig, MuscleSetTargets, RepRange

# =============================================================================
# TRAINING GOALS
# =============================================================================

PROGRESSION_GOALS: Final[dict[str, GoalConfig]] = {
    "STRENGTH": GoalConfig(
        rep_range=RepRange(min=4, max=6),
        default_working_sets=4,
        upper_body_increase_percent=0.03,
        lower_body_increase_percent=0.05,
        deload_percent=0.05,
    ),
    "HYPERTROPHY": GoalConfig(
        rep_range=RepRange(min=8, max=12),
        default_working_sets=3,
        upper_body_increase_percent=0.025,
        lower_body_increase_percent=0.05,
        deload_percent=0.05,
    ),
    "ENDURANCE": GoalConfig(
        rep_range=RepRange(min=12, max=15),
        default_working_sets=3,
        upper_body_increase_percent=0.02,
        lower_body_increase_percent=0.03,
        deload_percent=0.05,
    ),
}

# Load multiplier applied to the muscle base weight when there is no history
GOAL_WEIGHT_MULTIPLIERS: Final[dict[str, float]] = {
    "STRENGTH": 1.1,
    "HYPERTROPHY": 1.0,
    "ENDURANCE": 0.9,
}

# =============================================================================
# NO-HISTORY BASELINE
# =============================================================================

MUSCLE_BASE_WEIGHTS_KG: Final[dict[str, float]] = {
    "CHEST": 20.0,
    "BACK": 25.0,
    "LATS": 25.0,
    "BICEPS": 10.0,
    "TRICEPS": 10.0,
    "SHOULDERS": 12.5,
    "TRAPS": 15.0,
    "FOREARMS": 8.0,
    "QUADRICEPS": 30.0,
    "HAMSTRINGS": 30.0,
    "GLUTES": 35.0,
    "CALVES": 25.0,
    "FULL_BODY": 25.0,
}
DEFAULT_MUSCLE_BASE_WEIGHT_KG: Final[float] = 15.0

BARBELL_MIN_WEIGHT_KG: Final[float] = 20.0  # empty Olympic bar
DUMBBELL_WEIGHT_RANGE_KG: Final[tuple[float, float]] = (6.0, 18.0)
MACHINE_WEIGHT_RANGE_KG: Final[tuple[float, float]] = (10.0, 40.0)

# Last-resort working weight (in the preferred unit) for weighted exercises
FALLBACK_WORKING_WEIGHT: Final[float] = 10.0

# =============================================================================
# EQUIPMENT AND MUSCLE CLASSES
# =============================================================================

BARBELL_EQUIPMENT: Final[frozenset[str]] = frozenset(
    {"BARBELL", "EZ_BAR", "SMITH_MACHINE", "RACK", "BAR"}
)
DUMBBELL_EQUIPMENT: Final[frozenset[str]] = frozenset({"DUMBBELL", "KETTLEBELLS"})
MACHINE_EQUIPMENT: Final[frozenset[str]] = frozenset({"MACHINE", "CABLE"})
BODYWEIGHT_EQUIPMENT: Final[frozenset[str]] = frozenset({"BODY_ONLY", "NONE"})

BODYWEIGHT_TYPES: Final[frozenset[str]] = frozenset({"BODYWEIGHT", "CALISTHENIC"})
TIMED_TYPES: Final[frozenset[str]] = frozenset({"CARDIO", "STRETCHING"})

LOWER_BODY_MUSCLES: Final[frozenset[str]] = frozenset(
    {"QUADRICEPS", "HAMSTRINGS", "GLUTES", "CALVES", "ADDUCTORS", "ABDUCTORS", "GROIN"}
)

# Smallest realistic load jump per equipment class: {class: {unit: increment}}
WEIGHT_INCREMENTS: Final[dict[str, dict[str, float]]] = {
    "dumbbell": {"kg": 1.0, "lbs": 2.5},
    "barbell": {"kg": 2.5, "lbs": 5.0},
    "machine": {"kg": 2.5, "lbs": 5.0},
    "default": {"kg": 1.0, "lbs": 2.5},
}

# =============================================================================
# OUTCOME EVALUATION
# =============================================================================

# Share of working sets that must hit the bound for a success/failure verdict
OUTCOME_SET_RATIO: Final[float] = 0.67

# =============================================================================
# SET BUILDER
# =============================================================================

WARMUP_PERCENTAGES: Final[tuple[float, ...]] = (0.6, 0.8)
WARMUP_REP_SCHEME: Final[tuple[int, ...]] = (8, 5)
WARMUP_DEFAULT_REPS: Final[int] = 5

TIMED_SET_SECONDS: Final[int] = 30
TIMED_SET_SECONDS_ENDURANCE: Final[int] = 45

# =============================================================================
# FATIGUE OVERRIDE
# =============================================================================

MIN_WORKING_SETS_UNDER_FATIGUE: Final[int] = 2
MAX_EXTRA_WORKING_SETS: Final[int] = 2  # LOW fatigue cap above default sets

# =============================================================================
# WEEKLY MUSCLE WORKLOAD
# =============================================================================

PRIMARY_MUSCLE_CREDIT: Final[float] = 1.0
SECONDARY_MUSCLE_CREDIT: Final[float] = 0.5

GOAL_MUSCLE_SET_TARGETS: Final[dict[str, MuscleSetTargets]] = {
    "STRENGTH": MuscleSetTargets(min_sets=6, max_sets=10),
    "HYPERTROPHY": MuscleSetTargets(min_sets=10, max_sets=20),
    "ENDURANCE": MuscleSetTargets(min_sets=8, max_sets=14),
}

LOW_FATIGUE_RATIO: Final[float] = 0.8   # below min_sets × ratio → LOW
HIGH_FATIGUE_RATIO: Final[float] = 1.1  # above max_sets × ratio → HIGH

TOP_EXERCISES_PER_MUSCLE: Final[int] = 3
DEFAULT_PROGRESS_WEEKS: Final[int] = 8
