"""
JSON serialization for training log models.

Handles conversion between dataclasses and JSON-compatible dicts, and
parses the compact per-set notation used by the CLI.
"""

import json
import re
from datetime import date, datetime, timezone
from typing import Any, NamedTuple

from ..core.equipment import normalize_attribute
from ..core.models import (
    GOALS,
    SET_TYPES,
    WEIGHT_UNITS,
    Exercise,
    ExerciseRecommendation,
    HistoricalSet,
    LastPerformance,
    MuscleProgressPoint,
    UserProfile,
    WeeklyVolumePoint,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is non-negative.

    Raises:
        ValidationError: If value is negative or not a number
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def validate_choice(value: Any, choices: tuple[str, ...], name: str) -> str:
    if value not in choices:
        raise ValidationError(f"Invalid {name}: {value!r}. Must be one of {choices}")
    return value


def parse_datetime(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp or date into an aware UTC datetime.

    Accepts a trailing "Z".  Naive timestamps and bare dates
    (YYYY-MM-DD, taken as midnight) are read as UTC.

    Raises:
        ValidationError: If the value cannot be parsed
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Invalid timestamp: {value!r}")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        if re.fullmatch(r"\d{4}-\d{2}-\d{2}", text):
            parsed = datetime.combine(date.fromisoformat(text), datetime.min.time())
        else:
            parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ValidationError(f"Invalid timestamp: {value!r}") from e

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_datetime(dt: datetime) -> str:
    """Serialize a datetime as ISO-8601 UTC with a trailing Z."""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt.isoformat(timespec="seconds") + "Z"


def validate_whole_number(value: int | float, name: str) -> int:
    """
    Validate a non-negative whole number (8 or 8.0, never 8.7).

    Raises:
        ValidationError: If value is negative, not a number or fractional
    """
    validate_non_negative(value, name)
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"{name} must be a whole number, got {value}")
    return int(value)


def _optional_number(data: dict[str, Any], key: str, cast: type) -> Any:
    value = data.get(key)
    if value is None:
        return None
    if cast is int:
        return validate_whole_number(value, key)
    validate_non_negative(value, key)
    return cast(value)


# ---------------------------------------------------------------------------
# Historical sets
# ---------------------------------------------------------------------------


def historical_set_to_dict(s: HistoricalSet) -> dict[str, Any]:
    """
    Convert HistoricalSet to a compact JSON-compatible dict.

    Fields that were not recorded are omitted.
    """
    data: dict[str, Any] = {
        "session_id": s.workout_session_id,
        "exercise_id": s.exercise_id,
        "started_at": format_datetime(s.started_at),
        "set_index": s.set_index,
        "type": s.type,
    }
    for key in ("reps", "weight", "weight_unit", "duration_sec"):
        value = getattr(s, key)
        if value is not None:
            data[key] = value
    return data


def dict_to_historical_set(data: dict[str, Any]) -> HistoricalSet:
    """
    Convert dict to HistoricalSet.

    Raises:
        ValidationError: If required fields are missing or invalid
    """
    for key in ("session_id", "started_at", "set_index"):
        if key not in data:
            raise ValidationError(f"Missing required field: {key}")

    set_type = validate_choice(data.get("type", "NORMAL"), SET_TYPES, "set type")
    weight_unit = data.get("weight_unit")
    if weight_unit is not None:
        validate_choice(weight_unit, WEIGHT_UNITS, "weight_unit")

    return HistoricalSet(
        workout_session_id=str(data["session_id"]),
        started_at=parse_datetime(data["started_at"]),
        set_index=validate_whole_number(data["set_index"], "set_index"),
        type=set_type,  # type: ignore[arg-type]
        reps=_optional_number(data, "reps", int),
        weight=_optional_number(data, "weight", float),
        weight_unit=weight_unit,
        duration_sec=_optional_number(data, "duration_sec", int),
        exercise_id=data.get("exercise_id"),
    )


def set_to_json_line(s: HistoricalSet) -> str:
    """Serialize a set to a single JSON line (no trailing newline)."""
    return json.dumps(historical_set_to_dict(s), separators=(",", ":"))


def json_line_to_set(line: str) -> HistoricalSet:
    """
    Deserialize a JSON line to a HistoricalSet.

    Raises:
        ValidationError: If JSON is invalid or data validation fails
    """
    try:
        data = json.loads(line.strip())
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError("Set record must be a JSON object")
    return dict_to_historical_set(data)


# ---------------------------------------------------------------------------
# Exercise catalog and profile
# ---------------------------------------------------------------------------


def exercise_to_dict(exercise: Exercise) -> dict[str, Any]:
    return {
        "id": exercise.exercise_id,
        "name": exercise.name,
        "attributes": [{"name": a.name, "value": a.value} for a in exercise.attributes],
    }


def dict_to_exercise(data: dict[str, Any]) -> Exercise:
    """
    Convert a catalog entry to Exercise.

    Attributes may use any shape accepted by normalize_attribute().

    Raises:
        ValidationError: If id is missing or an attribute is malformed
    """
    exercise_id = data.get("id")
    if not exercise_id:
        raise ValidationError("Exercise entry is missing 'id'")
    try:
        attributes = tuple(normalize_attribute(a) for a in data.get("attributes", []))
    except (KeyError, AttributeError, ValueError) as e:
        raise ValidationError(f"Invalid attribute for exercise {exercise_id!r}: {e}") from e
    return Exercise(
        exercise_id=str(exercise_id),
        name=str(data.get("name") or exercise_id),
        attributes=attributes,
    )


def user_profile_to_dict(profile: UserProfile) -> dict[str, Any]:
    return {
        "user_id": profile.user_id,
        "preferred_unit": profile.preferred_unit,
        "goal": profile.goal,
    }


def dict_to_user_profile(data: dict[str, Any]) -> UserProfile:
    """
    Convert dict to UserProfile.

    Raises:
        ValidationError: If user_id is missing or a field is invalid
    """
    if "user_id" not in data:
        raise ValidationError("Missing required field: user_id")
    validate_choice(data.get("preferred_unit", "lbs"), WEIGHT_UNITS, "preferred_unit")
    validate_choice(data.get("goal", "HYPERTROPHY"), GOALS, "goal")
    try:
        return UserProfile(
            user_id=str(data["user_id"]),
            preferred_unit=data.get("preferred_unit", "lbs"),
            goal=data.get("goal", "HYPERTROPHY"),
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


# ---------------------------------------------------------------------------
# Read-model output
# ---------------------------------------------------------------------------


def recommendation_to_dict(rec: ExerciseRecommendation) -> dict[str, Any]:
    """JSON-compatible view of a recommendation (used by `recommend --json`)."""
    sets = []
    for s in rec.sets:
        entry: dict[str, Any] = {
            "set_index": s.set_index,
            "type": s.type,
            "types": list(s.types),
            "recommendation_reason": s.recommendation_reason,
        }
        if s.values_int:
            entry["values_int"] = list(s.values_int)
        if s.values_sec:
            entry["values_sec"] = list(s.values_sec)
        if s.units:
            entry["units"] = list(s.units)
        sets.append(entry)

    return {
        "exercise_id": rec.exercise_id,
        "goal": rec.goal,
        "working_weight": rec.working_weight,
        "working_reps": rec.working_reps,
        "working_sets": rec.working_sets,
        "unit": rec.unit,
        "success_streak": rec.success_streak,
        "failure_streak": rec.failure_streak,
        "reason": rec.reason,
        "sets": sets,
    }


def muscle_progress_to_dict(point: MuscleProgressPoint) -> dict[str, Any]:
    return {
        "muscle": point.muscle,
        "fatigue_status": point.fatigue_status,
        "current_week_effective_sets": point.current_week_effective_sets,
        "current_week_total_volume": point.current_week_total_volume,
        "target_min_sets": point.target_min_sets,
        "target_max_sets": point.target_max_sets,
        "fatigue_ratio": point.fatigue_ratio,
        "weekly": [
            {"week_start": w.week_start, "effective_sets": w.effective_sets, "total_volume": w.total_volume}
            for w in point.weekly
        ],
        "top_exercises": [
            {"exercise_id": e.exercise_id, "exercise_name": e.exercise_name, "effective_sets": e.effective_sets}
            for e in point.top_exercises
        ],
    }


def weekly_volume_to_dict(point: WeeklyVolumePoint) -> dict[str, Any]:
    return {"week_start": point.week_start, "total_volume": point.total_volume, "sets_count": point.sets_count}


def last_performance_to_dict(perf: LastPerformance) -> dict[str, Any]:
    return {
        "session_id": perf.session_id,
        "exercise_id": perf.exercise_id,
        "started_at": format_datetime(perf.started_at),
        "set_index": perf.set_index,
        "type": perf.type,
        "reps": perf.reps,
        "weight": perf.weight,
        "weight_unit": perf.weight_unit,
        "duration_sec": perf.duration_sec,
    }


# ---------------------------------------------------------------------------
# Compact set notation
# ---------------------------------------------------------------------------


class ParsedSet(NamedTuple):
    """One set parsed from the CLI notation; unused fields are None."""

    reps: int | None
    weight: float | None
    duration_sec: int | None
    type: str


_TIMED_TOKEN = re.compile(r"(\d+)\s*s(?:\s*/\s*([A-Za-z]+))?")
_REPS_TOKEN = re.compile(
    r"(\d+)(?:\s*[xX×]\s*(\d+))?(?:\s*@\s*([0-9]+(?:\.[0-9]+)?))?(?:\s*/\s*([A-Za-z]+))?"
)


def _parse_set_type(raw: str | None) -> str:
    if raw is None:
        return "NORMAL"
    aliases = {"W": "WARMUP", "WU": "WARMUP"}
    set_type = aliases.get(raw.upper(), raw.upper())
    if set_type not in SET_TYPES:
        raise ValidationError(f"Unknown set type: {raw!r}. Must be one of {SET_TYPES}")
    return set_type


def parse_sets_string(sets_str: str) -> list[ParsedSet]:
    """
    Parse a comma-separated list of sets.

    Per-set formats:
        REPS                e.g. "10"          bodyweight reps
        REPS@WEIGHT         e.g. "8@60"        weighted set
        REPSxN@WEIGHT       e.g. "8x3@60"      N identical sets
        .../TYPE            e.g. "12@40/w"     set type (w = WARMUP)
        NNs                 e.g. "45s"         timed set

    Args:
        sets_str: Sets string to parse

    Returns:
        List of ParsedSet in input order

    Raises:
        ValidationError: If format is invalid
    """
    if not sets_str or not sets_str.strip():
        raise ValidationError("Sets string cannot be empty")

    result: list[ParsedSet] = []
    for token in (t.strip() for t in sets_str.split(",")):
        if not token:
            continue

        m = _TIMED_TOKEN.fullmatch(token)
        if m:
            result.append(ParsedSet(None, None, int(m.group(1)), _parse_set_type(m.group(2))))
            continue

        m = _REPS_TOKEN.fullmatch(token)
        if m is None:
            raise ValidationError(
                f"Invalid set format: {token!r}. Expected REPS[xN][@WEIGHT][/TYPE] or NNs"
            )
        count = int(m.group(2)) if m.group(2) else 1
        if count < 1:
            raise ValidationError(f"Set count must be at least 1: {token!r}")
        weight = float(m.group(3)) if m.group(3) else None
        parsed = ParsedSet(int(m.group(1)), weight, None, _parse_set_type(m.group(4)))
        result.extend([parsed] * count)

    if not result:
        raise ValidationError("No sets found")
    return result
