"""
Equipment-aware load classification and rounding.

Each exercise is tagged with equipment, type and muscle attributes.  The
engine only needs a coarse view of them:

  Equipment class :  barbell | dumbbell | machine | bodyweight | default
  Body region     :  lower (legs/hips) | upper (everything else)
  Shape           :  timed (CARDIO/STRETCHING) | bodyweight | weighted

Load increments per class
-------------------------
  dumbbell        :  1 kg   / 2.5 lb
  barbell, machine:  2.5 kg / 5 lb
  default         :  1 kg   / 2.5 lb

Attributes arrive either as plain strings or as nested records
({"name": ...} / {"value": ...} or objects with .name / .value).  They are
normalized once in normalize_attribute(); nothing downstream branches on
shape.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Literal

from .config import (
    BARBELL_EQUIPMENT,
    BODYWEIGHT_EQUIPMENT,
    BODYWEIGHT_TYPES,
    DUMBBELL_EQUIPMENT,
    LOWER_BODY_MUSCLES,
    MACHINE_EQUIPMENT,
    TIMED_TYPES,
    WEIGHT_INCREMENTS,
)
from .models import ExerciseAttribute

EquipmentClass = Literal["barbell", "dumbbell", "machine", "bodyweight", "default"]


# ---------------------------------------------------------------------------
# Attribute normalization
# ---------------------------------------------------------------------------

def _resolve_tag(raw: Any, key: str) -> str:
    """Return the plain enum string from a str, a mapping, or an object."""
    if isinstance(raw, str):
        return raw.strip().upper()
    if isinstance(raw, dict):
        return str(raw[key]).strip().upper()
    return str(getattr(raw, key)).strip().upper()


def normalize_attribute(raw: Any) -> ExerciseAttribute:
    """
    Build an ExerciseAttribute from any supported input shape.

    Accepted shapes:
      - ExerciseAttribute (returned as-is)
      - {"attributeName": "EQUIPMENT", "attributeValue": "BARBELL"}
      - {"attributeName": {"name": ...}, "attributeValue": {"value": ...}}
      - {"name": ..., "value": ...}
      - ("EQUIPMENT", "BARBELL")
    """
    if isinstance(raw, ExerciseAttribute):
        return raw
    if isinstance(raw, (tuple, list)) and len(raw) == 2:
        return ExerciseAttribute(
            name=_resolve_tag(raw[0], "name"),
            value=_resolve_tag(raw[1], "value"),
        )
    if isinstance(raw, dict):
        name = raw.get("attributeName", raw.get("attribute_name", raw.get("name")))
        value = raw.get("attributeValue", raw.get("attribute_value", raw.get("value")))
    else:
        name = getattr(raw, "attribute_name", None) or getattr(raw, "name")
        value = getattr(raw, "attribute_value", None) or getattr(raw, "value")
    if name is None or value is None:
        raise ValueError(f"Cannot read attribute name/value from {raw!r}")
    return ExerciseAttribute(name=_resolve_tag(name, "name"), value=_resolve_tag(value, "value"))


def normalize_attributes(raw: Iterable[Any]) -> list[ExerciseAttribute]:
    """Normalize a sequence of attributes; see normalize_attribute()."""
    return [normalize_attribute(a) for a in raw]


# ---------------------------------------------------------------------------
# Attribute lookup
# ---------------------------------------------------------------------------

def attribute_values(attributes: Iterable[ExerciseAttribute], name: str) -> list[str]:
    """All values for one attribute name, in input order."""
    return [a.value for a in attributes if a.name == name]


def _first(attributes: Iterable[ExerciseAttribute], name: str) -> str | None:
    values = attribute_values(attributes, name)
    return values[0] if values else None


def primary_muscle(attributes: Iterable[ExerciseAttribute]) -> str | None:
    return _first(attributes, "PRIMARY_MUSCLE")


def secondary_muscles(attributes: Iterable[ExerciseAttribute]) -> list[str]:
    return attribute_values(attributes, "SECONDARY_MUSCLE")


def equipment_tag(attributes: Iterable[ExerciseAttribute]) -> str | None:
    return _first(attributes, "EQUIPMENT")


def exercise_type(attributes: Iterable[ExerciseAttribute]) -> str | None:
    return _first(attributes, "TYPE")


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def classify_equipment(equipment: str | None) -> EquipmentClass:
    """
    Map an equipment tag to its load class.

    Args:
        equipment: Equipment tag (e.g. "EZ_BAR") or None

    Returns:
        One of "barbell", "dumbbell", "machine", "bodyweight", "default"
    """
    if equipment in BARBELL_EQUIPMENT:
        return "barbell"
    if equipment in DUMBBELL_EQUIPMENT:
        return "dumbbell"
    if equipment in MACHINE_EQUIPMENT:
        return "machine"
    if equipment in BODYWEIGHT_EQUIPMENT:
        return "bodyweight"
    return "default"


def is_lower_body(muscle: str | None) -> bool:
    """True for leg/hip muscles; None and everything else count as upper body."""
    return muscle in LOWER_BODY_MUSCLES


def is_bodyweight_exercise(equipment: str | None, ex_type: str | None) -> bool:
    """Bodyweight equipment, or a BODYWEIGHT/CALISTHENIC type tag."""
    return classify_equipment(equipment) == "bodyweight" or ex_type in BODYWEIGHT_TYPES


def is_timed_exercise(ex_type: str | None) -> bool:
    return ex_type in TIMED_TYPES


# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------

def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)


def round_to_two_decimals(value: float) -> float:
    return math.floor(value * 100 + 0.5) / 100


def get_weight_increment(unit: str, equipment: str | None) -> float:
    """
    Return the smallest realistic load jump for the equipment.

    Bodyweight and unknown equipment use the default increments.
    """
    eq_class = classify_equipment(equipment)
    table = WEIGHT_INCREMENTS.get(eq_class, WEIGHT_INCREMENTS["default"])
    return table[unit]


def round_to_available_increment(weight: float, unit: str, equipment: str | None) -> float:
    """
    Round a load to the nearest available increment.

        round(66 kg, BARBELL)   → 65
        round(10.6 kg, DUMBBELL) → 11

    Non-positive weights return one increment.

    Args:
        weight: Load in `unit`
        unit: "kg" or "lbs"
        equipment: Equipment tag or None

    Returns:
        Rounded load, two decimals
    """
    increment = get_weight_increment(unit, equipment)
    if weight <= 0:
        return increment
    return round_to_two_decimals(round_half_up(weight / increment) * increment)


def round_load_change(
    weight: float,
    unit: str,
    equipment: str | None,
    direction: Literal["up", "down"],
) -> float:
    """
    Round a changed load up or down to the next increment.

    Used for warm-ups and progression ("up") and for fatigue deloads
    ("down").  The result is never below one increment.
    """
    increment = get_weight_increment(unit, equipment)
    scaled = weight / increment
    if direction == "up":
        rounded = math.ceil(scaled) * increment
    else:
        rounded = math.floor(scaled) * increment
    return round_to_two_decimals(max(increment, rounded))
