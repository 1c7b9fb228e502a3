"""Weight unit conversion (kg ↔ lbs)."""

from typing import Final

from .models import WEIGHT_UNITS

KG_TO_LBS: Final[float] = 2.20462
LBS_TO_KG: Final[float] = 0.453592


def convert_weight(weight: float, from_unit: str, to_unit: str) -> float:
    """
    Convert a weight between kg and lbs.

    Args:
        weight: Weight in from_unit
        from_unit: "kg" or "lbs"
        to_unit: "kg" or "lbs"

    Returns:
        Weight in to_unit (unrounded)

    Raises:
        ValueError: If either unit is unknown
    """
    for unit in (from_unit, to_unit):
        if unit not in WEIGHT_UNITS:
            raise ValueError(f"Unknown weight unit: {unit!r}. Must be one of {WEIGHT_UNITS}")

    if from_unit == to_unit:
        return weight
    if from_unit == "kg":
        return weight * KG_TO_LBS
    return weight * LBS_TO_KG
