"""Weight unit conversions.

Kilograms are the canonical unit; pounds are stored alongside as a derived
value. Every helper passes ``None`` through instead of raising, so an absent
weight stays absent rather than becoming zero.
"""

from enum import Enum

LBS_PER_KG = 2.20462


class WeightUnit(str, Enum):
    """Units a weight can be displayed or entered in."""

    KG = "kg"
    LBS = "lbs"


def parse_unit(unit: WeightUnit | str | None) -> WeightUnit:
    """Resolve a unit name, falling back to kilograms for anything unknown."""
    if isinstance(unit, WeightUnit):
        return unit
    if isinstance(unit, str) and unit.strip().lower() == WeightUnit.LBS.value:
        return WeightUnit.LBS
    return WeightUnit.KG


def kg_to_lbs(kg: float | None) -> float | None:
    """Convert kilograms to pounds, rounded to 2 decimals."""
    if kg is None:
        return None
    return round(kg * LBS_PER_KG, 2)


def lbs_to_kg(lbs: float | None) -> float | None:
    """Convert pounds to kilograms, rounded to 2 decimals."""
    if lbs is None:
        return None
    return round(lbs / LBS_PER_KG, 2)


def select_display_value(
    weight_kg: float | None,
    weight_lbs: float | None,
    unit: WeightUnit | str = WeightUnit.KG,
) -> float | None:
    """Pick the stored value matching the preferred unit.

    Falls back to converting the other value when the preferred one
    is missing.

    Args:
        weight_kg: Stored canonical weight
        weight_lbs: Stored secondary weight
        unit: Preferred display unit

    Returns:
        The weight in the preferred unit, or None if neither is stored
    """
    if parse_unit(unit) == WeightUnit.LBS:
        if weight_lbs is not None:
            return weight_lbs
        return kg_to_lbs(weight_kg)

    if weight_kg is not None:
        return weight_kg
    return lbs_to_kg(weight_lbs)


def to_canonical(value: float | None, unit: WeightUnit | str) -> float | None:
    """Convert a user-entered weight into kilograms."""
    if parse_unit(unit) == WeightUnit.LBS:
        return lbs_to_kg(value)
    return value
