"""Utility helpers for liftplan."""

from .units import WeightUnit, kg_to_lbs, lbs_to_kg, parse_unit, select_display_value, to_canonical

__all__ = [
    "kg_to_lbs",
    "lbs_to_kg",
    "parse_unit",
    "select_display_value",
    "to_canonical",
    "WeightUnit",
]
