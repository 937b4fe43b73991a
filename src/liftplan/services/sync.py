"""Bidirectional weight <-> intensity synchronization.

A set's absolute weight and its intensity (percent of a reference maximum,
usually a 1RM) describe the same load. When the user edits one, the other is
recomputed. Which one is "the edit" comes from the focused input, never from
guessing at which value changed: both can change for unrelated reasons, such
as a unit toggle or a fresh load from storage.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum

from ..errors import SyncContractError
from ..models.plan import ExerciseSet
from ..utils.units import kg_to_lbs

logger = logging.getLogger(__name__)


class ActiveField(str, Enum):
    """The input the user is currently editing."""

    WEIGHT = "weight"
    INTENSITY = "intensity"


@dataclass(frozen=True)
class WeightFields:
    """The linked pair of a set, plus the derived pound value."""

    weight: float | None = None  # kg
    weight_lbs: float | None = None
    intensity_percent: float | None = None

    @classmethod
    def from_set(cls, exercise_set: ExerciseSet) -> "WeightFields":
        return cls(
            weight=exercise_set.weight,
            weight_lbs=exercise_set.weight_lbs,
            intensity_percent=exercise_set.intensity_percent,
        )


def round1(value: float) -> float:
    return round(value, 1)


def is_linked(reference_max: float | None) -> bool:
    """Whether weight and intensity can be kept in sync at all."""
    return reference_max is not None and reference_max > 0


def resolve_active_field(weight_focused: bool, intensity_focused: bool) -> ActiveField | None:
    """Turn per-input focus flags into the active field.

    Raises:
        SyncContractError: If both inputs claim focus
    """
    if weight_focused and intensity_focused:
        raise SyncContractError("Weight and intensity cannot both be focused")
    if weight_focused:
        return ActiveField.WEIGHT
    if intensity_focused:
        return ActiveField.INTENSITY
    return None


def calculate_weight_from_intensity(
    reference_max: float | None, intensity_percent: float | None
) -> float | None:
    """Weight in kg for an intensity, or None if it cannot be derived."""
    if not is_linked(reference_max) or intensity_percent is None:
        return None
    if not 0 < intensity_percent <= 100:
        return None
    return round1(intensity_percent / 100 * reference_max)


def calculate_intensity_from_weight(
    weight: float | None, reference_max: float | None
) -> float | None:
    """Intensity for a weight in kg, or None if it cannot be derived."""
    if not is_linked(reference_max) or weight is None or weight <= 0:
        return None
    return round1(weight / reference_max * 100)


def synchronize(
    fields: WeightFields,
    active_field: ActiveField | None,
    reference_max: float | None,
) -> WeightFields:
    """Recompute the field that is not being edited.

    Args:
        fields: Current values, already including the user's edit
        active_field: The focused input, or None when nothing is being edited
        reference_max: The 100% baseline in kg

    Returns:
        Consistent fields; unchanged when there is no reference maximum,
        no active field, or the edited value is out of range
    """
    if active_field is None:
        return fields

    if not is_linked(reference_max):
        logger.debug("No reference max; weight and intensity stay independent")
        return fields

    if active_field == ActiveField.WEIGHT:
        intensity = calculate_intensity_from_weight(fields.weight, reference_max)
        if intensity is None:
            return fields
        return replace(fields, intensity_percent=intensity)

    weight = calculate_weight_from_intensity(reference_max, fields.intensity_percent)
    if weight is None:
        return fields
    return replace(fields, weight=weight, weight_lbs=kg_to_lbs(weight))


def sync_set(
    exercise_set: ExerciseSet,
    active_field: ActiveField | None,
    reference_max: float | None,
) -> ExerciseSet:
    """Run one synchronization pass over a set and return the updated copy."""
    result = synchronize(WeightFields.from_set(exercise_set), active_field, reference_max)
    return exercise_set.copy(
        weight=result.weight,
        weight_lbs=result.weight_lbs,
        intensity_percent=result.intensity_percent,
    )


def estimate_one_rep_max(weight: float | None, reps: int | None) -> float | None:
    """Estimate a 1RM with the Epley formula.

    Epley: weight * (1 + reps/30). A single rep is already a 1RM.
    """
    if weight is None or weight <= 0 or reps is None or reps < 1:
        return None
    if reps == 1:
        return weight
    return round1(weight * (1 + reps / 30))
