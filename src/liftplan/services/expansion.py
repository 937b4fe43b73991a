"""Set expansion engine.

Turns a compact set-group description (count + base set + optional
progression rule) into the ordered list of concrete sets it stands for.
Every function here is pure: groups passed in are never mutated, and
helpers that "change" a group return a new one.
"""

import hashlib
import json
import logging
import math
from dataclasses import replace
from enum import Enum
from functools import lru_cache

from ..errors import InvalidSetGroupError, ProgressionActiveError
from ..models.plan import (
    ExerciseSet,
    ProgressionKind,
    ProgressionRule,
    ProgressionStep,
    SetGroup,
    SetKind,
)
from ..utils.units import WeightUnit, kg_to_lbs, parse_unit, select_display_value

logger = logging.getLogger(__name__)

RPE_MIN = 1
RPE_MAX = 10

# Fields a progression can make differ between sets of the same group
PROGRESSION_FIELDS = (
    "reps",
    "reps_max",
    "duration_seconds",
    "weight",
    "weight_max",
    "intensity_percent",
    "intensity_percent_max",
    "rpe",
    "rpe_max",
)


class EditMode(str, Enum):
    """How an edit to one displayed set is applied to its group."""

    BLOCK = "block"  # Edit becomes the new base set, all sets regenerate
    INDIVIDUAL = "individual"  # Only the edited set changes


def validate_set_group(group: SetGroup) -> list[str]:
    """Check a group specification before expansion.

    Returns:
        Human-readable reasons the group is invalid; empty when valid
    """
    reasons = []

    if not isinstance(group.count, int) or isinstance(group.count, bool) or group.count < 1:
        reasons.append(f"Set count must be a whole number of at least 1 (got {group.count!r})")

    for field_name in ("rpe", "rpe_max"):
        value = getattr(group.base_set, field_name)
        if value is not None and not RPE_MIN <= value <= RPE_MAX:
            reasons.append(f"Base set {field_name} must be between {RPE_MIN} and {RPE_MAX} (got {value})")

    if group.progression is not None:
        for i, step in enumerate(group.progression.steps, 1):
            if step.from_set < 1:
                reasons.append(f"Progression step {i}: from_set must be at least 1 (got {step.from_set})")
            if step.from_set > step.to_set:
                reasons.append(
                    f"Progression step {i}: from_set {step.from_set} is after to_set {step.to_set}"
                )

    return reasons


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _apply_adjustment(exercise_set: ExerciseSet, kind: ProgressionKind, adjustment: float) -> None:
    # A zero step leaves every field as it was, absent ones included
    if not adjustment:
        return
    if kind == ProgressionKind.LINEAR:
        exercise_set.weight = (exercise_set.weight or 0.0) + adjustment
        exercise_set.weight_lbs = kg_to_lbs(exercise_set.weight)
    elif kind == ProgressionKind.PERCENTAGE:
        value = (exercise_set.intensity_percent or 0.0) + adjustment
        exercise_set.intensity_percent = min(max(value, 0.0), 100.0)
    elif kind == ProgressionKind.RPE:
        value = (exercise_set.rpe or 0.0) + adjustment
        exercise_set.rpe = _round_half_up(min(max(value, RPE_MIN), RPE_MAX))


def expand(group: SetGroup) -> list[ExerciseSet]:
    """Expand a set group into its concrete sets.

    Each set starts as a copy of the base set numbered 1..count. Progression
    steps are then applied in listed order to the sets inside their range
    (clamped to the group); overlapping steps add up.

    Raises:
        InvalidSetGroupError: If the count or a step range is invalid
    """
    reasons = validate_set_group(group)
    if reasons:
        raise InvalidSetGroupError(reasons)

    sets = [group.base_set.copy(set_number=n) for n in range(1, group.count + 1)]

    if group.progression is not None:
        kind = group.progression.kind
        for step in group.progression.steps:
            first = max(step.from_set, 1)
            last = min(step.to_set, group.count)
            for exercise_set in sets[first - 1:last]:
                _apply_adjustment(exercise_set, kind, step.adjustment)

    logger.debug(
        "Expanded set group %s into %d sets",
        group.id,
        len(sets),
        extra={"liftplan_group_id": group.id},
    )
    return sets


def is_uniform(group_or_sets: SetGroup | list[ExerciseSet]) -> bool:
    """Whether every expanded set has the same progression-relevant values."""
    if isinstance(group_or_sets, SetGroup):
        sets = expand(group_or_sets)
    else:
        sets = group_or_sets

    if len(sets) < 2:
        return True

    first = sets[0]
    return all(
        getattr(s, name) == getattr(first, name)
        for s in sets[1:]
        for name in PROGRESSION_FIELDS
    )


def _canonical(group: SetGroup) -> str:
    base = group.base_set.to_dict()
    base.pop("set_number")
    progression = group.progression.to_dict() if group.progression else None
    return json.dumps([group.count, base, progression], sort_keys=True)


def group_key(group: SetGroup) -> str:
    """Structural identity key over (count, base_set, progression).

    Two groups with the same key expand to the same sets; callers compare
    keys to decide whether a realized list is stale.
    """
    return hashlib.sha1(_canonical(group).encode()).hexdigest()


@lru_cache(maxsize=256)
def _expand_canonical(canonical: str) -> tuple[dict, ...]:
    count, base, progression = json.loads(canonical)
    group = SetGroup.from_dict(
        {"id": "cached", "count": count, "base_set": base, "progression": progression}
    )
    return tuple(s.to_dict() for s in expand(group))


def expand_cached(group: SetGroup) -> list[ExerciseSet]:
    """Memoized ``expand``; returns fresh sets on every call."""
    return [ExerciseSet.from_dict(data) for data in _expand_canonical(_canonical(group))]


def clear_expansion_cache() -> None:
    _expand_canonical.cache_clear()


def needs_regeneration(group: SetGroup) -> bool:
    """Whether the realized sets are missing or no longer match the count."""
    return not group.sets or len(group.sets) != group.count


def refresh_sets(group: SetGroup, force: bool = False) -> SetGroup:
    """Return the group with its realized sets regenerated when stale."""
    if not force and not needs_regeneration(group):
        return group
    return replace(group, sets=expand_cached(group))


def set_count(group: SetGroup, count: int) -> SetGroup:
    """Change the number of sets and regenerate."""
    updated = replace(group, count=count)
    return replace(updated, sets=expand(updated))


def _default_kind(base_set: ExerciseSet) -> ProgressionKind:
    if base_set.weight is None and base_set.intensity_percent is not None:
        return ProgressionKind.PERCENTAGE
    if base_set.weight is None and base_set.rpe is not None:
        return ProgressionKind.RPE
    return ProgressionKind.LINEAR


def add_progression(group: SetGroup, kind: ProgressionKind | None = None) -> SetGroup:
    """Attach a neutral progression covering every set.

    Without an explicit kind, the rule targets the load the base set
    already prescribes: weight, then intensity, then RPE.
    """
    if kind is None:
        kind = _default_kind(group.base_set)
    rule = ProgressionRule(
        kind=kind,
        steps=[ProgressionStep(from_set=1, to_set=group.count, adjustment=0.0)],
    )
    updated = replace(group, progression=rule)
    return replace(updated, sets=expand(updated))


def remove_progression(group: SetGroup) -> SetGroup:
    updated = replace(group, progression=None)
    return replace(updated, sets=expand(updated))


def apply_set_edit(
    group: SetGroup,
    set_number: int,
    updated_set: ExerciseSet,
    mode: EditMode = EditMode.BLOCK,
) -> SetGroup:
    """Apply an edit made to one displayed set.

    In block mode the edited set becomes the new base set and every set is
    regenerated. In individual mode only that set changes; this is refused
    while a progression rule is active, since the rule owns those values.

    Args:
        group: The group being edited
        set_number: 1-based ordinal of the edited set
        updated_set: The edited values
        mode: Block or individual editing

    Returns:
        A new group reflecting the edit

    Raises:
        ProgressionActiveError: Individual edit on a group with a progression
        IndexError: If set_number is outside the group
    """
    if not 1 <= set_number <= group.count:
        raise IndexError(f"Set {set_number} is outside group of {group.count} sets")

    if mode == EditMode.BLOCK:
        updated = replace(group, base_set=updated_set.copy(set_number=1))
        return replace(updated, sets=expand(updated))

    if group.progression is not None:
        raise ProgressionActiveError(
            "Remove the progression rule before editing individual sets"
        )

    sets = [s.copy() for s in refresh_sets(group).sets]
    sets[set_number - 1] = updated_set.copy(set_number=set_number)
    return replace(group, sets=sets)


def _fmt(value: float) -> str:
    return f"{value:g}"


def _reps_label(exercise_set: ExerciseSet) -> str:
    if exercise_set.set_type == SetKind.TIMED and exercise_set.duration_seconds is not None:
        return f"{exercise_set.duration_seconds}s"
    if exercise_set.reps is None:
        return "?"
    label = str(exercise_set.reps)
    if exercise_set.reps_max is not None and exercise_set.reps_max != exercise_set.reps:
        label += f"-{exercise_set.reps_max}"
    if exercise_set.set_type == SetKind.AMRAP:
        label += "+"
    return label


def _load_label(exercise_set: ExerciseSet, unit: WeightUnit) -> str:
    weight = select_display_value(exercise_set.weight, exercise_set.weight_lbs, unit)
    if weight is not None:
        label = _fmt(weight)
        weight_max = select_display_value(exercise_set.weight_max, None, unit)
        if weight_max is not None and weight_max != weight:
            label += f"-{_fmt(weight_max)}"
        return f" @ {label}{unit.value}"
    if exercise_set.intensity_percent is not None:
        label = _fmt(exercise_set.intensity_percent)
        if exercise_set.intensity_percent_max is not None:
            label += f"-{_fmt(exercise_set.intensity_percent_max)}"
        return f" @ {label}%"
    if exercise_set.rpe is not None:
        return f" @ RPE {_fmt(exercise_set.rpe)}"
    return ""


def summarize_set(exercise_set: ExerciseSet, unit: WeightUnit | str = WeightUnit.KG) -> str:
    """Label for one set, e.g. ``10 @ 105kg``."""
    return f"{_reps_label(exercise_set)}{_load_label(exercise_set, parse_unit(unit))}"


def summarize_group(group: SetGroup, unit: WeightUnit | str = WeightUnit.KG) -> str:
    """Compact label such as ``3x10 @ 100kg``.

    Non-uniform groups list each set, e.g. ``10 @ 100kg, 10 @ 105kg``.
    """
    unit = parse_unit(unit)
    try:
        sets = expand(group)
    except InvalidSetGroupError as e:
        return f"invalid ({e})"

    if is_uniform(sets):
        first = sets[0]
        return f"{group.count}x{_reps_label(first)}{_load_label(first, unit)}"

    return ", ".join(summarize_set(s, unit) for s in sets)
