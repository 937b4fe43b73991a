"""Semantic diff between two versions of a plan.

Instead of listing raw JSON paths, the diff walks both plan trees in
parallel, matching entities by their identity key at each level
(weeks and days by number, exercises, meals and set groups by id, sets by
ordinal), and reports one record per changed entity:

    ~ Week 2 / Day 3 / Bench Press: count 8 → 10

Records are only emitted for programs, weeks, days, exercises and meals.
Set-group and set differences are folded into the owning exercise's record,
which is what a person reading the history thinks of as "the thing that
changed".
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..errors import LiftplanError
from ..models.plan import ExerciseSet, Program, SetGroup
from .expansion import expand, summarize_group, summarize_set

logger = logging.getLogger(__name__)


class NodeKind(str, Enum):
    """Levels of the plan hierarchy."""

    PROGRAM = "program"
    WEEK = "week"
    DAY = "day"
    EXERCISE = "exercise"
    MEAL = "meal"
    SET_GROUP = "set_group"
    SET = "set"


class ChangeAction(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


@dataclass(frozen=True)
class NodeSpec:
    """Identity key, compared fields and child lists of one node kind."""

    kind: NodeKind
    key: str | None
    fields: tuple[str, ...]
    children: tuple[tuple[str, NodeKind], ...] = ()


SET_FIELDS = (
    "set_type",
    "reps",
    "reps_max",
    "duration_seconds",
    "weight",
    "weight_max",
    "intensity_percent",
    "intensity_percent_max",
    "rpe",
    "rpe_max",
    "tempo",
    "rest_seconds",
    "notes",
    "is_warmup",
)
TEMPO_PHASES = ("eccentric", "pause_bottom", "concentric", "pause_top")

NODE_SPECS: dict[NodeKind, NodeSpec] = {
    NodeKind.PROGRAM: NodeSpec(
        NodeKind.PROGRAM, None, ("name", "description"), (("weeks", NodeKind.WEEK),)
    ),
    NodeKind.WEEK: NodeSpec(
        NodeKind.WEEK, "week_number", ("name", "deload", "notes"), (("days", NodeKind.DAY),)
    ),
    NodeKind.DAY: NodeSpec(
        NodeKind.DAY,
        "day_number",
        ("name", "focus", "notes"),
        (("exercises", NodeKind.EXERCISE), ("meals", NodeKind.MEAL)),
    ),
    NodeKind.EXERCISE: NodeSpec(NodeKind.EXERCISE, "id", ("name", "notes")),
    NodeKind.MEAL: NodeSpec(
        NodeKind.MEAL, "id", ("name", "calories", "protein", "carbs", "fat", "notes")
    ),
    NodeKind.SET_GROUP: NodeSpec(NodeKind.SET_GROUP, "id", ("count",)),
    NodeKind.SET: NodeSpec(NodeKind.SET, "set_number", SET_FIELDS),
}


@dataclass(frozen=True)
class EntityRef:
    type: NodeKind
    name: str
    parent_name: str | None = None

    def to_dict(self) -> dict:
        return {"type": self.type.value, "name": self.name, "parent_name": self.parent_name}


@dataclass(frozen=True)
class ChangeDetail:
    label: str
    from_value: Any = None
    to_value: Any = None

    def to_dict(self) -> dict:
        return {"label": self.label, "from": self.from_value, "to": self.to_value}


@dataclass
class ChangeRecord:
    """One changed entity with its field-level before/after pairs."""

    id: str
    entity: EntityRef
    action: ChangeAction
    details: list[ChangeDetail] = field(default_factory=list)

    @property
    def description(self) -> str:
        if self.action == ChangeAction.ADDED:
            return f"Added {self.entity.name}"
        if self.action == ChangeAction.REMOVED:
            return f"Removed {self.entity.name}"
        return f"Updated {self.entity.name}"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "entity": self.entity.to_dict(),
            "action": self.action.value,
            "description": self.description,
            "details": [d.to_dict() for d in self.details],
        }


def _as_dict(state: Program | dict) -> dict:
    if isinstance(state, Program):
        return state.to_dict()
    return state if isinstance(state, dict) else {}


def _identity(item: Any, spec: NodeSpec) -> Any:
    if not isinstance(item, dict):
        return None
    key = item.get(spec.key)
    if isinstance(key, bool) or not isinstance(key, (int, str)) or key == "":
        return None
    return key


def _index(items: Any, spec: NodeSpec) -> tuple[dict, list[tuple[int, Any]]]:
    """Split a child list into items by identity key and items without one."""
    keyed: dict = {}
    unkeyed: list[tuple[int, Any]] = []
    if not isinstance(items, list):
        return keyed, unkeyed

    for position, item in enumerate(items):
        key = _identity(item, spec)
        if key is None or key in keyed:
            logger.debug("%s at position %d has no usable identity key", spec.kind.value, position)
            unkeyed.append((position, item))
        else:
            keyed[key] = (position, item)
    return keyed, unkeyed


def _merged_keys(old_keys: list, new_keys: list) -> list:
    """Union of keys in newer order, with removed keys kept beside their old neighbours."""
    merged = list(new_keys)
    present = set(new_keys)
    previous = None
    for key in old_keys:
        if key not in present:
            position = merged.index(previous) + 1 if previous is not None else 0
            merged.insert(position, key)
        previous = key
    return merged


def _pair_unkeyed(
    old_unkeyed: list[tuple[int, Any]], new_unkeyed: list[tuple[int, Any]]
) -> tuple[list[tuple[int, Any]], list[tuple[int, Any]]]:
    """Drop unkeyed items that appear unchanged on both sides."""
    remaining_new = list(new_unkeyed)
    removed = []
    for entry in old_unkeyed:
        match = next((n for n in remaining_new if n[1] == entry[1]), None)
        if match is None:
            removed.append(entry)
        else:
            remaining_new.remove(match)
    return removed, remaining_new


def _entity_name(kind: NodeKind, item: Any, position: int) -> str:
    data = item if isinstance(item, dict) else {}
    name = data.get("name")
    if name:
        return str(name)
    if kind == NodeKind.WEEK:
        return f"Week {data.get('week_number', position + 1)}"
    if kind == NodeKind.DAY:
        return f"Day {data.get('day_number', position + 1)}"
    if kind == NodeKind.PROGRAM:
        return "Program"
    return f"{kind.value.replace('_', ' ').title()} {position + 1}"


def _field_details(spec: NodeSpec, old: Any, new: Any, prefix: str = "") -> list[ChangeDetail]:
    old = old if isinstance(old, dict) else {}
    new = new if isinstance(new, dict) else {}
    details = []
    for name in spec.fields:
        if name == "tempo":
            old_tempo = old.get("tempo") if isinstance(old.get("tempo"), dict) else {}
            new_tempo = new.get("tempo") if isinstance(new.get("tempo"), dict) else {}
            for phase in TEMPO_PHASES:
                before, after = old_tempo.get(phase), new_tempo.get(phase)
                if before != after:
                    details.append(ChangeDetail(f"{prefix}tempo.{phase}", before, after))
            continue

        before, after = old.get(name), new.get(name)
        if before != after:
            details.append(ChangeDetail(f"{prefix}{name}", before, after))
    return details


def _step_label(step: Any) -> str:
    if not isinstance(step, dict):
        return str(step)
    adjustment = step.get("adjustment", 0)
    if not isinstance(adjustment, (int, float)):
        return f"sets {step.get('from_set')}-{step.get('to_set')}: {adjustment}"
    sign = "+" if adjustment >= 0 else ""
    return f"sets {step.get('from_set')}-{step.get('to_set')}: {sign}{adjustment:g}"


def _progression_details(old: Any, new: Any, prefix: str) -> list[ChangeDetail]:
    old = old if isinstance(old, dict) else {}
    new = new if isinstance(new, dict) else {}
    details = []

    if old.get("kind") != new.get("kind"):
        details.append(ChangeDetail(f"{prefix}progression", old.get("kind"), new.get("kind")))

    old_steps = old.get("steps") or []
    new_steps = new.get("steps") or []
    for i in range(max(len(old_steps), len(new_steps))):
        before = _step_label(old_steps[i]) if i < len(old_steps) else None
        after = _step_label(new_steps[i]) if i < len(new_steps) else None
        if before != after:
            details.append(ChangeDetail(f"{prefix}progression step {i + 1}", before, after))
    return details


def _group_summary(group: Any) -> str:
    try:
        return summarize_group(SetGroup.from_dict(group))
    except (LiftplanError, TypeError, ValueError, AttributeError):
        return "set group"


def _set_summary(exercise_set: Any) -> str:
    try:
        return summarize_set(ExerciseSet.from_dict(exercise_set))
    except (LiftplanError, TypeError, ValueError, AttributeError):
        return "set"


def _effective_sets(group: dict) -> list:
    """Realized sets, or the expansion when the realized list is stale."""
    sets = group.get("sets") or []
    if sets and len(sets) == group.get("count"):
        return sets
    try:
        return [s.to_dict() for s in expand(SetGroup.from_dict(group))]
    except (LiftplanError, TypeError, ValueError, AttributeError):
        return sets


def _set_details(old_group: dict, new_group: dict, prefix: str) -> list[ChangeDetail]:
    spec = NODE_SPECS[NodeKind.SET]
    old_sets, _ = _index(_effective_sets(old_group), spec)
    new_sets, _ = _index(_effective_sets(new_group), spec)

    details = []
    for key in _merged_keys(list(old_sets), list(new_sets)):
        old = old_sets.get(key)
        new = new_sets.get(key)
        label = f"{prefix}Set {key}"
        if old is None:
            details.append(ChangeDetail(label, None, _set_summary(new[1])))
        elif new is None:
            details.append(ChangeDetail(label, _set_summary(old[1]), None))
        elif old[1] != new[1]:
            details.extend(_field_details(spec, old[1], new[1], prefix=f"{label} › "))
    return details


def _set_group_details(old_groups: Any, new_groups: Any) -> list[ChangeDetail]:
    spec = NODE_SPECS[NodeKind.SET_GROUP]
    old_keyed, old_unkeyed = _index(old_groups, spec)
    new_keyed, new_unkeyed = _index(new_groups, spec)
    multi = max(
        len(old_groups) if isinstance(old_groups, list) else 0,
        len(new_groups) if isinstance(new_groups, list) else 0,
    ) > 1

    details = []
    for key in _merged_keys(list(old_keyed), list(new_keyed)):
        old = old_keyed.get(key)
        new = new_keyed.get(key)
        if old is None:
            details.append(ChangeDetail(f"Set Group {new[0] + 1}", None, _group_summary(new[1])))
            continue
        if new is None:
            details.append(ChangeDetail(f"Set Group {old[0] + 1}", _group_summary(old[1]), None))
            continue
        old_group, new_group = old[1], new[1]
        if old_group == new_group:
            continue

        # A moved group is labelled by its earlier position on either side
        prefix = f"Set Group {min(old[0], new[0]) + 1} › " if multi else ""
        group_details = _field_details(spec, old_group, new_group, prefix)
        group_details.extend(
            _field_details(
                NODE_SPECS[NodeKind.SET],
                old_group.get("base_set") or {},
                new_group.get("base_set") or {},
                prefix,
            )
        )
        group_details.extend(
            _progression_details(old_group.get("progression"), new_group.get("progression"), prefix)
        )
        if not group_details:
            # Only the realized sets differ: individual set edits
            group_details = _set_details(old_group, new_group, prefix)
        details.extend(group_details)

    removed, added = _pair_unkeyed(old_unkeyed, new_unkeyed)
    for position, group in removed:
        details.append(ChangeDetail(f"Set Group {position + 1}", _group_summary(group), None))
    for position, group in added:
        details.append(ChangeDetail(f"Set Group {position + 1}", None, _group_summary(group)))
    return details


class _Walker:
    """Parallel walk over two plan trees collecting change records."""

    def __init__(self):
        self.records: list[ChangeRecord] = []

    def walk_program(self, old: dict, new: dict) -> None:
        spec = NODE_SPECS[NodeKind.PROGRAM]
        details = _field_details(spec, old, new)
        if details:
            self.records.append(
                ChangeRecord(
                    id="program",
                    entity=EntityRef(NodeKind.PROGRAM, _entity_name(NodeKind.PROGRAM, new, 0)),
                    action=ChangeAction.MODIFIED,
                    details=details,
                )
            )
        self.walk_children(spec, old, new, "program", (
            _entity_name(NodeKind.PROGRAM, old, 0),
            _entity_name(NodeKind.PROGRAM, new, 0),
        ))

    def walk_children(self, spec: NodeSpec, old: dict, new: dict, path: str, parents: tuple) -> None:
        for attr, child_kind in spec.children:
            child_spec = NODE_SPECS[child_kind]
            old_keyed, old_unkeyed = _index(old.get(attr), child_spec)
            new_keyed, new_unkeyed = _index(new.get(attr), child_spec)

            for key in _merged_keys(list(old_keyed), list(new_keyed)):
                child_path = f"{path}/{child_kind.value}:{key}"
                old_entry = old_keyed.get(key)
                new_entry = new_keyed.get(key)
                if old_entry is None:
                    self.emit(child_spec, ChangeAction.ADDED, new_entry, child_path, parents[1])
                elif new_entry is None:
                    self.emit(child_spec, ChangeAction.REMOVED, old_entry, child_path, parents[0])
                elif old_entry[1] != new_entry[1]:
                    self.walk_entity(child_spec, old_entry, new_entry, child_path, parents)

            removed, added = _pair_unkeyed(old_unkeyed, new_unkeyed)
            for entry in removed:
                child_path = f"{path}/{child_kind.value}:#{entry[0]}"
                self.emit(child_spec, ChangeAction.REMOVED, entry, child_path, parents[0])
            for entry in added:
                child_path = f"{path}/{child_kind.value}:#{entry[0]}"
                self.emit(child_spec, ChangeAction.ADDED, entry, child_path, parents[1])

    def emit(self, spec: NodeSpec, action: ChangeAction, entry: tuple, path: str, parent: str) -> None:
        position, item = entry
        self.records.append(
            ChangeRecord(
                id=path,
                entity=EntityRef(spec.kind, _entity_name(spec.kind, item, position), parent),
                action=action,
            )
        )

    def walk_entity(self, spec: NodeSpec, old_entry: tuple, new_entry: tuple, path: str, parents: tuple) -> None:
        old, new = old_entry[1], new_entry[1]
        details = _field_details(spec, old, new)
        if spec.kind == NodeKind.EXERCISE:
            details.extend(_set_group_details(old.get("set_groups"), new.get("set_groups")))

        name = _entity_name(spec.kind, new, new_entry[0])
        if details:
            self.records.append(
                ChangeRecord(
                    id=path,
                    entity=EntityRef(spec.kind, name, parents[1]),
                    action=ChangeAction.MODIFIED,
                    details=details,
                )
            )

        if spec.children:
            old_name = _entity_name(spec.kind, old, old_entry[0])
            if spec.kind == NodeKind.WEEK:
                child_parents = (old_name, name)
            else:
                # Days give their children "Week N / Day M" context
                child_parents = (f"{parents[0]} / {old_name}", f"{parents[1]} / {name}")
            self.walk_children(spec, old, new, path, child_parents)


def diff_programs(older: Program | dict, newer: Program | dict) -> list[ChangeRecord]:
    """Compare two plan versions and describe what changed.

    Args:
        older: The earlier plan state
        newer: The later plan state

    Returns:
        Change records in top-down, left-to-right tree order; empty when
        the two states are identical
    """
    old = _as_dict(older)
    new = _as_dict(newer)
    if old == new:
        return []

    walker = _Walker()
    walker.walk_program(old, new)
    return walker.records


def format_value(value: Any) -> str:
    """Render a detail value for display."""
    if value is None:
        return "(empty)"
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (int, float)):
        return f"{value:g}"
    if isinstance(value, str):
        if len(value) > 30:
            return f'"{value[:27]}..."'
        return f'"{value}"'
    if isinstance(value, list):
        return f"[{len(value)} items]"
    if isinstance(value, dict):
        return "{...}"
    return str(value)


def format_change(record: ChangeRecord) -> str:
    """One-line description of a change record."""
    target = record.entity.name
    if record.entity.parent_name:
        target = f"{record.entity.parent_name} / {target}"

    if record.action == ChangeAction.ADDED:
        return f"+ {target}"
    if record.action == ChangeAction.REMOVED:
        return f"- {target}"

    changes = "; ".join(
        f"{d.label} {format_value(d.from_value)} → {format_value(d.to_value)}"
        for d in record.details
    )
    return f"~ {target}: {changes}"
