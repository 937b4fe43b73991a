"""Training plan data models."""

import uuid
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from enum import Enum

from ..errors import MalformedPlanError


class SetKind(str, Enum):
    """Kinds of prescribed sets."""

    STRAIGHT = "straight"
    DROP_SET = "drop_set"
    REST_PAUSE = "rest_pause"
    AMRAP = "amrap"  # As many reps as possible
    TIMED = "timed"
    WARMUP = "warmup"


class ProgressionKind(str, Enum):
    """Which field a progression rule adjusts."""

    LINEAR = "linear"  # Absolute load (kg)
    PERCENTAGE = "percentage"  # Intensity (% of reference max)
    RPE = "rpe"  # Effort rating


DEFAULT_REST_SECONDS = 90


def _require(data: dict, key: str, where: str):
    try:
        return data[key]
    except (KeyError, TypeError):
        raise MalformedPlanError(f"{where} is missing required key '{key}'") from None


@dataclass
class Tempo:
    """Phase durations in seconds: eccentric, bottom pause, concentric, top pause."""

    eccentric: int = 0
    pause_bottom: int = 0
    concentric: int = 0
    pause_top: int = 0

    def __post_init__(self):
        for f in fields(self):
            if getattr(self, f.name) < 0:
                raise MalformedPlanError(f"Tempo {f.name} must be non-negative")

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "eccentric": self.eccentric,
            "pause_bottom": self.pause_bottom,
            "concentric": self.concentric,
            "pause_top": self.pause_top,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Tempo":
        """Create from dictionary."""
        return cls(
            eccentric=int(data.get("eccentric", 0)),
            pause_bottom=int(data.get("pause_bottom", 0)),
            concentric=int(data.get("concentric", 0)),
            pause_top=int(data.get("pause_top", 0)),
        )

    def __str__(self) -> str:
        return f"{self.eccentric}-{self.pause_bottom}-{self.concentric}-{self.pause_top}"


@dataclass
class ExerciseSet:
    """One concrete prescribed set.

    Point values live in ``reps``/``weight``/``intensity_percent``/``rpe``;
    the matching ``*_max`` field turns the value into a min/max range.
    """

    set_number: int = 1
    set_type: SetKind = SetKind.STRAIGHT
    reps: int | None = None
    reps_max: int | None = None
    duration_seconds: int | None = None  # Timed sets
    weight: float | None = None  # kg
    weight_max: float | None = None
    weight_lbs: float | None = None  # Derived from weight
    intensity_percent: float | None = None  # % of reference max
    intensity_percent_max: float | None = None
    rpe: float | None = None
    rpe_max: float | None = None
    tempo: Tempo | None = None
    rest_seconds: int = DEFAULT_REST_SECONDS
    notes: str = ""
    is_warmup: bool = False

    def copy(self, **changes) -> "ExerciseSet":
        """Return a deep copy, optionally with fields replaced."""
        if "tempo" not in changes and self.tempo is not None:
            changes["tempo"] = replace(self.tempo)
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "set_number": self.set_number,
            "set_type": self.set_type.value,
            "reps": self.reps,
            "reps_max": self.reps_max,
            "duration_seconds": self.duration_seconds,
            "weight": self.weight,
            "weight_max": self.weight_max,
            "weight_lbs": self.weight_lbs,
            "intensity_percent": self.intensity_percent,
            "intensity_percent_max": self.intensity_percent_max,
            "rpe": self.rpe,
            "rpe_max": self.rpe_max,
            "tempo": self.tempo.to_dict() if self.tempo else None,
            "rest_seconds": self.rest_seconds,
            "notes": self.notes,
            "is_warmup": self.is_warmup,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ExerciseSet":
        """Create from dictionary."""
        try:
            set_type = SetKind(data.get("set_type", "straight"))
        except ValueError:
            raise MalformedPlanError(f"Unknown set type {data.get('set_type')!r}") from None

        tempo = data.get("tempo")
        return cls(
            set_number=data.get("set_number", 1),
            set_type=set_type,
            reps=data.get("reps"),
            reps_max=data.get("reps_max"),
            duration_seconds=data.get("duration_seconds"),
            weight=data.get("weight"),
            weight_max=data.get("weight_max"),
            weight_lbs=data.get("weight_lbs"),
            intensity_percent=data.get("intensity_percent"),
            intensity_percent_max=data.get("intensity_percent_max"),
            rpe=data.get("rpe"),
            rpe_max=data.get("rpe_max"),
            tempo=Tempo.from_dict(tempo) if tempo else None,
            rest_seconds=data.get("rest_seconds", DEFAULT_REST_SECONDS),
            notes=data.get("notes", ""),
            is_warmup=data.get("is_warmup", set_type == SetKind.WARMUP),
        )


@dataclass
class ProgressionStep:
    """Adjustment applied to sets ``from_set``..``to_set`` (inclusive, 1-based)."""

    from_set: int
    to_set: int
    adjustment: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "from_set": self.from_set,
            "to_set": self.to_set,
            "adjustment": self.adjustment,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProgressionStep":
        """Create from dictionary."""
        return cls(
            from_set=int(_require(data, "from_set", "Progression step")),
            to_set=int(_require(data, "to_set", "Progression step")),
            adjustment=float(data.get("adjustment", 0.0)),
        )


@dataclass
class ProgressionRule:
    """A typed progression over ranges of sets within a group."""

    kind: ProgressionKind
    steps: list[ProgressionStep] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "kind": self.kind.value,
            "steps": [step.to_dict() for step in self.steps],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProgressionRule":
        """Create from dictionary."""
        kind = _require(data, "kind", "Progression rule")
        try:
            kind = ProgressionKind(kind)
        except ValueError:
            raise MalformedPlanError(f"Unknown progression kind {kind!r}") from None
        return cls(
            kind=kind,
            steps=[ProgressionStep.from_dict(s) for s in data.get("steps", [])],
        )


def new_set_group_id() -> str:
    """Generate a unique set-group id."""
    return f"sg_{uuid.uuid4().hex[:12]}"


@dataclass
class SetGroup:
    """A compact description of ``count`` sets built from ``base_set``.

    ``sets`` is a realized cache of the expansion and can always be
    regenerated from ``count``, ``base_set`` and ``progression``.
    """

    id: str
    count: int = 1
    base_set: ExerciseSet = field(default_factory=ExerciseSet)
    progression: ProgressionRule | None = None
    sets: list[ExerciseSet] = field(default_factory=list)

    @classmethod
    def create(cls, base_set: ExerciseSet | None = None) -> "SetGroup":
        """Create a new group with one set and no progression."""
        return cls(id=new_set_group_id(), base_set=base_set or ExerciseSet())

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "count": self.count,
            "base_set": self.base_set.to_dict(),
            "progression": self.progression.to_dict() if self.progression else None,
            "sets": [s.to_dict() for s in self.sets],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SetGroup":
        """Create from dictionary."""
        progression = data.get("progression")
        base_set = data.get("base_set")
        return cls(
            id=data.get("id") or new_set_group_id(),
            count=data.get("count", 1),
            base_set=ExerciseSet.from_dict(base_set) if base_set else ExerciseSet(),
            progression=ProgressionRule.from_dict(progression) if progression else None,
            sets=[ExerciseSet.from_dict(s) for s in data.get("sets", [])],
        )


@dataclass
class Exercise:
    """An exercise within a training day."""

    id: str
    name: str
    set_groups: list[SetGroup] = field(default_factory=list)
    muscle_groups: list[str] = field(default_factory=list)
    equipment: list[str] = field(default_factory=list)
    notes: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "set_groups": [group.to_dict() for group in self.set_groups],
            "muscle_groups": self.muscle_groups,
            "equipment": self.equipment,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Exercise":
        """Create from dictionary."""
        return cls(
            id=_require(data, "id", "Exercise"),
            name=_require(data, "name", "Exercise"),
            set_groups=[SetGroup.from_dict(g) for g in data.get("set_groups", [])],
            muscle_groups=data.get("muscle_groups", []),
            equipment=data.get("equipment", []),
            notes=data.get("notes", ""),
        )


@dataclass
class Meal:
    """A meal within a nutrition day."""

    id: str
    name: str
    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None
    notes: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fat": self.fat,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Meal":
        """Create from dictionary."""
        return cls(
            id=_require(data, "id", "Meal"),
            name=_require(data, "name", "Meal"),
            calories=data.get("calories"),
            protein=data.get("protein"),
            carbs=data.get("carbs"),
            fat=data.get("fat"),
            notes=data.get("notes", ""),
        )


@dataclass
class Day:
    """A single training (or nutrition) day."""

    day_number: int
    name: str = ""
    exercises: list[Exercise] = field(default_factory=list)
    meals: list[Meal] = field(default_factory=list)
    focus: str = ""  # e.g., "Push", "Lower Body"
    notes: str = ""

    @property
    def display_name(self) -> str:
        return self.name or f"Day {self.day_number}"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "day_number": self.day_number,
            "name": self.name,
            "exercises": [ex.to_dict() for ex in self.exercises],
            "meals": [meal.to_dict() for meal in self.meals],
            "focus": self.focus,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Day":
        """Create from dictionary."""
        return cls(
            day_number=_require(data, "day_number", "Day"),
            name=data.get("name", ""),
            exercises=[Exercise.from_dict(ex) for ex in data.get("exercises", [])],
            meals=[Meal.from_dict(m) for m in data.get("meals", [])],
            focus=data.get("focus", ""),
            notes=data.get("notes", ""),
        )


@dataclass
class Week:
    """A week in the plan."""

    week_number: int
    days: list[Day] = field(default_factory=list)
    name: str = ""
    deload: bool = False
    notes: str = ""

    @property
    def display_name(self) -> str:
        return self.name or f"Week {self.week_number}"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "week_number": self.week_number,
            "name": self.name,
            "days": [day.to_dict() for day in self.days],
            "deload": self.deload,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Week":
        """Create from dictionary."""
        return cls(
            week_number=_require(data, "week_number", "Week"),
            name=data.get("name", ""),
            days=[Day.from_dict(day) for day in data.get("days", [])],
            deload=data.get("deload", False),
            notes=data.get("notes", ""),
        )


@dataclass
class Program:
    """A complete training plan."""

    name: str
    weeks: list[Week] = field(default_factory=list)
    description: str = ""
    id: int | None = None
    created_at: datetime | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "name": self.name,
            "description": self.description,
            "weeks": [week.to_dict() for week in self.weeks],
        }

    @classmethod
    def from_dict(
        cls,
        data: dict,
        id: int | None = None,
        created_at: datetime | None = None,
    ) -> "Program":
        """Create from dictionary."""
        return cls(
            id=id,
            name=_require(data, "name", "Program"),
            description=data.get("description", ""),
            weeks=[Week.from_dict(week) for week in data.get("weeks", [])],
            created_at=created_at,
        )

    @property
    def days_per_week(self) -> int:
        """Get the number of days in the first week."""
        if not self.weeks:
            return 0
        return len(self.weeks[0].days)

    @property
    def total_weeks(self) -> int:
        """Get total number of weeks."""
        return len(self.weeks)

    def iter_set_groups(self):
        """Yield (week, day, exercise, group) for every set group in the plan."""
        for week in self.weeks:
            for day in week.days:
                for exercise in day.exercises:
                    for group in exercise.set_groups:
                        yield week, day, exercise, group

    def get_summary(self) -> str:
        """Generate a text outline of the plan."""
        from ..services.expansion import summarize_group

        summary = f"Program: {self.name}\n"
        if self.description:
            summary += f"Description: {self.description}\n"
        summary += f"Duration: {self.total_weeks} weeks, {self.days_per_week} days/week\n\n"

        for week in self.weeks:
            week_label = week.display_name
            if week.deload:
                week_label += " (Deload)"
            summary += f"{week_label}:\n"

            for day in week.days:
                summary += f"  {day.display_name}"
                if day.focus:
                    summary += f" - {day.focus}"
                summary += ":\n"

                for ex in day.exercises:
                    groups = ", ".join(summarize_group(g) for g in ex.set_groups)
                    summary += f"    - {ex.name}: {groups or 'No sets'}\n"

                for meal in day.meals:
                    kcal = f" ({meal.calories:g} kcal)" if meal.calories is not None else ""
                    summary += f"    - {meal.name}{kcal}\n"

            summary += "\n"

        return summary
