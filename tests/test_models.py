"""Tests for data models."""

import pytest

from liftplan.errors import MalformedPlanError
from liftplan.models.plan import (
    Day,
    Exercise,
    ExerciseSet,
    Program,
    ProgressionKind,
    ProgressionRule,
    ProgressionStep,
    SetGroup,
    SetKind,
    Tempo,
)


class TestExerciseSet:
    """Tests for ExerciseSet model."""

    def test_defaults(self):
        """Test a default set is a straight set with standard rest."""
        s = ExerciseSet()
        assert s.set_type == SetKind.STRAIGHT
        assert s.rest_seconds == 90
        assert s.weight is None

    def test_set_round_trip_with_tempo(self):
        """Test serialization keeps ranges and tempo."""
        s = ExerciseSet(
            set_number=2,
            reps=8,
            reps_max=10,
            weight=60.0,
            rpe=8,
            tempo=Tempo(3, 1, 1, 0),
            notes="Pause at the bottom",
        )
        data = s.to_dict()

        assert data["reps_max"] == 10
        assert data["tempo"] == {"eccentric": 3, "pause_bottom": 1, "concentric": 1, "pause_top": 0}
        assert ExerciseSet.from_dict(data) == s

    def test_copy_is_deep(self):
        """Test copying a set does not share its tempo."""
        s = ExerciseSet(tempo=Tempo(3, 0, 1, 0))
        c = s.copy(set_number=4)

        c.tempo.eccentric = 5
        assert s.tempo.eccentric == 3
        assert c.set_number == 4

    def test_warmup_type_implies_flag(self):
        """Test a warm-up set type marks the set as warm-up."""
        s = ExerciseSet.from_dict({"set_type": "warmup", "reps": 5})
        assert s.is_warmup

    def test_unknown_set_type(self):
        """Test an unknown set type is rejected."""
        with pytest.raises(MalformedPlanError):
            ExerciseSet.from_dict({"set_type": "cluster"})

    def test_negative_tempo(self):
        """Test tempo phases must be non-negative."""
        with pytest.raises(MalformedPlanError):
            Tempo(eccentric=-1)

    def test_tempo_str(self):
        """Test tempo display notation."""
        assert str(Tempo(3, 1, 2, 0)) == "3-1-2-0"


class TestSetGroup:
    """Tests for SetGroup model."""

    def test_create_defaults(self):
        """Test new groups start with one set and no progression."""
        group = SetGroup.create()
        assert group.id.startswith("sg_")
        assert group.count == 1
        assert group.progression is None
        assert group.sets == []

    def test_group_round_trip(self):
        """Test serialization keeps the progression rule."""
        group = SetGroup(
            id="sg_1",
            count=3,
            base_set=ExerciseSet(reps=5, weight=100.0),
            progression=ProgressionRule(
                kind=ProgressionKind.LINEAR,
                steps=[ProgressionStep(from_set=2, to_set=3, adjustment=5)],
            ),
        )
        data = group.to_dict()

        assert data["progression"]["kind"] == "linear"
        assert data["progression"]["steps"][0]["from_set"] == 2
        assert SetGroup.from_dict(data) == group

    def test_unknown_progression_kind(self):
        """Test an unknown progression kind is rejected."""
        with pytest.raises(MalformedPlanError):
            ProgressionRule.from_dict({"kind": "wave", "steps": []})

    def test_step_requires_range(self):
        """Test a step without a range is rejected."""
        with pytest.raises(MalformedPlanError):
            ProgressionStep.from_dict({"adjustment": 5})


class TestProgram:
    """Tests for Program model."""

    def test_program_round_trip(self, sample_program):
        """Test serialization of the whole tree."""
        data = sample_program.to_dict()

        assert data["name"] == "Strength Block"
        assert len(data["weeks"]) == 2
        assert data["weeks"][0]["days"][0]["exercises"][0]["name"] == "Squat"
        assert data["weeks"][0]["days"][1]["meals"][0]["calories"] == 600
        assert Program.from_dict(data).to_dict() == data

    def test_missing_exercise_id(self):
        """Test exercises need a stable id."""
        with pytest.raises(MalformedPlanError, match="id"):
            Exercise.from_dict({"name": "Squat"})

    def test_missing_day_number(self):
        """Test days need their ordinal."""
        with pytest.raises(MalformedPlanError, match="day_number"):
            Day.from_dict({"name": "Lower"})

    def test_properties(self, sample_program):
        """Test derived counts."""
        assert sample_program.total_weeks == 2
        assert sample_program.days_per_week == 2
        assert len(list(sample_program.iter_set_groups())) == 4

    def test_display_names(self, sample_program):
        """Test weeks and days fall back to numbered names."""
        week = sample_program.weeks[0]
        assert week.display_name == "Week 1"
        assert week.days[0].display_name == "Lower"
        assert Day(day_number=3).display_name == "Day 3"

    def test_program_summary(self, sample_program):
        """Test summary generation."""
        summary = sample_program.get_summary()

        assert "Strength Block" in summary
        assert "2 weeks, 2 days/week" in summary
        assert "Lower - Legs" in summary
        assert "Squat: 3x5 @ 100kg" in summary
        assert "Post-workout (600 kcal)" in summary
