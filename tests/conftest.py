"""Pytest configuration and fixtures."""

import tempfile
from pathlib import Path

import pytest

from liftplan.models.plan import (
    Day,
    Exercise,
    ExerciseSet,
    Meal,
    Program,
    SetGroup,
    Week,
)


def build_program() -> Program:
    """Two-week plan with a lower day and an upper day per week."""
    weeks = []
    for week_number in (1, 2):
        weeks.append(
            Week(
                week_number=week_number,
                days=[
                    Day(
                        day_number=1,
                        name="Lower",
                        focus="Legs",
                        exercises=[
                            Exercise(
                                id="ex_squat",
                                name="Squat",
                                set_groups=[
                                    SetGroup(
                                        id="sg_squat",
                                        count=3,
                                        base_set=ExerciseSet(reps=5, weight=100.0, rest_seconds=180),
                                    )
                                ],
                                muscle_groups=["quads", "glutes"],
                            ),
                        ],
                    ),
                    Day(
                        day_number=2,
                        name="Upper",
                        exercises=[
                            Exercise(
                                id="ex_bench",
                                name="Bench Press",
                                set_groups=[
                                    SetGroup(
                                        id="sg_bench",
                                        count=3,
                                        base_set=ExerciseSet(reps=8, weight=80.0, rest_seconds=120),
                                    )
                                ],
                            ),
                        ],
                        meals=[
                            Meal(id="meal_post", name="Post-workout", calories=600, protein=40),
                        ],
                    ),
                ],
            )
        )
    return Program(name="Strength Block", description="Test plan", weeks=weeks)


def copy_program(program: Program) -> Program:
    return Program.from_dict(program.to_dict())


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def sample_program():
    """Create a sample plan for testing."""
    return build_program()


@pytest.fixture
def squat_group():
    """Three sets of ten at 100kg with no progression."""
    return SetGroup(
        id="sg_test",
        count=3,
        base_set=ExerciseSet(reps=10, weight=100.0, rest_seconds=120),
    )


@pytest.fixture
def edited_program(sample_program):
    """Independent copy of the sample plan, ready to be edited."""
    return copy_program(sample_program)
