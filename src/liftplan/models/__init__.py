"""Data models for liftplan."""

from .plan import (
    Day,
    Exercise,
    ExerciseSet,
    Meal,
    Program,
    ProgressionKind,
    ProgressionRule,
    ProgressionStep,
    SetGroup,
    SetKind,
    Tempo,
    Week,
)

__all__ = [
    "Day",
    "Exercise",
    "ExerciseSet",
    "Meal",
    "Program",
    "ProgressionKind",
    "ProgressionRule",
    "ProgressionStep",
    "SetGroup",
    "SetKind",
    "Tempo",
    "Week",
]
