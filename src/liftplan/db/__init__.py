"""Database layer for liftplan."""

from .engine import get_db_path, init_db
from .repositories import PlanRepository, SnapshotRepository

__all__ = [
    "get_db_path",
    "init_db",
    "PlanRepository",
    "SnapshotRepository",
]
