"""CLI commands for liftplan."""

from .diff import diff
from .expand import expand_cmd
from .history import history
from .init import init
from .plans import plans
from .sync import sync

__all__ = [
    "diff",
    "expand_cmd",
    "history",
    "init",
    "plans",
    "sync",
]
