"""Append-only history of full plan snapshots."""

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from ..errors import SnapshotIndexError
from ..models.plan import Program
from .diff import ChangeRecord, diff_programs

logger = logging.getLogger(__name__)


def _serialize(state: Program | dict) -> str:
    if isinstance(state, Program):
        state = state.to_dict()
    return json.dumps(state, sort_keys=True)


@dataclass(frozen=True)
class Snapshot:
    """An immutable copy of plan state at a point in time.

    The state is held serialized; ``state`` hands out a fresh copy on every
    access so no caller can change what was recorded.
    """

    payload: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    description: str | None = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @classmethod
    def capture(cls, state: Program | dict, description: str | None = None) -> "Snapshot":
        return cls(payload=_serialize(state), description=description)

    @property
    def state(self) -> dict:
        return json.loads(self.payload)

    def to_program(self) -> Program:
        return Program.from_dict(self.state)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "state": self.state,
            "timestamp": self.timestamp.isoformat(),
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Snapshot":
        """Create from dictionary."""
        return cls(
            payload=_serialize(data["state"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            description=data.get("description"),
            id=data.get("id") or uuid.uuid4().hex,
        )


class SnapshotStore:
    """Ordered snapshot history, index 0 being the most recent.

    Restoring never truncates: adopting an old state and editing again
    pushes a new snapshot on top of the full timeline.
    """

    def __init__(self, snapshots: list[Snapshot] | None = None):
        self._snapshots: list[Snapshot] = list(snapshots or [])

    def __len__(self) -> int:
        return len(self._snapshots)

    def __iter__(self):
        return iter(self._snapshots)

    @property
    def history(self) -> tuple[Snapshot, ...]:
        """All snapshots, most recent first."""
        return tuple(self._snapshots)

    @property
    def current(self) -> Snapshot | None:
        return self._snapshots[0] if self._snapshots else None

    def push(
        self,
        state: Program | dict,
        description: str | None = None,
        force: bool = False,
    ) -> Snapshot | None:
        """Record a new snapshot at index 0.

        A state identical to the current snapshot is skipped unless
        ``force`` is set (an explicit checkpoint).

        Returns:
            The new snapshot, or None if it was skipped
        """
        payload = _serialize(state)
        if not force and self._snapshots and self._snapshots[0].payload == payload:
            logger.debug("Skipping snapshot identical to current state")
            return None

        snapshot = Snapshot(payload=payload, description=description)
        self._snapshots.insert(0, snapshot)
        logger.info(
            "Recorded snapshot %s (%d in history)",
            snapshot.id,
            len(self._snapshots),
            extra={"liftplan_snapshot_id": snapshot.id},
        )
        return snapshot

    def get(self, index: int) -> Snapshot:
        """Get a snapshot by position (0 = most recent).

        Raises:
            SnapshotIndexError: If index is out of range
        """
        if not 0 <= index < len(self._snapshots):
            raise SnapshotIndexError(
                f"Snapshot {index} does not exist (history has {len(self._snapshots)})"
            )
        return self._snapshots[index]

    def restore(self, index: int) -> dict:
        """Return the state stored at ``index`` for the caller to adopt."""
        snapshot = self.get(index)
        logger.info(
            "Restoring snapshot %d (%s)",
            index,
            snapshot.id,
            extra={"liftplan_snapshot_index": index},
        )
        return snapshot.state

    def compare(self, older_index: int, newer_index: int) -> list[ChangeRecord]:
        """Semantic diff between two stored snapshots."""
        older = self.get(older_index)
        newer = self.get(newer_index)
        return diff_programs(older.state, newer.state)

    def to_list(self) -> list[dict]:
        return [s.to_dict() for s in self._snapshots]

    @classmethod
    def from_list(cls, data: list[dict]) -> "SnapshotStore":
        return cls([Snapshot.from_dict(item) for item in data])
