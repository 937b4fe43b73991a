"""Data access layer for liftplan."""

import json
import logging
from datetime import datetime
from pathlib import Path

import aiosqlite

from ..models.plan import Program
from ..services.snapshots import Snapshot, SnapshotStore
from .engine import get_db_path

logger = logging.getLogger(__name__)


class PlanRepository:
    """Repository for training plans."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, program: Program) -> int:
        """Create a new plan."""
        data = program.to_dict()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO plans (name, description, structure)
                VALUES (?, ?, ?)
                """,
                (data["name"], data["description"], json.dumps(data)),
            )
            await db.commit()
            logger.info("Created plan %s", cursor.lastrowid, extra={"liftplan_plan_id": cursor.lastrowid})
            return cursor.lastrowid

    async def get(self, plan_id: int) -> Program | None:
        """Get a plan by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM plans WHERE id = ?", (plan_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_program(row)

    async def list_all(self) -> list[Program]:
        """List all plans."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM plans ORDER BY created_at DESC, id DESC")
            rows = await cursor.fetchall()
            return [self._row_to_program(row) for row in rows]

    async def update(self, program: Program) -> None:
        """Replace the stored structure of an existing plan."""
        if program.id is None:
            raise ValueError("Plan must have an ID to update")

        data = program.to_dict()
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                UPDATE plans SET
                    name = ?, description = ?, structure = ?,
                    updated_at = CURRENT_TIMESTAMP
                WHERE id = ?
                """,
                (data["name"], data["description"], json.dumps(data), program.id),
            )
            await db.commit()

    async def delete(self, plan_id: int) -> None:
        """Delete a plan and its history."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM plan_snapshots WHERE plan_id = ?", (plan_id,))
            await db.execute("DELETE FROM plans WHERE id = ?", (plan_id,))
            await db.commit()

    def _row_to_program(self, row: aiosqlite.Row) -> Program:
        """Convert a database row to a Program."""
        return Program.from_dict(
            json.loads(row["structure"]),
            id=row["id"],
            created_at=datetime.fromisoformat(row["created_at"]) if row["created_at"] else None,
        )


class SnapshotRepository:
    """Repository for plan snapshot history."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def add(self, plan_id: int, snapshot: Snapshot) -> int:
        """Persist a snapshot as the newest entry of a plan's history."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO plan_snapshots
                (plan_id, snapshot_uid, payload, description, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    plan_id,
                    snapshot.id,
                    snapshot.payload,
                    snapshot.description,
                    snapshot.timestamp.isoformat(),
                ),
            )
            await db.commit()
            return cursor.lastrowid

    async def list_for_plan(self, plan_id: int, limit: int | None = None) -> list[Snapshot]:
        """Get a plan's snapshots, most recent first."""
        query = "SELECT * FROM plan_snapshots WHERE plan_id = ? ORDER BY id DESC"
        params: tuple = (plan_id,)
        if limit is not None:
            query += " LIMIT ?"
            params = (plan_id, limit)

        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(query, params)
            rows = await cursor.fetchall()
            return [self._row_to_snapshot(row) for row in rows]

    async def load_store(self, plan_id: int, limit: int | None = None) -> SnapshotStore:
        """Build an in-memory store from a plan's persisted history."""
        return SnapshotStore(await self.list_for_plan(plan_id, limit))

    async def count(self, plan_id: int) -> int:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT COUNT(*) FROM plan_snapshots WHERE plan_id = ?", (plan_id,)
            )
            row = await cursor.fetchone()
            return row[0]

    def _row_to_snapshot(self, row: aiosqlite.Row) -> Snapshot:
        """Convert a database row to a Snapshot."""
        return Snapshot(
            payload=row["payload"],
            timestamp=datetime.fromisoformat(row["created_at"]),
            description=row["description"],
            id=row["snapshot_uid"],
        )
