"""Database engine setup and initialization."""

import logging
from pathlib import Path

import aiosqlite

from ..config import Config

logger = logging.getLogger(__name__)


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the database file path."""
    if data_dir is None:
        data_dir = Config.from_env().data_dir
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / "liftplan.db"


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the database schema."""
    if db_path is None:
        db_path = get_db_path()

    async with aiosqlite.connect(db_path) as db:
        await db.execute("""
            CREATE TABLE IF NOT EXISTS plans (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                description TEXT DEFAULT '',
                structure TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Append-only snapshot history; newest row is the current state
        await db.execute("""
            CREATE TABLE IF NOT EXISTS plan_snapshots (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                plan_id INTEGER NOT NULL,
                snapshot_uid TEXT NOT NULL,
                payload TEXT NOT NULL,
                description TEXT,
                created_at TEXT NOT NULL,
                FOREIGN KEY (plan_id) REFERENCES plans(id) ON DELETE CASCADE
            )
        """)

        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_plan_snapshots_plan
            ON plan_snapshots(plan_id)
        """)

        await db.commit()

    logger.info("Database initialized at %s", db_path)
