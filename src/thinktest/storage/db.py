"""SQLite database connection management and schema creation."""

from __future__ import annotations

import logging
from pathlib import Path

import aiosqlite

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS analysis_results (
    id TEXT PRIMARY KEY,
    filename TEXT NOT NULL,
    file_hash TEXT NOT NULL UNIQUE,
    analysis_method TEXT NOT NULL DEFAULT 'ast',
    parsed_files INTEGER,
    failed_files INTEGER,
    analysis_data TEXT NOT NULL,
    created_at REAL NOT NULL
);

CREATE TABLE IF NOT EXISTS elementor_analyses (
    id TEXT PRIMARY KEY,
    widget_name TEXT,
    is_elementor_widget INTEGER NOT NULL DEFAULT 0,
    analysis_data TEXT NOT NULL,
    created_at REAL NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_analysis_created
    ON analysis_results(created_at);
CREATE INDEX IF NOT EXISTS idx_elementor_created
    ON elementor_analyses(created_at);
"""


async def get_db(db_path: str | Path) -> aiosqlite.Connection:
    """Open (or create) the database and create its schema if needed."""
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    db = await aiosqlite.connect(str(db_path))
    db.row_factory = aiosqlite.Row
    await db.execute("PRAGMA journal_mode=WAL")

    await _init_schema(db)
    return db


async def _init_schema(db: aiosqlite.Connection) -> None:
    """Create the schema on a fresh database."""
    cursor = await db.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_version'"
    )
    if await cursor.fetchone() is not None:
        return

    await db.executescript(SCHEMA_SQL)
    await db.execute(
        "INSERT INTO schema_version (version) VALUES (?)",
        (SCHEMA_VERSION,),
    )
    await db.commit()
    logger.info("Database initialized at schema version %d", SCHEMA_VERSION)
