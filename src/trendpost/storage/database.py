"""SQLite database initialization and session management."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from sqlmodel import Session, SQLModel, create_engine

# Import models so SQLModel registers them
from trendpost.storage import models as _models  # noqa: F401

logger = logging.getLogger(__name__)

_engines: dict[str, object] = {}

# Columns added to an existing table on open when absent.
_MIGRATIONS = [
    ("contentitem", "topic_title", "TEXT DEFAULT ''"),
    ("contentitem", "image_prompt", "TEXT"),
    ("contentitem", "published_url", "TEXT"),
]


def _migrate_if_needed(db_path: Path) -> None:
    """Add any missing columns to existing tables (lightweight migration).

    This handles the case where the DB was created before new columns
    were added to the models (e.g. published_url on ContentItem).
    """
    if not db_path.exists():
        return

    conn = sqlite3.connect(str(db_path))
    try:
        columns: dict[str, set[str]] = {}
        for table, col, col_type in _MIGRATIONS:
            if table not in columns:
                cursor = conn.execute(f"PRAGMA table_info({table})")
                columns[table] = {row[1] for row in cursor.fetchall()}
            # Table not created yet: create_all will build it in full
            if columns[table] and col not in columns[table]:
                conn.execute(f"ALTER TABLE {table} ADD COLUMN {col} {col_type}")
                columns[table].add(col)
                logger.info("Added column %s.%s", table, col)

        conn.commit()
    finally:
        conn.close()


def get_engine(db_path: Path):
    """Get or create a SQLAlchemy engine for the given database path."""
    key = str(db_path)
    if key not in _engines:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        _migrate_if_needed(db_path)
        engine = create_engine(f"sqlite:///{db_path}", echo=False)
        SQLModel.metadata.create_all(engine)
        _engines[key] = engine
    return _engines[key]


def get_session(db_path: Path) -> Session:
    """Create a new database session."""
    engine = get_engine(db_path)
    return Session(engine, expire_on_commit=False)
