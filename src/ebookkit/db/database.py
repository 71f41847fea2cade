"""SQLite database connection and schema management.

Stores the ebook list across sessions. Extracted content lives in its own
table, one row per ebook, so listing ebooks never loads document text.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("db/ebooks.db")

# Current database path (module-level for simplicity in CLI context)
_db_path: Path | None = None


def init_db(db_path: Path | None = None) -> None:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.

    Args:
        db_path: Path to database file. Defaults to db/ebooks.db
    """
    global _db_path
    _db_path = Path(db_path) if db_path else DEFAULT_DB_PATH

    with get_db() as conn:
        _create_schema(conn)

    logger.info("database.initialized", path=str(_db_path))


@contextmanager
def get_db() -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    Yields:
        SQLite connection with row factory set to sqlite3.Row

    Example:
        with get_db() as conn:
            rows = conn.execute("SELECT * FROM ebooks").fetchall()
    """
    db_path = _db_path or DEFAULT_DB_PATH

    # Ensure directory exists
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")

    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        -- ebooks: one row per uploaded file
        CREATE TABLE IF NOT EXISTS ebooks (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            file_name TEXT NOT NULL,
            file_size INTEGER NOT NULL,
            upload_date TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'processing' CHECK(status IN ('processing', 'ready')),
            formats TEXT NOT NULL DEFAULT '{}'
        );

        -- ebook_content: extracted content of ready ebooks (images not stored)
        CREATE TABLE IF NOT EXISTS ebook_content (
            ebook_id TEXT PRIMARY KEY REFERENCES ebooks(id) ON DELETE CASCADE,
            text TEXT NOT NULL,
            title TEXT,
            chapters TEXT NOT NULL DEFAULT '[]',
            language TEXT,
            source_format TEXT NOT NULL,
            is_placeholder INTEGER NOT NULL DEFAULT 0
        );

        CREATE INDEX IF NOT EXISTS idx_ebooks_upload_date ON ebooks(upload_date);
        """
    )
