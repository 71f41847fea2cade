"""Repository functions for the ebooks and ebook_content tables.

Provides CRUD operations for Ebook records. Images are not persisted: a
reloaded ebook carries its text, title and chapters but no images.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime

import structlog

from ebookkit.core.models import Ebook, ExtractedContent, FormatAvailability
from ebookkit.db.database import get_db

logger = structlog.get_logger(__name__)


def insert_ebook(ebook: Ebook) -> None:
    """Insert a new ebook record (and its content when ready).

    Args:
        ebook: Ebook to store

    Raises:
        sqlite3.IntegrityError: If the id already exists
    """
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO ebooks (id, name, file_name, file_size, upload_date, status, formats)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                ebook.id,
                ebook.name,
                ebook.file_name,
                ebook.file_size,
                ebook.upload_date.isoformat(),
                ebook.status,
                json.dumps(ebook.formats.to_dict()),
            ),
        )
        if ebook.extracted_content is not None:
            _upsert_content(conn, ebook.id, ebook.extracted_content)

    logger.debug("ebooks.inserted", ebook_id=ebook.id, status=ebook.status)


def update_ebook(ebook: Ebook) -> None:
    """Update status, formats and content of an existing ebook.

    Args:
        ebook: Ebook with updated fields

    Raises:
        KeyError: If the ebook does not exist
    """
    with get_db() as conn:
        cursor = conn.execute(
            "UPDATE ebooks SET name = ?, status = ?, formats = ? WHERE id = ?",
            (ebook.name, ebook.status, json.dumps(ebook.formats.to_dict()), ebook.id),
        )
        if cursor.rowcount == 0:
            raise KeyError(ebook.id)

        if ebook.extracted_content is not None:
            _upsert_content(conn, ebook.id, ebook.extracted_content)
        else:
            conn.execute("DELETE FROM ebook_content WHERE ebook_id = ?", (ebook.id,))

    logger.debug("ebooks.updated", ebook_id=ebook.id, status=ebook.status)


def get_ebook(ebook_id: str) -> Ebook | None:
    """Get an ebook with its extracted content.

    Args:
        ebook_id: Ebook identifier

    Returns:
        Ebook if found, None otherwise
    """
    with get_db() as conn:
        row = conn.execute(
            """
            SELECT e.*, c.text, c.title, c.chapters, c.language, c.source_format, c.is_placeholder
            FROM ebooks e LEFT JOIN ebook_content c ON c.ebook_id = e.id
            WHERE e.id = ?
            """,
            (ebook_id,),
        ).fetchone()

    if row is None:
        return None

    return _row_to_ebook(row)


def list_ebooks() -> list[Ebook]:
    """List all ebooks in upload order, with their content."""
    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT e.*, c.text, c.title, c.chapters, c.language, c.source_format, c.is_placeholder
            FROM ebooks e LEFT JOIN ebook_content c ON c.ebook_id = e.id
            ORDER BY e.upload_date, e.id
            """
        ).fetchall()

    return [_row_to_ebook(row) for row in rows]


def list_ebook_ids() -> list[str]:
    with get_db() as conn:
        rows = conn.execute("SELECT id FROM ebooks ORDER BY upload_date, id").fetchall()
    return [row["id"] for row in rows]


def delete_ebook(ebook_id: str) -> bool:
    """Delete an ebook and its content.

    Returns:
        True if a record was deleted
    """
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM ebooks WHERE id = ?", (ebook_id,))
        deleted = cursor.rowcount > 0

    logger.debug("ebooks.deleted", ebook_id=ebook_id, deleted=deleted)
    return deleted


def _upsert_content(conn: sqlite3.Connection, ebook_id: str, content: ExtractedContent) -> None:
    conn.execute(
        """
        INSERT INTO ebook_content (ebook_id, text, title, chapters, language, source_format, is_placeholder)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(ebook_id) DO UPDATE SET
            text = excluded.text,
            title = excluded.title,
            chapters = excluded.chapters,
            language = excluded.language,
            source_format = excluded.source_format,
            is_placeholder = excluded.is_placeholder
        """,
        (
            ebook_id,
            content.text,
            content.title,
            json.dumps(list(content.chapters), ensure_ascii=False),
            content.language,
            content.source_format,
            int(content.is_placeholder),
        ),
    )


def _row_to_ebook(row: sqlite3.Row) -> Ebook:
    """Convert database row to Ebook."""
    content = None
    if row["status"] == "ready" and row["text"] is not None:
        content = ExtractedContent(
            text=row["text"],
            title=row["title"],
            chapters=tuple(json.loads(row["chapters"] or "[]")),
            language=row["language"],
            source_format=row["source_format"],
            is_placeholder=bool(row["is_placeholder"]),
        )

    formats = json.loads(row["formats"] or "{}")
    status = row["status"] if content is not None else "processing"

    return Ebook(
        id=row["id"],
        name=row["name"],
        file_name=row["file_name"],
        file_size=row["file_size"],
        status=status,
        upload_date=datetime.fromisoformat(row["upload_date"]),
        formats=FormatAvailability(
            ppt=bool(formats.get("ppt", False)),
            docx=bool(formats.get("docx", False)),
            pdf=bool(formats.get("pdf", False)),
        ),
        extracted_content=content,
    )
