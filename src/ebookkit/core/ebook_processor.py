"""Upload processing orchestrator.

Responsibilities:
- Validate the upload (extension, size)
- Register the ebook as "processing"
- Run the Source Reader once
- Mark the ebook "ready" with its ExtractedContent, or drop the record if
  extraction fails
- Export a ready ebook to one of the download formats
"""

from __future__ import annotations

import asyncio
import os
from typing import BinaryIO

import structlog

from ebookkit.config.app_config import AppConfig, load_app_config
from ebookkit.core.errors import RenderError
from ebookkit.core.models import Ebook, generate_ebook_id
from ebookkit.core.source_reader import read_source
from ebookkit.db.ebooks_repository import delete_ebook, insert_ebook, update_ebook
from ebookkit.renderers import RenderedArtifact, export_content
from ebookkit.utils.text_utils import strip_extension
from ebookkit.utils.validators import validate_upload

logger = structlog.get_logger(__name__)


async def process_upload(
    source: bytes | BinaryIO,
    file_name: str,
    file_size: int | None = None,
    *,
    config: AppConfig | None = None,
    persist: bool = True,
) -> Ebook:
    """Validate, extract and register an uploaded ebook.

    Args:
        source: File bytes or binary handle
        file_name: Declared file name
        file_size: Size in bytes (measured from source when omitted)
        config: App config (defaults to load_app_config())
        persist: Store the record in the ebooks database

    Returns:
        The ready Ebook

    Raises:
        ValidationError: If the upload is rejected
        ExtractionError: If the document cannot be extracted
    """
    config = config or load_app_config()
    if file_size is None:
        file_size = _measure_source(source)

    validate_upload(file_name, file_size, config.limits.max_upload_bytes)

    ebook = Ebook(
        id=generate_ebook_id(),
        name=strip_extension(file_name),
        file_name=file_name,
        file_size=file_size,
    )
    if persist:
        await asyncio.to_thread(insert_ebook, ebook)

    logger.info("ebook_processor.start", ebook_id=ebook.id, file=file_name, size=file_size)

    try:
        content = await read_source(source, file_name)
    except Exception as e:
        logger.error("ebook_processor.failed", ebook_id=ebook.id, file=file_name, error=str(e))
        if persist:
            await asyncio.to_thread(delete_ebook, ebook.id)
        raise

    ready = ebook.mark_ready(content)
    if persist:
        await asyncio.to_thread(update_ebook, ready)

    logger.info(
        "ebook_processor.ready",
        ebook_id=ready.id,
        title=content.title,
        chapters=len(content.chapters),
        placeholder=content.is_placeholder,
    )
    return ready


def _measure_source(source: bytes | BinaryIO) -> int:
    """Size of the upload; handles are measured from their current position."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return len(source)
    start = source.tell()
    end = source.seek(0, os.SEEK_END)
    source.seek(start)
    return end - start


def export_ebook(
    ebook: Ebook,
    fmt: str,
    *,
    config: AppConfig | None = None,
) -> list[RenderedArtifact]:
    """Render a ready ebook to a download format.

    Args:
        ebook: Ebook with extracted content
        fmt: "ppt", "docx" or "pdf"
        config: App config (renderer budgets)

    Returns:
        Rendered artifacts

    Raises:
        RenderError: If the ebook is not ready or rendering fails
    """
    if ebook.status != "ready" or ebook.extracted_content is None:
        raise RenderError(f"Content not available for download: '{ebook.file_name}' is still processing")

    config = config or load_app_config()
    return export_content(
        ebook.name,
        ebook.extracted_content,
        fmt,
        ebook.file_name,
        max_chapters=config.rendering.max_chapters,
        slide_max_length=config.rendering.slide_max_length,
    )
