"""Source Reader: extension-based dispatch to an extraction strategy.

- .pdf           -> pdf_extractor.extract_pdf
- .epub / .mobi  -> placeholder result (binary ebook formats are not parsed)
- anything else  -> text_extractor.extract_text (UTF-8)

This is the only place a document is parsed. Renderers consume the
ExtractedContent it returns and never touch the original file.
"""

from __future__ import annotations

import asyncio
from typing import BinaryIO

import structlog

from ebookkit.core.models import ExtractedContent
from ebookkit.core.pdf_extractor import extract_pdf
from ebookkit.core.text_extractor import extract_text, extract_unsupported_ebook
from ebookkit.utils.text_utils import file_extension

logger = structlog.get_logger(__name__)

PLACEHOLDER_EXTENSIONS = (".epub", ".mobi")


async def read_source(source: bytes | BinaryIO, file_name: str) -> ExtractedContent:
    """Extract content from an uploaded document.

    Args:
        source: File bytes or a binary file handle positioned at the start
        file_name: Declared file name, used for dispatch and title fallback

    Returns:
        ExtractedContent for the document

    Raises:
        ExtractionError: If a text document cannot be decoded
        EmptyContentError: If a text document is empty
    """
    extension = file_extension(file_name)
    logger.info("source_reader.dispatch", file=file_name, extension=extension or None)

    if extension in PLACEHOLDER_EXTENSIONS:
        return extract_unsupported_ebook(file_name)

    data = await _read_bytes(source)

    if extension == ".pdf":
        return await extract_pdf(data, file_name)

    return extract_text(data, file_name)


async def _read_bytes(source: bytes | BinaryIO) -> bytes:
    """Read a file handle without blocking the event loop."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    return await asyncio.to_thread(source.read)
