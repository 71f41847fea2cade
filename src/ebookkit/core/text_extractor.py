"""Plain-text and placeholder extraction.

Responsibilities:
- Decode text uploads as UTF-8
- Reject empty or whitespace-only documents (EmptyContentError)
- Derive title and chapters from paragraph/line structure
- Build the placeholder result for EPUB/MOBI uploads, whose binary formats
  are not parsed
"""

from __future__ import annotations

import re

import structlog

from ebookkit.core.chapter_segmenter import segment_chapters, split_paragraphs
from ebookkit.core.errors import EmptyContentError, ExtractionError
from ebookkit.core.models import ExtractedContent
from ebookkit.utils.text_utils import (
    detect_language,
    file_extension,
    strip_extension,
    truncate_title,
)

logger = structlog.get_logger(__name__)

UTF8_BOM = "\ufeff"


def extract_text(data: bytes, file_name: str) -> ExtractedContent:
    """Extract content from a plain-text document.

    Args:
        data: Raw file bytes
        file_name: Declared file name (used for the title fallback)

    Returns:
        ExtractedContent with paragraphs (or lines) as chapters

    Raises:
        ExtractionError: If the bytes are not valid UTF-8
        EmptyContentError: If the decoded text is empty or whitespace-only
    """
    try:
        decoded = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ExtractionError(file_name, f"not valid UTF-8 text ({e.reason})") from e

    decoded = decoded.removeprefix(UTF8_BOM).replace("\r\n", "\n").replace("\r", "\n")
    if not decoded.strip():
        raise EmptyContentError(file_name)

    paragraphs = split_paragraphs(decoded)
    lines = [line.strip() for line in decoded.split("\n") if line.strip()]

    title = _derive_title(lines, paragraphs, file_name)
    chapters = paragraphs if len(paragraphs) > 1 else lines

    logger.info(
        "text_extractor.done",
        file=file_name,
        chars=len(decoded),
        paragraphs=len(paragraphs),
        chapters=len(chapters),
    )

    text = decoded.strip()
    return ExtractedContent(
        text=text,
        title=title,
        chapters=tuple(chapters),
        language=detect_language(text),
        source_format="txt",
    )


def extract_unsupported_ebook(file_name: str) -> ExtractedContent:
    """Build the placeholder result for EPUB/MOBI uploads.

    Args:
        file_name: Declared file name

    Returns:
        ExtractedContent whose text names the limitation
    """
    fmt = file_extension(file_name).lstrip(".").upper() or "EBOOK"
    title = strip_extension(file_name)
    text = (
        f"Content from {file_name}\n\n"
        f"{fmt} file detected. Full text extraction requires additional processing."
    )
    logger.info("text_extractor.placeholder", file=file_name, format=fmt)

    return ExtractedContent(
        text=text,
        title=title,
        chapters=tuple(segment_chapters(text)),
        source_format=fmt.lower(),
        is_placeholder=True,
    )


def _derive_title(lines: list[str], paragraphs: list[str], file_name: str) -> str:
    """First non-empty line, else first paragraph, else the file stem."""
    for candidate in (lines[:1], paragraphs[:1]):
        if candidate:
            title = truncate_title(re.sub(r"\s+", " ", candidate[0]))
            if title:
                return title
    return strip_extension(file_name)
