"""Chapter boundary detection.

Detection order (first pattern yielding 2+ chapters wins):
1. chapter_word: "Chapter 3", "CHAPTER 3", "Ch. 3"
2. number_dot: "12. Title"
3. markdown: "# Title" to "### Title"
4. roman_dot: "IV. Title"

Fallbacks:
- blank-line paragraphs, only when there are more than 3
- sentence packing at SEGMENT_MAX_LENGTH characters

Known limitation: ordinary prose that starts a line with "Chapter 4" (or
"3. ", "IV. ") is taken as a boundary. The heuristic has no grammar for
telling headings from prose.
"""

from __future__ import annotations

import re

import structlog

from ebookkit.core.slide_packer import pack_text

logger = structlog.get_logger(__name__)

# Constants
SEGMENT_MAX_LENGTH = 2000
MIN_PARAGRAPHS_FALLBACK = 4  # paragraph fallback needs more than 3
MIN_CHAPTERS = 2

# Each pattern captures the marker so re.split keeps it
CHAPTER_PATTERNS = [
    (re.compile(r"^[ \t]*((?:Chapter|CHAPTER|Ch\.)[ \t]+\d+)", re.MULTILINE), "chapter_word"),
    (re.compile(r"^[ \t]*(\d+\.[ \t]+)(?=\S)", re.MULTILINE), "number_dot"),
    (re.compile(r"^[ \t]*(#{1,3}[ \t]+)(?=\S)", re.MULTILINE), "markdown"),
    (re.compile(r"^[ \t]*([IVXLCDM]+\.[ \t]+)(?=\S)", re.MULTILINE), "roman_dot"),
]

PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


def segment_chapters(text: str) -> list[str]:
    """Partition text into an ordered, non-empty list of chapters.

    Args:
        text: Full document text

    Returns:
        Chapters in document order. Concatenated, they reproduce the input
        modulo whitespace.
    """
    for pattern, name in CHAPTER_PATTERNS:
        chapters = _split_on_pattern(text, pattern)
        if len(chapters) >= MIN_CHAPTERS:
            logger.debug("chapter_segmenter.pattern_matched", pattern=name, chapters=len(chapters))
            return chapters

    paragraphs = split_paragraphs(text)
    if len(paragraphs) >= MIN_PARAGRAPHS_FALLBACK:
        logger.debug("chapter_segmenter.paragraph_fallback", chapters=len(paragraphs))
        return paragraphs

    chunks = pack_text(text, SEGMENT_MAX_LENGTH)
    logger.debug("chapter_segmenter.length_fallback", chapters=len(chunks))
    return chunks


def split_paragraphs(text: str) -> list[str]:
    """Split text on blank lines, dropping empty paragraphs."""
    return [p.strip() for p in PARAGRAPH_BREAK.split(text) if p.strip()]


def _split_on_pattern(text: str, pattern: re.Pattern[str]) -> list[str]:
    """Split text on a heading pattern, keeping each marker with its body.

    re.split with one capture group returns
    [before, marker1, body1, marker2, body2, ...].
    """
    parts = pattern.split(text)
    if len(parts) < 3:
        return []

    chapters = []
    leading = parts[0].strip()
    if leading:
        chapters.append(leading)

    for i in range(1, len(parts) - 1, 2):
        marker = parts[i]
        body = parts[i + 1]
        chapter = (marker + body).strip()
        if chapter:
            chapters.append(chapter)

    return chapters
