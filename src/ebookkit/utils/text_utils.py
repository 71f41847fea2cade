"""Text processing utilities.

Common helpers shared by the extractors and renderers.
"""

from __future__ import annotations

import html
import re
from pathlib import PurePath

import structlog
from langdetect import DetectorFactory, LangDetectException, detect

# Make langdetect deterministic
DetectorFactory.seed = 0

logger = structlog.get_logger(__name__)

MAX_TITLE_LENGTH = 100
LANGUAGE_SAMPLE_CHARS = 10000


def strip_extension(file_name: str) -> str:
    """Return the file name without its last extension.

    Examples:
        "My Book.pdf" -> "My Book"
        "archive.tar.gz" -> "archive.tar"
        "README" -> "README"
    """
    name = PurePath(file_name).name
    return re.sub(r"\.[^/.]+$", "", name)


def file_extension(file_name: str) -> str:
    """Return the lower-cased last extension including the dot, or ''."""
    return PurePath(file_name).suffix.lower()


def truncate_title(text: str) -> str:
    return text.strip()[:MAX_TITLE_LENGTH]


def escape_html(text: str) -> str:
    """Escape &, <, >, double and single quotes for embedding in markup."""
    return html.escape(text, quote=True).replace("&#x27;", "&#39;")


def detect_language(text: str) -> str | None:
    """Detect language of text using langdetect.

    Args:
        text: Text to analyze

    Returns:
        ISO 639-1 language code or None if detection fails
    """
    if not text.strip():
        return None
    try:
        # A sample is faster and just as reliable
        return detect(text[:LANGUAGE_SAMPLE_CHARS])
    except LangDetectException as e:
        logger.debug("text_utils.language_detection_failed", error=str(e))
        return None
