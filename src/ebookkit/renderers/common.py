"""Helpers shared by the format renderers.

- RenderedArtifact: an in-memory output file, written atomically on demand
- sanitize_file_name / resolve_base_name: deterministic output names
- require_content: guard against missing or malformed ExtractedContent
"""

from __future__ import annotations

import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path

import structlog

from ebookkit.core.errors import RenderError
from ebookkit.core.models import ExtractedContent
from ebookkit.utils.text_utils import strip_extension

logger = structlog.get_logger(__name__)

MAX_FILE_NAME_LENGTH = 100
DEFAULT_BASE_NAME = "ebook"
ARTIFACT_FILE_MODE = 0o666


@dataclass(frozen=True)
class RenderedArtifact:
    """A rendered output file held in memory."""

    file_name: str
    media_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    def write_to(self, directory: Path) -> Path:
        """Write the artifact into directory without exposing partial files.

        The bytes go to a temporary file in the same directory first and are
        moved into place with os.replace.

        Args:
            directory: Output directory (created if missing)

        Returns:
            Path of the written file

        Raises:
            RenderError: If the file cannot be written
        """
        directory = Path(directory)
        target = directory / self.file_name
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=".tmp-", suffix=target.suffix)
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(self.content)
                # mkstemp creates 0600 files; exports get the usual umask-based mode
                os.chmod(tmp_name, ARTIFACT_FILE_MODE & ~_current_umask())
                os.replace(tmp_name, target)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise RenderError(f"Could not write {self.file_name}: {e}") from e

        logger.debug("renderers.artifact_written", path=str(target), size=self.size)
        return target


def _current_umask() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return umask


def sanitize_file_name(name: str) -> str:
    """Make a name safe for use as a file name.

    Non-alphanumeric characters become "_", runs of "_" collapse, leading and
    trailing "_" are trimmed and the result is capped at 100 characters.

    Examples:
        "My Book! (v2)" -> "My_Book_v2"
    """
    sanitized = re.sub(r"[^A-Za-z0-9]", "_", name)
    sanitized = re.sub(r"_+", "_", sanitized).strip("_")
    return sanitized[:MAX_FILE_NAME_LENGTH]


def resolve_base_name(
    book_name: str,
    content: ExtractedContent,
    original_file_name: str | None = None,
) -> str:
    """Pick the output base name for an export.

    The original upload name (without extension) wins; otherwise the
    extracted title, then the book name.
    """
    if original_file_name:
        source = strip_extension(original_file_name)
    else:
        source = content.title or book_name
    return sanitize_file_name(source) or DEFAULT_BASE_NAME


def require_content(content: object) -> ExtractedContent:
    """Validate renderer input.

    Raises:
        RenderError: If content is missing or not a well-formed ExtractedContent
    """
    if content is None:
        raise RenderError("Content not available for rendering")
    if not isinstance(content, ExtractedContent):
        raise RenderError(f"Expected ExtractedContent, got {type(content).__name__}")
    if not isinstance(content.text, str):
        raise RenderError("Extracted content has no text")
    if any(not isinstance(chapter, str) for chapter in content.chapters):
        raise RenderError("Extracted content has malformed chapters")
    return content


def display_title(book_name: str, content: ExtractedContent) -> str:
    return content.title or book_name
