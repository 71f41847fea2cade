"""Format renderers: ExtractedContent -> downloadable artifacts.

Modules:
- presentation: .pptx slide deck
- document: word-processor .doc markup
- print_document: print HTML + .txt fallback
- common: file naming, artifact writing, input guards
"""

from __future__ import annotations

from typing import Literal

from ebookkit.core.errors import RenderError
from ebookkit.core.models import ExtractedContent
from ebookkit.renderers.common import RenderedArtifact, resolve_base_name, sanitize_file_name
from ebookkit.renderers.document import render_document
from ebookkit.renderers.presentation import (
    MAX_CHAPTERS,
    SLIDE_MAX_LENGTH,
    render_presentation,
)
from ebookkit.renderers.print_document import PrintBundle, render_print, trigger_print

ExportFormat = Literal["ppt", "docx", "pdf"]
EXPORT_FORMATS: tuple[str, ...] = ("ppt", "docx", "pdf")


def export_content(
    book_name: str,
    content: ExtractedContent | None,
    fmt: str,
    original_file_name: str | None = None,
    *,
    max_chapters: int = MAX_CHAPTERS,
    slide_max_length: int = SLIDE_MAX_LENGTH,
) -> list[RenderedArtifact]:
    """Render one export format.

    Args:
        book_name: Display name of the book
        content: Extracted content (RenderError if None)
        fmt: "ppt", "docx" or "pdf"
        original_file_name: Upload name, used for output file names
        max_chapters: Presentation chapter cap
        slide_max_length: Presentation per-slide budget

    Returns:
        Artifacts for the format (two for "pdf": print HTML and .txt)

    Raises:
        RenderError: For unknown formats or rendering failures
    """
    if fmt == "ppt":
        return [
            render_presentation(
                book_name,
                content,
                original_file_name,
                max_chapters=max_chapters,
                slide_max_length=slide_max_length,
            )
        ]
    if fmt == "docx":
        return [render_document(book_name, content, original_file_name)]
    if fmt == "pdf":
        return render_print(book_name, content, original_file_name).artifacts

    raise RenderError(f"Unknown export format '{fmt}'. Expected one of: {', '.join(EXPORT_FORMATS)}")


__all__ = [
    "EXPORT_FORMATS",
    "ExportFormat",
    "PrintBundle",
    "RenderedArtifact",
    "export_content",
    "render_document",
    "render_presentation",
    "render_print",
    "resolve_base_name",
    "sanitize_file_name",
    "trigger_print",
]
