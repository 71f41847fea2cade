"""PDF text extraction module.

Responsibilities:
- Load the PDF engine (PyMuPDF) lazily, once per process
- Extract text page by page, in order
- Isolate per-page failures (logged, never fatal)
- Extract embedded images with their page index
- Handle engine-load failures, corrupt, protected or scanned PDFs with a
  descriptive placeholder instead of raising

Dependencies:
- pymupdf (fitz)
- langdetect
"""

from __future__ import annotations

import asyncio
import importlib
from types import ModuleType
from typing import Any

import structlog

from ebookkit.core.chapter_segmenter import segment_chapters
from ebookkit.core.errors import PageExtractionWarning
from ebookkit.core.models import ExtractedContent, ExtractedImage
from ebookkit.utils.fault_isolation import best_effort_map
from ebookkit.utils.text_utils import detect_language, strip_extension, truncate_title

logger = structlog.get_logger(__name__)

# Constants
PDF_ENGINE_MODULE = "fitz"
MIN_TITLE_LENGTH = 6  # first-page line must be longer than 5 chars to be a title
MAX_IMAGES_PER_PAGE = 10


class PdfEngineLoader:
    """Lazy, once-only loader for the PDF engine.

    Concurrent callers share a single load: the first caller imports the
    engine under the lock, later callers reuse the memoized module. A failed
    load is not memoized, so the next call tries again.
    """

    def __init__(self, module_name: str = PDF_ENGINE_MODULE):
        self.module_name = module_name
        self.load_count = 0
        self._engine: ModuleType | None = None
        self._lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._engine is not None

    async def get_engine(self) -> ModuleType:
        """Return the engine module, importing it on first use.

        Raises:
            ImportError: If the engine cannot be imported
        """
        if self._engine is not None:
            return self._engine

        async with self._lock:
            if self._engine is None:
                logger.info("pdf_extractor.engine_loading", module=self.module_name)
                self._engine = await asyncio.to_thread(
                    importlib.import_module, self.module_name
                )
                self.load_count += 1
                logger.info("pdf_extractor.engine_loaded", module=self.module_name)

        return self._engine


# Process-wide loader
_engine_loader: PdfEngineLoader | None = None


def get_pdf_engine_loader() -> PdfEngineLoader:
    """Get the global PDF engine loader."""
    global _engine_loader
    if _engine_loader is None:
        _engine_loader = PdfEngineLoader()
    return _engine_loader


def reset_pdf_engine_loader() -> None:
    """Reset the engine loader (for testing)."""
    global _engine_loader
    _engine_loader = None


async def extract_pdf(
    data: bytes,
    file_name: str,
    loader: PdfEngineLoader | None = None,
) -> ExtractedContent:
    """Extract page-ordered text and images from PDF bytes.

    Never raises for document problems: engine-load failures, unreadable or
    protected files and text-less PDFs all produce a placeholder result.

    Args:
        data: Raw PDF bytes
        file_name: Declared file name (title fallback)
        loader: Engine loader (defaults to the process-wide one)

    Returns:
        ExtractedContent with one chapter per text-bearing page
    """
    fallback_title = strip_extension(file_name)
    loader = loader or get_pdf_engine_loader()

    logger.info("pdf_extractor.start", file=file_name, size=len(data))

    try:
        engine = await loader.get_engine()
    except Exception as e:
        logger.error("pdf_extractor.engine_load_failed", file=file_name, error=str(e))
        return _placeholder(
            fallback_title,
            "PDF file detected. The PDF engine could not be loaded "
            f"({e}). Please check the installation.",
        )

    try:
        doc = await asyncio.to_thread(engine.open, stream=data, filetype="pdf")
    except Exception as e:
        logger.error("pdf_extractor.open_failed", file=file_name, error=str(e))
        return _placeholder(fallback_title, f"Error processing PDF: {e}")

    try:
        if doc.needs_pass:
            logger.warning("pdf_extractor.protected", file=file_name)
            return _placeholder(fallback_title, "Error processing PDF: the file is password-protected.")

        page_numbers = range(1, doc.page_count + 1)
        text_result = await best_effort_map(
            page_numbers,
            lambda n: _read_page_text(doc, n),
            event="pdf_extractor.page_failed",
            file=file_name,
        )
        image_result = await best_effort_map(
            page_numbers,
            lambda n: _read_page_images(doc, n, file_name),
            event="pdf_extractor.page_images_failed",
            file=file_name,
        )
        total_pages = doc.page_count
    finally:
        doc.close()

    pages = [text for text in text_result.values if text.strip()]
    images = [img for page_images in image_result.values for img in page_images]
    title = _derive_title(pages, fallback_title)

    logger.info(
        "pdf_extractor.metrics",
        file=file_name,
        total_pages=total_pages,
        pages_with_text=len(pages),
        failed_pages=len(text_result.failures),
        images=len(images),
    )

    if not pages:
        logger.warning("pdf_extractor.no_text", file=file_name, hint="likely scanned or image-only")
        return ExtractedContent(
            text=(
                f"Content from {title}\n\n"
                "PDF file processed. This PDF may contain only images or scanned content. "
                "Text extraction was not possible."
            ),
            title=title,
            chapters=(),
            images=tuple(images),
            source_format="pdf",
            is_placeholder=True,
        )

    text = "\n\n".join(pages)
    chapters = pages if len(pages) > 1 else segment_chapters(text)

    return ExtractedContent(
        text=text,
        title=title,
        chapters=tuple(chapters),
        images=tuple(images),
        language=detect_language(text),
        source_format="pdf",
    )


async def _read_page_text(doc: Any, page_number: int) -> str:
    """Extract one page's text runs joined by single spaces.

    Args:
        doc: Open PyMuPDF document
        page_number: 1-based page number

    Raises:
        PageExtractionWarning: If the page cannot be read
    """
    try:
        return await asyncio.to_thread(_page_text_sync, doc, page_number)
    except Exception as e:
        raise PageExtractionWarning(page_number, e) from e


def _page_text_sync(doc: Any, page_number: int) -> str:
    page = doc[page_number - 1]
    raw = page.get_text("text")
    runs = [run.strip() for run in raw.split("\n") if run.strip()]
    return " ".join(runs)


async def _read_page_images(doc: Any, page_number: int, file_name: str) -> list[ExtractedImage]:
    """Extract embedded images of one page; a bad image is skipped."""
    page = doc[page_number - 1]
    xrefs = [info[0] for info in page.get_images(full=True)][:MAX_IMAGES_PER_PAGE]

    result = await best_effort_map(
        xrefs,
        lambda xref: asyncio.to_thread(_extract_image_sync, doc, xref, page_number - 1),
        event="pdf_extractor.image_failed",
        file=file_name,
        page=page_number,
    )
    return result.values


def _extract_image_sync(doc: Any, xref: int, page_index: int) -> ExtractedImage:
    info = doc.extract_image(xref)
    if not info or not info.get("image"):
        raise ValueError(f"image xref {xref} has no data")
    fmt = info.get("ext", "png").lower()
    if fmt == "jpg":
        fmt = "jpeg"
    return ExtractedImage(data=info["image"], format=fmt, page_index=page_index)


def _derive_title(pages: list[str], fallback: str) -> str:
    """First non-empty line of the first text page if long enough."""
    if pages:
        lines = [line.strip() for line in pages[0].split("\n") if line.strip()]
        if lines:
            candidate = truncate_title(lines[0])
            if len(candidate) >= MIN_TITLE_LENGTH:
                return candidate
    return fallback


def _placeholder(title: str, message: str) -> ExtractedContent:
    text = f"Content from {title}\n\n{message}"
    return ExtractedContent(
        text=text,
        title=title,
        chapters=tuple(segment_chapters(text)),
        source_format="pdf",
        is_placeholder=True,
    )
