"""Tests for PDF extraction and the PDF engine loader (F2)."""

import asyncio

import pytest

from ebookkit.core import pdf_extractor
from ebookkit.core.pdf_extractor import (
    PdfEngineLoader,
    extract_pdf,
    get_pdf_engine_loader,
    reset_pdf_engine_loader,
)
from ebookkit.core.source_reader import read_source
from ebookkit.utils.fault_isolation import best_effort_map

PAGES = [
    "Gardening Basics for Small Spaces",
    "Soil matters more than anything else. Rich soil grows healthy plants.",
    "Water early in the morning. Plants drink before the heat of the day.",
]


def _make_pdf(pages: list[str]) -> bytes:
    """Build an in-memory PDF with one text block per page."""
    import fitz

    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def _make_pdf_with_image() -> bytes:
    """Build a 2-page PDF with a PNG on the second page."""
    import fitz

    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, 20, 20), False)
    pix.clear_with(180)
    png = pix.tobytes("png")

    doc = fitz.open()
    first = doc.new_page()
    first.insert_text((72, 72), "A page with only words on it.")
    second = doc.new_page()
    second.insert_text((72, 72), "A page with a picture below.")
    second.insert_image(fitz.Rect(72, 100, 172, 200), stream=png)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def three_page_pdf():
    """Three pages of text."""
    return _make_pdf(PAGES)


class TestExtractPdf:
    """Tests for extract_pdf()."""

    @pytest.mark.asyncio
    async def test_pages_in_order(self, three_page_pdf):
        """Each text page is a chapter, in page order."""
        content = await extract_pdf(three_page_pdf, "garden.pdf")

        assert content.source_format == "pdf"
        assert not content.is_placeholder
        assert len(content.chapters) == 3
        assert content.chapters[0] == PAGES[0]
        assert content.text.index("Soil") < content.text.index("Water")

    @pytest.mark.asyncio
    async def test_title_from_first_page(self, three_page_pdf):
        """The first line of page 1 is the title."""
        content = await extract_pdf(three_page_pdf, "garden.pdf")
        assert content.title == PAGES[0]

    @pytest.mark.asyncio
    async def test_short_first_line_falls_back_to_file_name(self):
        """A first line of 5 chars or fewer is not a title."""
        data = _make_pdf(["Hi", "Some body text that goes on for a bit."])
        content = await extract_pdf(data, "Short Title.pdf")
        assert content.title == "Short Title"

    @pytest.mark.asyncio
    async def test_single_page_is_segmented(self):
        """A single text page goes through the chapter segmenter."""
        data = _make_pdf(["Only one page of text here."])
        content = await extract_pdf(data, "one.pdf")
        assert content.chapters == ("Only one page of text here.",)

    @pytest.mark.asyncio
    async def test_failing_page_is_isolated(self, three_page_pdf, monkeypatch):
        """A page that throws is skipped; the other pages survive."""
        original = pdf_extractor._page_text_sync

        def flaky(doc, page_number):
            if page_number == 2:
                raise RuntimeError("damaged content stream")
            return original(doc, page_number)

        monkeypatch.setattr(pdf_extractor, "_page_text_sync", flaky)

        content = await extract_pdf(three_page_pdf, "garden.pdf")

        assert "Gardening Basics" in content.text
        assert "Water early" in content.text
        assert "Soil matters" not in content.text
        assert len(content.chapters) >= 1
        assert not content.is_placeholder

    @pytest.mark.asyncio
    async def test_blank_pdf_gives_placeholder(self):
        """A PDF without text yields a scanned-content placeholder."""
        data = _make_pdf(["", ""])
        content = await extract_pdf(data, "scan.pdf")

        assert content.is_placeholder
        assert content.chapters == ()
        assert "scanned content" in content.text
        assert content.title == "scan"

    @pytest.mark.asyncio
    async def test_corrupt_pdf_gives_placeholder(self):
        """Unreadable bytes yield a placeholder, not an exception."""
        content = await extract_pdf(b"this is not a pdf at all", "broken.pdf")

        assert content.is_placeholder
        assert content.title == "broken"
        assert content.text.startswith("Content from broken")

    @pytest.mark.asyncio
    async def test_engine_load_failure_gives_placeholder(self, three_page_pdf):
        """If the engine cannot be imported the result is a placeholder."""
        loader = PdfEngineLoader("ebookkit_missing_pdf_engine")
        content = await extract_pdf(three_page_pdf, "garden.pdf", loader=loader)

        assert content.is_placeholder
        assert "could not be loaded" in content.text
        assert not loader.is_loaded

    @pytest.mark.asyncio
    async def test_images_carry_page_index(self):
        """Embedded images are extracted with their 0-based page index."""
        content = await extract_pdf(_make_pdf_with_image(), "pictures.pdf")

        assert len(content.images) == 1
        image = content.images[0]
        assert image.page_index == 1
        assert image.data
        assert content.images_for_page(0) == []

    @pytest.mark.asyncio
    async def test_extraction_is_idempotent(self, three_page_pdf):
        """Same bytes, same text and title."""
        first = await extract_pdf(three_page_pdf, "garden.pdf")
        second = await extract_pdf(three_page_pdf, "garden.pdf")
        assert first.text == second.text
        assert first.title == second.title

    @pytest.mark.asyncio
    async def test_dispatch_from_source_reader(self, three_page_pdf):
        """.pdf uploads reach the PDF extractor."""
        content = await read_source(three_page_pdf, "garden.pdf")
        assert content.source_format == "pdf"


class TestPdfEngineLoader:
    """Tests for the lazy engine loader."""

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_load(self):
        """Concurrent first calls import the engine once."""
        loader = PdfEngineLoader()

        engines = await asyncio.gather(*(loader.get_engine() for _ in range(5)))

        assert loader.load_count == 1
        assert all(engine is engines[0] for engine in engines)

    @pytest.mark.asyncio
    async def test_later_calls_reuse_engine(self):
        """The engine is memoized after the first load."""
        loader = PdfEngineLoader()
        await loader.get_engine()
        await loader.get_engine()
        assert loader.load_count == 1
        assert loader.is_loaded

    @pytest.mark.asyncio
    async def test_failed_load_is_retried(self):
        """A failed load is not memoized."""
        loader = PdfEngineLoader("ebookkit_missing_pdf_engine")
        for _ in range(2):
            with pytest.raises(ImportError):
                await loader.get_engine()
        assert loader.load_count == 0

    def test_global_loader_singleton(self):
        """get_pdf_engine_loader returns one instance until reset."""
        first = get_pdf_engine_loader()
        assert get_pdf_engine_loader() is first
        reset_pdf_engine_loader()
        assert get_pdf_engine_loader() is not first


class TestBestEffortMap:
    """Tests for best_effort_map()."""

    @pytest.mark.asyncio
    async def test_failures_do_not_abort(self):
        """Failing items are collected, the rest succeed in order."""

        async def square(n):
            if n == 3:
                raise ValueError("no threes")
            return n * n

        result = await best_effort_map([1, 2, 3, 4], square, event="test.failed")

        assert result.values == [1, 4, 16]
        assert [item for item, _ in result.failures] == [3]
        assert isinstance(result.failures[0][1], ValueError)
