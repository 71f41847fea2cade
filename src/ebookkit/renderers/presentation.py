"""Slide deck renderer (python-pptx).

Deck layout:
- one title slide with the book title centered
- for each of the first MAX_CHAPTERS chapters, one or more content slides
  packed at ~SLIDE_MAX_LENGTH characters, headed "Chapter i" or
  "Chapter i, Part j"
- images whose page_index equals the chapter index go on that chapter's first
  slide: one image full width, two side by side, text below
- a small footer "<base name> · n/total" on every slide

Image attribution uses the raw page index. It lines up with chapters only
when chapters are PDF pages; chapters from the segmenter fallbacks (or PDFs
with blank pages skipped) will not match their true pages.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field

import structlog
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.text import MSO_AUTO_SIZE, PP_ALIGN
from pptx.util import Emu, Inches, Pt

from ebookkit.core.errors import RenderError
from ebookkit.core.models import ExtractedContent, ExtractedImage
from ebookkit.core.slide_packer import pack_text
from ebookkit.renderers.common import (
    RenderedArtifact,
    display_title,
    require_content,
    resolve_base_name,
)

logger = structlog.get_logger(__name__)

PPTX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"

# Constants
MAX_CHAPTERS = 50
SLIDE_MAX_LENGTH = 800
MAX_IMAGES_PER_SLIDE = 2

ACCENT = RGBColor(0, 120, 212)
MUTED = RGBColor(102, 102, 102)
FONT_SANS = "Calibri"

# Geometry (default 10in x 7.5in deck)
MARGIN_X = 0.6
CONTENT_WIDTH = 8.8
CONTENT_TOP = 1.5
CONTENT_BOTTOM = 6.8
IMAGE_AREA_HEIGHT = 2.9
IMAGE_GAP = 0.2


@dataclass
class SlidePlan:
    """One content slide before it is drawn."""

    header: str
    body: str
    images: list[ExtractedImage] = field(default_factory=list)


# ---------------------------
# Low-level text helpers
# ---------------------------
def _add_run(p, text: str, *, bold: bool = False, size: int = 20, color: RGBColor | None = None):
    r = p.add_run()
    r.text = text
    r.font.name = FONT_SANS
    r.font.size = Pt(size)
    r.font.bold = bold
    if color:
        r.font.color.rgb = color
    return r


def _set_textframe(tf, text: str, *, size: int = 20, align=PP_ALIGN.LEFT, bold: bool = False):
    tf.clear()
    tf.word_wrap = True
    tf.auto_size = MSO_AUTO_SIZE.TEXT_TO_FIT_SHAPE
    p = tf.paragraphs[0]
    p.alignment = align
    for i, line in enumerate(text.splitlines() or [""]):
        if i > 0:
            p = tf.add_paragraph()
            p.alignment = align
        _add_run(p, line, size=size, bold=bold)


def _add_footer(slide, text: str):
    tf = slide.shapes.add_textbox(Inches(5.0), Inches(7.0), Inches(4.6), Inches(0.35)).text_frame
    tf.word_wrap = False
    p = tf.paragraphs[0]
    p.alignment = PP_ALIGN.RIGHT
    _add_run(p, text, size=10, color=MUTED)


# ---------------------------
# Image placement
# ---------------------------
def _add_picture_fitted(slide, image: ExtractedImage, left: float, top: float,
                        max_w: float, max_h: float) -> bool:
    """Place an image inside a box, keeping its aspect ratio.

    Returns False (after logging) if the image cannot be placed.
    """
    try:
        pic = slide.shapes.add_picture(io.BytesIO(image.data), Inches(left), Inches(top), width=Inches(max_w))
        if pic.height > Inches(max_h):
            ratio = Inches(max_h) / pic.height
            pic.height = Emu(int(Inches(max_h)))
            pic.width = Emu(int(pic.width * ratio))
            # Re-center horizontally inside the box
            pic.left = Emu(int(Inches(left) + (Inches(max_w) - pic.width) / 2))
        return True
    except Exception as e:
        logger.warning(
            "presentation.image_failed",
            page_index=image.page_index,
            format=image.format,
            error=str(e),
        )
        return False


def _add_images(slide, images: list[ExtractedImage]) -> bool:
    """Lay out 1 image full width or 2 side by side. Returns True if any placed."""
    if len(images) == 1:
        return _add_picture_fitted(slide, images[0], MARGIN_X, CONTENT_TOP, CONTENT_WIDTH, IMAGE_AREA_HEIGHT)

    half = (CONTENT_WIDTH - IMAGE_GAP) / 2
    placed = False
    for i, image in enumerate(images[:MAX_IMAGES_PER_SLIDE]):
        left = MARGIN_X + i * (half + IMAGE_GAP)
        placed = _add_picture_fitted(slide, image, left, CONTENT_TOP, half, IMAGE_AREA_HEIGHT) or placed
    return placed


# ---------------------------
# Slide builders
# ---------------------------
def _add_title_slide(prs: Presentation, title: str, subtitle: str, footer: str):
    s = prs.slides.add_slide(prs.slide_layouts[0])  # Title
    try:
        _set_textframe(s.shapes.title.text_frame, title, size=40, align=PP_ALIGN.CENTER, bold=True)
        if len(s.placeholders) > 1:
            _set_textframe(s.placeholders[1].text_frame, subtitle, size=18, align=PP_ALIGN.CENTER)
    except (AttributeError, IndexError, KeyError):
        # Fallback to textboxes if placeholders differ
        tf = s.shapes.add_textbox(Inches(1), Inches(2.5), Inches(8), Inches(1.5)).text_frame
        _set_textframe(tf, title, size=40, align=PP_ALIGN.CENTER, bold=True)
        tf2 = s.shapes.add_textbox(Inches(1), Inches(4.2), Inches(8), Inches(0.8)).text_frame
        _set_textframe(tf2, subtitle, size=18, align=PP_ALIGN.CENTER)
    _add_footer(s, footer)


def _add_content_slide(prs: Presentation, plan: SlidePlan, footer: str):
    s = prs.slides.add_slide(prs.slide_layouts[5])  # Title Only
    try:
        tf = s.shapes.title.text_frame
        tf.clear()
        p = tf.paragraphs[0]
        p.alignment = PP_ALIGN.LEFT
        _add_run(p, plan.header, bold=True, size=30, color=ACCENT)
    except AttributeError:
        t = s.shapes.add_textbox(Inches(MARGIN_X), Inches(0.4), Inches(CONTENT_WIDTH), Inches(0.9)).text_frame
        _set_textframe(t, plan.header, size=30, bold=True)

    text_top = CONTENT_TOP
    if plan.images and _add_images(s, plan.images):
        text_top = CONTENT_TOP + IMAGE_AREA_HEIGHT + IMAGE_GAP

    if plan.body:
        tf = s.shapes.add_textbox(
            Inches(MARGIN_X), Inches(text_top), Inches(CONTENT_WIDTH), Inches(CONTENT_BOTTOM - text_top)
        ).text_frame
        _set_textframe(tf, plan.body, size=16 if text_top > CONTENT_TOP else 20)

    _add_footer(s, footer)


# ---------------------------
# Planning
# ---------------------------
def plan_slides(
    content: ExtractedContent,
    max_chapters: int = MAX_CHAPTERS,
    slide_max_length: int = SLIDE_MAX_LENGTH,
) -> list[SlidePlan]:
    """Turn chapters into content slide plans (title slide excluded).

    When the content has no chapters, the whole text is packed as one.
    """
    chapters = list(content.chapters) or [content.text]
    plans: list[SlidePlan] = []

    for index, chapter in enumerate(chapters[:max_chapters]):
        parts = pack_text(chapter, slide_max_length)
        images = content.images_for_page(index)[:MAX_IMAGES_PER_SLIDE]
        for part_no, part in enumerate(parts, 1):
            header = f"Chapter {index + 1}"
            if len(parts) > 1:
                header += f", Part {part_no}"
            plans.append(SlidePlan(header=header, body=part.strip(), images=images if part_no == 1 else []))

    return plans


# ---------------------------
# Public API
# ---------------------------
def render_presentation(
    book_name: str,
    content: ExtractedContent,
    original_file_name: str | None = None,
    *,
    max_chapters: int = MAX_CHAPTERS,
    slide_max_length: int = SLIDE_MAX_LENGTH,
) -> RenderedArtifact:
    """Render a .pptx slide deck from extracted content.

    Args:
        book_name: Display name of the book
        content: Extracted content
        original_file_name: Upload name, used for the output file name
        max_chapters: Chapters beyond this are left out of the deck
        slide_max_length: Character budget per slide

    Returns:
        RenderedArtifact named <base>.pptx

    Raises:
        RenderError: If content is missing or the deck cannot be serialized
    """
    content = require_content(content)
    base_name = resolve_base_name(book_name, content, original_file_name)
    title = display_title(book_name, content)
    plans = plan_slides(content, max_chapters, slide_max_length)
    total = len(plans) + 1

    try:
        prs = Presentation()
        if book_name and book_name != title:
            subtitle = book_name
        else:
            rendered = min(len(content.chapters) or 1, max_chapters)
            subtitle = f"{rendered} chapter" if rendered == 1 else f"{rendered} chapters"
        _add_title_slide(prs, title, subtitle, f"{base_name} · 1/{total}")

        for n, plan in enumerate(plans, 2):
            _add_content_slide(prs, plan, f"{base_name} · {n}/{total}")

        buffer = io.BytesIO()
        prs.save(buffer)
    except Exception as e:
        logger.error("presentation.render_failed", base_name=base_name, error=str(e))
        raise RenderError(f"Could not build presentation: {e}") from e

    logger.info("presentation.rendered", base_name=base_name, slides=total)

    return RenderedArtifact(
        file_name=f"{base_name}.pptx",
        media_type=PPTX_MEDIA_TYPE,
        content=buffer.getvalue(),
    )
