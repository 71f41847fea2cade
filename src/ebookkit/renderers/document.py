"""Word-processor document renderer.

Emits Word-flavoured HTML saved as .doc: Word (and LibreOffice) open it
natively and can re-save it as .docx.

Paragraph structure is kept:
- several blank-line paragraphs -> one <p> per paragraph
- single newlines inside a paragraph -> one <p> per line
"""

from __future__ import annotations

import re

import structlog

from ebookkit.core.errors import RenderError
from ebookkit.core.models import ExtractedContent
from ebookkit.renderers.common import (
    RenderedArtifact,
    display_title,
    require_content,
    resolve_base_name,
)
from ebookkit.utils.text_utils import escape_html

logger = structlog.get_logger(__name__)

DOC_MEDIA_TYPE = "application/msword"

DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html xmlns:o="urn:schemas-microsoft-com:office:office"
      xmlns:w="urn:schemas-microsoft-com:office:word"
      xmlns="http://www.w3.org/TR/REC-html40"{lang_attr}>
<head>
  <meta charset="UTF-8">
  <meta name="ProgId" content="Word.Document">
  <meta name="Generator" content="Microsoft Word">
  <meta name="Originator" content="Microsoft Word">
  <title>{title}</title>
  <style>
    @page {{
      size: 8.5in 11in;
      margin: 1in 1.25in;
    }}
    body {{
      font-family: "Calibri", "Arial", sans-serif;
      font-size: 11pt;
      line-height: 1.6;
      color: #000000;
      text-align: left;
    }}
    .title {{
      font-size: 28pt;
      font-weight: bold;
      text-align: center;
      margin-top: 24pt;
      margin-bottom: 36pt;
      border-bottom: 3pt solid #000000;
      padding-bottom: 18pt;
      line-height: 1.2;
      color: #1a1a1a;
    }}
    .content {{
      margin-top: 24pt;
    }}
    p {{
      margin: 0 0 12pt 0;
      text-align: justify;
      orphans: 2;
      widows: 2;
    }}
  </style>
</head>
<body>
  <div class="title">{title}</div>
  <div class="content">
{body}
  </div>
</body>
</html>
"""


def format_document_paragraphs(text: str) -> list[str]:
    """Split text into the blocks the document renders, one per <p>.

    Intentional line breaks are preserved: every non-empty line of a
    paragraph becomes its own block.
    """
    paragraphs = [p for p in re.split(r"\n\s*\n", text) if p.strip()]
    if len(paragraphs) <= 1:
        paragraphs = [text]

    blocks: list[str] = []
    for paragraph in paragraphs:
        lines = [line.strip() for line in paragraph.split("\n") if line.strip()]
        blocks.extend(lines)
    return blocks


def render_document(
    book_name: str,
    content: ExtractedContent,
    original_file_name: str | None = None,
) -> RenderedArtifact:
    """Render a word-processor-openable .doc file.

    Args:
        book_name: Display name of the book
        content: Extracted content
        original_file_name: Upload name, used for the output file name

    Returns:
        RenderedArtifact named <base>.doc

    Raises:
        RenderError: If content is missing or cannot be encoded
    """
    content = require_content(content)
    base_name = resolve_base_name(book_name, content, original_file_name)

    body = "\n".join(
        f"    <p>{escape_html(block)}</p>" for block in format_document_paragraphs(content.text)
    )
    lang_attr = f' lang="{escape_html(content.language)}"' if content.language else ""

    markup = DOCUMENT_TEMPLATE.format(
        title=escape_html(display_title(book_name, content)),
        body=body,
        lang_attr=lang_attr,
    )

    try:
        data = markup.encode("utf-8")
    except UnicodeEncodeError as e:
        raise RenderError(f"Could not encode document: {e}") from e

    logger.info("document.rendered", base_name=base_name, size=len(data))

    return RenderedArtifact(file_name=f"{base_name}.doc", media_type=DOC_MEDIA_TYPE, content=data)
