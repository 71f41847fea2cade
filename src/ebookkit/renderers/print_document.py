"""Print/PDF renderer.

Produces two artifacts:
- <base>.html: A4 print layout (margins, justified text, orphan/widow
  control) that opens the print dialog when loaded, so the user can
  "Save as PDF"
- <base>.txt: the raw extracted text, always downloadable even when no
  print dialog cooperates

trigger_print() hands the HTML to the host's browser to start printing.
"""

from __future__ import annotations

import re
import webbrowser
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

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

HTML_MEDIA_TYPE = "text/html"
TEXT_MEDIA_TYPE = "text/plain"
PRINT_DELAY_MS = 250

PRINT_TEMPLATE = """<!DOCTYPE html>
<html{lang_attr}>
<head>
  <meta charset="UTF-8">
  <title>{title}</title>
  <style>
    @page {{
      size: A4;
      margin: 2.5cm 2cm;
    }}
    body {{
      font-family: "Times New Roman", "Georgia", serif;
      font-size: 12pt;
      line-height: 1.8;
      color: #1a1a1a;
      background: #ffffff;
      margin: 0;
    }}
    h1 {{
      font-size: 24pt;
      text-align: center;
      margin: 20pt 0 30pt 0;
      border-bottom: 3pt solid #000000;
      padding-bottom: 15pt;
      line-height: 1.3;
    }}
    p {{
      margin: 0 0 12pt 0;
      text-align: justify;
      orphans: 3;
      widows: 3;
    }}
    p.paragraph-break {{
      margin-bottom: 18pt;
    }}
  </style>
  <script>
    window.addEventListener("load", function () {{
      setTimeout(function () {{ window.print(); }}, {delay});
    }});
  </script>
</head>
<body>
  <div class="container">
    <h1>{title}</h1>
    <div class="content">
{body}
    </div>
  </div>
</body>
</html>
"""


@dataclass(frozen=True)
class PrintBundle:
    """Print-ready HTML plus the plain-text fallback."""

    html: RenderedArtifact
    text: RenderedArtifact

    @property
    def artifacts(self) -> list[RenderedArtifact]:
        return [self.html, self.text]


def format_print_paragraphs(text: str) -> list[str]:
    """Split text into printed paragraphs.

    Blank lines separate paragraphs; single newlines inside a paragraph are
    reflowed into spaces.
    """
    paragraphs = [p.strip() for p in re.split(r"\n\s*\n", text) if p.strip()]
    if len(paragraphs) <= 1:
        paragraphs = [text.strip()]
    return [re.sub(r"\n+", " ", p) for p in paragraphs]


def render_print(
    book_name: str,
    content: ExtractedContent,
    original_file_name: str | None = None,
) -> PrintBundle:
    """Render the print HTML and the plain-text fallback.

    Args:
        book_name: Display name of the book
        content: Extracted content
        original_file_name: Upload name, used for the output file names

    Returns:
        PrintBundle with <base>.html and <base>.txt

    Raises:
        RenderError: If content is missing or cannot be encoded
    """
    content = require_content(content)
    base_name = resolve_base_name(book_name, content, original_file_name)

    body = "\n".join(
        f'      <p class="paragraph-break">{escape_html(p)}</p>' if i > 0 else f"      <p>{escape_html(p)}</p>"
        for i, p in enumerate(format_print_paragraphs(content.text))
    )
    lang_attr = f' lang="{escape_html(content.language)}"' if content.language else ""

    markup = PRINT_TEMPLATE.format(
        title=escape_html(display_title(book_name, content)),
        body=body,
        lang_attr=lang_attr,
        delay=PRINT_DELAY_MS,
    )

    try:
        html_bytes = markup.encode("utf-8")
        text_bytes = content.text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise RenderError(f"Could not encode print document: {e}") from e

    logger.info("print_document.rendered", base_name=base_name, size=len(html_bytes))

    return PrintBundle(
        html=RenderedArtifact(
            file_name=f"{base_name}.html",
            media_type=HTML_MEDIA_TYPE,
            content=html_bytes,
        ),
        text=RenderedArtifact(
            file_name=f"{base_name}.txt",
            media_type=TEXT_MEDIA_TYPE,
            content=text_bytes,
        ),
    )


def trigger_print(
    bundle: PrintBundle,
    directory: Path,
    opener: Callable[[str], bool] = webbrowser.open,
) -> bool:
    """Write the print HTML and open it so the host starts printing.

    The text fallback is written alongside, so the content is on disk even if
    no browser is available.

    Args:
        bundle: Output of render_print
        directory: Where to write both files
        opener: Callable receiving a file:// URI (defaults to webbrowser.open)

    Returns:
        True if the opener reported success, False otherwise
    """
    html_path = bundle.html.write_to(directory)
    bundle.text.write_to(directory)

    uri = html_path.resolve().as_uri()
    try:
        opened = bool(opener(uri))
    except Exception as e:
        logger.warning("print_document.open_failed", uri=uri, error=str(e))
        return False

    logger.info("print_document.print_triggered", uri=uri, opened=opened)
    return opened
