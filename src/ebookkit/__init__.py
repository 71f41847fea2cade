"""ebookkit: ebook content extraction and multi-format export."""

__version__ = "0.1.0"
