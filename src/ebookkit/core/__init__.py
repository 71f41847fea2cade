"""Core extraction module.

Modules:
- source_reader: extension-based dispatch (entry point)
- pdf_extractor: page-ordered PDF text and image extraction
- text_extractor: UTF-8 text and EPUB/MOBI placeholder extraction
- chapter_segmenter: heuristic chapter boundaries
- slide_packer: sentence-aware chunking
- ebook_processor: upload orchestration and export
- models / errors: shared types and error taxonomy
"""

__all__ = [
    "source_reader",
    "pdf_extractor",
    "text_extractor",
    "chapter_segmenter",
    "slide_packer",
    "ebook_processor",
    "models",
    "errors",
]
