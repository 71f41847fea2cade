"""Error taxonomy for the extraction and export pipeline.

Document-level failures (validation, extraction, rendering) propagate to the
caller. Page-level failures are represented by PageExtractionWarning and are
only logged, never raised out of an extraction.
"""

from __future__ import annotations


class EbookError(Exception):
    """Base exception for ebook processing errors."""

    pass


class ValidationError(EbookError):
    """Raised when an upload is rejected before extraction starts."""

    def __init__(self, file_name: str, reason: str):
        self.file_name = file_name
        self.reason = reason
        super().__init__(f"Invalid upload '{file_name}': {reason}")


class ExtractionError(EbookError):
    """Raised when a document cannot be parsed into text."""

    def __init__(self, file_name: str, detail: str = ""):
        self.file_name = file_name
        self.detail = detail
        msg = f"Could not extract content from '{file_name}'"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class EmptyContentError(ExtractionError):
    """Raised when the decoded document is empty or whitespace-only."""

    def __init__(self, file_name: str):
        super().__init__(file_name, "file is empty")


class PageExtractionWarning(UserWarning):
    """One PDF page could not be extracted. Logged, never raised."""

    def __init__(self, page_number: int, error: BaseException):
        self.page_number = page_number
        self.error = error
        super().__init__(f"Page {page_number} could not be extracted: {error}")


class RenderError(EbookError):
    """Raised when an artifact cannot be rendered."""

    pass
