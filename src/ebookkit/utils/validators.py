"""Upload validation helpers.

Checks run before a file reaches the Source Reader:
- extension must be one of SUPPORTED_EXTENSIONS
- size must not exceed the configured cap (100 MB by default)

Also resolves ebook id prefixes for the CLI.
"""

from __future__ import annotations

from ebookkit.core.errors import ValidationError
from ebookkit.utils.text_utils import file_extension

SUPPORTED_EXTENSIONS = (".pdf", ".epub", ".mobi", ".txt")
DEFAULT_MAX_UPLOAD_BYTES = 100 * 1024 * 1024


class AmbiguousEbookIdError(Exception):
    """Raised when an ebook id prefix matches multiple ebooks."""

    def __init__(self, prefix: str, candidates: list[str]):
        self.prefix = prefix
        self.candidates = candidates
        super().__init__(
            f"Prefix '{prefix}' is ambiguous. Candidates:\n"
            + "\n".join(f"  - {c}" for c in candidates)
        )


class EbookNotFoundError(Exception):
    """Raised when no ebook matches the given prefix."""

    def __init__(self, prefix: str):
        self.prefix = prefix
        super().__init__(f"No ebook found with id '{prefix}'")


def validate_upload(
    file_name: str,
    file_size: int,
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
) -> None:
    """Validate an upload's declared name and size.

    Args:
        file_name: Declared file name (only the extension is checked)
        file_size: Size in bytes
        max_bytes: Maximum accepted size

    Raises:
        ValidationError: If the extension is unsupported or the file is too big
    """
    extension = file_extension(file_name)
    if extension not in SUPPORTED_EXTENSIONS:
        raise ValidationError(
            file_name,
            f"invalid file type. Please upload: {', '.join(SUPPORTED_EXTENSIONS)}",
        )

    if file_size > max_bytes:
        limit_mb = max_bytes // (1024 * 1024)
        raise ValidationError(file_name, f"file size exceeds {limit_mb}MB limit")


def resolve_ebook_id(prefix: str, candidates: list[str]) -> str:
    """Resolve an ebook id prefix to a unique full id.

    Args:
        prefix: Partial or full ebook id
        candidates: All known ebook ids

    Returns:
        The unique matching id

    Raises:
        EbookNotFoundError: If no candidates match the prefix
        AmbiguousEbookIdError: If multiple candidates match the prefix
    """
    if prefix in candidates:
        return prefix

    matches = [c for c in candidates if c.startswith(prefix)]

    if len(matches) == 0:
        raise EbookNotFoundError(prefix)
    elif len(matches) == 1:
        return matches[0]
    else:
        raise AmbiguousEbookIdError(prefix, matches)
