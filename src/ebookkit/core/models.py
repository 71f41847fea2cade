"""Shared data types for extraction and export.

ExtractedContent is the only contract between the Source Reader and the
renderers. It is frozen: once an extractor builds it, nothing mutates it.
"""

from __future__ import annotations

import base64
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Literal

EbookStatus = Literal["processing", "ready"]


@dataclass(frozen=True)
class ExtractedImage:
    """An image pulled from a source page."""

    data: bytes
    format: str = "png"
    page_index: int = 0  # 0-based page the image was found on

    @property
    def data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:image/{self.format};base64,{encoded}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": base64.b64encode(self.data).decode("ascii"),
            "format": self.format,
            "page_index": self.page_index,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExtractedImage":
        return cls(
            data=base64.b64decode(data["data"]),
            format=data.get("format", "png"),
            page_index=int(data.get("page_index", 0)),
        )


@dataclass(frozen=True)
class ExtractedContent:
    """Normalized parse result of a source document."""

    text: str
    title: str | None = None
    chapters: tuple[str, ...] = ()
    images: tuple[ExtractedImage, ...] = ()
    language: str | None = None
    source_format: str = "txt"
    is_placeholder: bool = False

    def __post_init__(self) -> None:
        # Accept lists from callers but store immutable tuples
        if not isinstance(self.chapters, tuple):
            object.__setattr__(self, "chapters", tuple(self.chapters))
        if not isinstance(self.images, tuple):
            object.__setattr__(self, "images", tuple(self.images))

    def images_for_page(self, page_index: int) -> list[ExtractedImage]:
        """Return images attributed to a 0-based page index."""
        return [img for img in self.images if img.page_index == page_index]

    def without_images(self) -> "ExtractedContent":
        return replace(self, images=())

    def to_dict(self, include_images: bool = True) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "text": self.text,
            "title": self.title,
            "chapters": list(self.chapters),
            "images": [img.to_dict() for img in self.images] if include_images else [],
            "language": self.language,
            "source_format": self.source_format,
            "is_placeholder": self.is_placeholder,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExtractedContent":
        return cls(
            text=data["text"],
            title=data.get("title"),
            chapters=tuple(data.get("chapters") or ()),
            images=tuple(ExtractedImage.from_dict(i) for i in data.get("images") or ()),
            language=data.get("language"),
            source_format=data.get("source_format", "txt"),
            is_placeholder=bool(data.get("is_placeholder", False)),
        )


@dataclass
class FormatAvailability:
    """Which export formats can be downloaded for an ebook."""

    ppt: bool = False
    docx: bool = False
    pdf: bool = False

    @classmethod
    def all_available(cls) -> "FormatAvailability":
        return cls(ppt=True, docx=True, pdf=True)

    def to_dict(self) -> dict[str, bool]:
        return {"ppt": self.ppt, "docx": self.docx, "pdf": self.pdf}


def generate_ebook_id() -> str:
    """Generate an ebook identifier like 'ebook-1718000000000-1a2b3c4d5'."""
    millis = int(datetime.now(timezone.utc).timestamp() * 1000)
    return f"ebook-{millis}-{uuid.uuid4().hex[:9]}"


@dataclass
class Ebook:
    """An uploaded book tracked by the library.

    extracted_content is present if and only if status is "ready".
    """

    id: str
    name: str
    file_name: str
    file_size: int
    status: EbookStatus = "processing"
    upload_date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    formats: FormatAvailability = field(default_factory=FormatAvailability)
    extracted_content: ExtractedContent | None = None

    def __post_init__(self) -> None:
        if self.status not in ("processing", "ready"):
            raise ValueError(f"Unknown ebook status: {self.status}")
        if (self.status == "ready") != (self.extracted_content is not None):
            raise ValueError(
                "extracted_content must be present exactly when status is 'ready' "
                f"(status={self.status})"
            )

    def mark_ready(self, content: ExtractedContent) -> "Ebook":
        """Return a ready copy of this ebook carrying the extracted content."""
        return replace(
            self,
            status="ready",
            formats=FormatAvailability.all_available(),
            extracted_content=content,
        )
