"""Pydantic schemas for the Web API.

Serialization models for ebooks and their extracted content.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from ebookkit.core.models import Ebook, ExtractedContent


# =============================================================================
# EBOOK SCHEMAS
# =============================================================================


class FormatsResponse(BaseModel):
    """Export formats available for download."""

    ppt: bool = False
    docx: bool = False
    pdf: bool = False


class EbookSummary(BaseModel):
    """Summary of an ebook for list views."""

    id: str
    name: str
    file_name: str
    file_size: int
    upload_date: str
    status: str
    formats: FormatsResponse

    @classmethod
    def from_ebook(cls, ebook: Ebook) -> "EbookSummary":
        return cls(
            id=ebook.id,
            name=ebook.name,
            file_name=ebook.file_name,
            file_size=ebook.file_size,
            upload_date=ebook.upload_date.isoformat(),
            status=ebook.status,
            formats=FormatsResponse(**ebook.formats.to_dict()),
        )


class ExtractedContentResponse(BaseModel):
    """Extracted content without image payloads."""

    text: str
    title: str | None = None
    chapters: list[str] = Field(default_factory=list)
    image_count: int = 0
    language: str | None = None
    source_format: str
    is_placeholder: bool = False

    @classmethod
    def from_content(cls, content: ExtractedContent) -> "ExtractedContentResponse":
        return cls(
            text=content.text,
            title=content.title,
            chapters=list(content.chapters),
            image_count=len(content.images),
            language=content.language,
            source_format=content.source_format,
            is_placeholder=content.is_placeholder,
        )


class EbookDetail(EbookSummary):
    """Ebook with its extracted content."""

    extracted_content: ExtractedContentResponse | None = None

    @classmethod
    def from_ebook(cls, ebook: Ebook) -> "EbookDetail":
        summary = EbookSummary.from_ebook(ebook)
        content = ebook.extracted_content
        return cls(
            **summary.model_dump(),
            extracted_content=ExtractedContentResponse.from_content(content) if content else None,
        )


class EbookListResponse(BaseModel):
    """Response for list of ebooks."""

    ebooks: list[EbookSummary]
    count: int


# =============================================================================
# HEALTH SCHEMA
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
