"""Ebook endpoints.

Upload, list, inspect, delete and download ebooks. Downloads are rendered
on demand from the stored extracted content. Handlers that only touch SQLite
or render are plain functions so they run in the threadpool.
"""

import structlog
from fastapi import APIRouter, File, HTTPException, Response, UploadFile, status

from ebookkit.config.app_config import load_app_config
from ebookkit.core.ebook_processor import export_ebook, process_upload
from ebookkit.core.errors import ExtractionError, RenderError, ValidationError
from ebookkit.core.models import Ebook
from ebookkit.db.ebooks_repository import delete_ebook, get_ebook, list_ebooks
from ebookkit.renderers import render_print
from ebookkit.web.schemas import EbookDetail, EbookListResponse, EbookSummary

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/ebooks", tags=["ebooks"])

DOWNLOAD_FORMATS = ("ppt", "docx", "pdf", "txt")


def _get_ebook_or_404(ebook_id: str) -> Ebook:
    ebook = get_ebook(ebook_id)
    if ebook is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Ebook '{ebook_id}' not found",
        )
    return ebook


@router.get("", response_model=EbookListResponse)
def list_all_ebooks() -> EbookListResponse:
    """List all uploaded ebooks."""
    ebooks = [EbookSummary.from_ebook(e) for e in list_ebooks()]

    logger.info("ebooks_list", count=len(ebooks))

    return EbookListResponse(ebooks=ebooks, count=len(ebooks))


@router.post("", response_model=EbookDetail, status_code=status.HTTP_201_CREATED)
async def upload_ebook(file: UploadFile = File(...)) -> EbookDetail:
    """Upload an ebook, extract its content and register it."""
    config = load_app_config()
    file_name = file.filename or ""
    data = await file.read()

    try:
        ebook = await process_upload(data, file_name, len(data), config=config)
    except ValidationError as e:
        too_large = len(data) > config.limits.max_upload_bytes
        raise HTTPException(
            status_code=(
                status.HTTP_413_REQUEST_ENTITY_TOO_LARGE if too_large else status.HTTP_400_BAD_REQUEST
            ),
            detail=str(e),
        )
    except ExtractionError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    return EbookDetail.from_ebook(ebook)


@router.get("/{ebook_id}", response_model=EbookDetail)
def get_ebook_detail(ebook_id: str) -> EbookDetail:
    """Get an ebook with its extracted content."""
    return EbookDetail.from_ebook(_get_ebook_or_404(ebook_id))


@router.delete("/{ebook_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_ebook(ebook_id: str) -> None:
    """Delete an ebook by ID."""
    if not delete_ebook(ebook_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Ebook '{ebook_id}' not found",
        )


@router.get("/{ebook_id}/download/{fmt}")
def download_ebook(ebook_id: str, fmt: str) -> Response:
    """Render and download an ebook.

    fmt is one of ppt, docx, pdf (print HTML) or txt.
    """
    if fmt not in DOWNLOAD_FORMATS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown format '{fmt}'. Use: {', '.join(DOWNLOAD_FORMATS)}",
        )

    ebook = _get_ebook_or_404(ebook_id)
    if ebook.status != "ready":
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Ebook '{ebook_id}' is still processing",
        )

    try:
        if fmt in ("pdf", "txt"):
            bundle = render_print(ebook.name, ebook.extracted_content, ebook.file_name)
            artifact = bundle.html if fmt == "pdf" else bundle.text
        else:
            artifact = export_ebook(ebook, fmt)[0]
    except RenderError as e:
        logger.error("ebooks_download_failed", ebook_id=ebook_id, fmt=fmt, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )

    logger.info("ebooks_download", ebook_id=ebook_id, fmt=fmt, size=artifact.size)

    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.file_name}"'},
    )
