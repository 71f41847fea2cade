"""FastAPI application factory.

Main entry point for the ebookkit Web API.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ebookkit import __version__
from ebookkit.config.app_config import load_app_config
from ebookkit.db.database import init_db
from ebookkit.db.ebooks_repository import list_ebook_ids
from ebookkit.web.routes import ebooks_router, health_router

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    # Startup
    config = load_app_config()
    db_path = Path(config.paths.db_path)
    init_db(db_path)
    logger.info(
        "api_startup",
        db_path=str(db_path.absolute()),
        ebooks_found=len(list_ebook_ids()),
        max_upload_bytes=config.limits.max_upload_bytes,
    )
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="ebookkit API",
        description="Upload ebooks and download them as slides, documents or print files",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware for web clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(ebooks_router)

    return app


# Default app instance for uvicorn
app = create_app()
