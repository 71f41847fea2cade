"""Route handlers for the Web API."""

from ebookkit.web.routes.ebooks import router as ebooks_router
from ebookkit.web.routes.health import router as health_router

__all__ = [
    "health_router",
    "ebooks_router",
]
