"""Database module for ebook list persistence."""

from ebookkit.db.database import get_db, init_db

__all__ = ["get_db", "init_db"]
