"""
Routers package for API endpoints.

This package contains all API route handlers organized by functionality.
"""

from .stream import router as stream_router
from .upload import router as upload_router
from .media import router as media_router
from .subtitles import router as subtitles_router
from .tmdb import router as tmdb_router

__all__ = [
    "stream_router",
    "upload_router",
    "media_router",
    "subtitles_router",
    "tmdb_router",
]
