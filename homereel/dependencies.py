"""
FastAPI dependency injection functions.

This module provides reusable dependencies for:
- The process-wide catalog store opened at startup
- Request-scoped access to application settings (re-exported get_settings)
"""

from fastapi import HTTPException, Request

from homereel.config import get_settings
from homereel.services.catalog_store import CatalogStore


def get_catalog_store(request: Request) -> CatalogStore:
    """
    Dependency returning the catalog store stored on app.state at startup.
    Raises HTTPException 503 if the store has not been opened.
    """
    store = getattr(request.app.state, "catalog_store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Catalog store not available")
    return store


__all__ = ["get_catalog_store", "get_settings"]
