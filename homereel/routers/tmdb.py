"""
TMDB router module.

This module provides metadata lookup endpoints for:
- Multi search across movies and shows
- TV show details
- TV season details (episode list)
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Query

from homereel.config import Settings, get_settings
from homereel.services.tmdb_service import tmdb_get


router = APIRouter(prefix="/api", tags=["TMDB"])


@router.get("/search")
async def search(
    q: str = Query(None, description="Title to search for"),
    settings: Settings = Depends(get_settings)
) -> Dict[str, Any]:
    """Search TMDB for movies and shows."""
    if not q:
        raise HTTPException(status_code=400, detail="Query required")
    return tmdb_get("/search/multi", {"query": q}, settings=settings)


@router.get("/tmdb/tv/{tv_id}")
async def get_tv_details(tv_id: int, settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    return tmdb_get(f"/tv/{tv_id}", settings=settings)


@router.get("/tmdb/tv/{tv_id}/season/{season_number}")
async def get_tv_season(tv_id: int, season_number: int, settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    return tmdb_get(f"/tv/{tv_id}/season/{season_number}", settings=settings)
