"""
TMDB service module.

Thin proxy over The Movie Database v3 API used by the catalog UI to look up
titles, show details and season episode lists.
"""

import logging
from typing import Any, Dict, Optional

import requests
from fastapi import HTTPException

from homereel.config import Settings, get_settings


logger = logging.getLogger(__name__)


def tmdb_get(path: str, params: Optional[Dict[str, Any]] = None, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    GET a TMDB endpoint and return its JSON body unchanged.

    Args:
        path: API path such as "/search/multi" or "/tv/1399"
        params: Extra query parameters (api_key is added automatically)
        settings: Settings providing the API key, base URL and timeout

    Raises:
        HTTPException: 500 if no API key is configured or the upstream call fails
    """
    settings = settings or get_settings()
    if not settings.tmdb_api_key:
        raise HTTPException(status_code=500, detail="TMDB API Key not configured")

    query = {"api_key": settings.tmdb_api_key}
    query.update(params or {})

    try:
        response = requests.get(f"{settings.tmdb_base_url}{path}", params=query, timeout=settings.tmdb_timeout)
        response.raise_for_status()
        return response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"TMDB error for {path}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch from TMDB")
