"""
Stream router module.

Provides byte-range video playback for catalog entries:
- GET /api/stream/{media_id}: Stream a movie's video file
- GET /api/stream/episode/{episode_id}: Stream an episode's video file

Content-Type is always video/mp4, whatever the actual container.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException

from homereel.config import Settings, get_settings
from homereel.dependencies import get_catalog_store
from homereel.services.catalog_store import CatalogStore
from homereel.services.range_streamer import stream_file
from homereel.utils.filename_utils import resolve_upload_path


router = APIRouter(prefix="/api/stream", tags=["Stream"])


def _stream_registered_file(file_ref: Optional[str], range_header: Optional[str], settings: Settings, not_found: str):
    if not file_ref:
        raise HTTPException(status_code=404, detail=not_found)
    file_path = resolve_upload_path(settings.uploads_dir, file_ref)
    if file_path is None:
        raise HTTPException(status_code=404, detail="File not found")
    return stream_file(file_path, range_header, chunk_size=settings.stream_chunk_size)


# Registered before /{media_id} so "episode" is never parsed as a media id
@router.get("/episode/{episode_id}")
async def stream_episode(
    episode_id: int,
    range_header: Optional[str] = Header(None, alias="Range"),
    store: CatalogStore = Depends(get_catalog_store),
    settings: Settings = Depends(get_settings)
):
    """
    Stream the video file registered for an episode.

    Honors a single `Range: bytes=start-end` header with a 206 response;
    responds 404 when the episode or its file is missing.
    """
    episode = store.get_episode(episode_id)
    return _stream_registered_file(
        episode.get("file_path") if episode else None, range_header, settings, "Episode not found"
    )


@router.get("/{media_id}")
async def stream_media(
    media_id: int,
    range_header: Optional[str] = Header(None, alias="Range"),
    store: CatalogStore = Depends(get_catalog_store),
    settings: Settings = Depends(get_settings)
):
    """
    Stream the video file registered for a movie.

    Honors a single `Range: bytes=start-end` header with a 206 response;
    responds 404 when the media row or its file is missing.
    """
    media = store.get_media(media_id)
    return _stream_registered_file(
        media.get("file_path") if media else None, range_header, settings, "Media not found"
    )
