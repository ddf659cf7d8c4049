"""
Media router module.

This module provides catalog endpoints for:
- Listing and fetching movies/shows (with episodes and their subtitle tracks)
- Registering an uploaded video as a movie or as a show episode
- Deleting a catalog entry together with its files

Registration links the video's extracted subtitles to the saved row before
responding; linking problems are logged, never returned as errors.
"""

import os
import sqlite3
import uuid
import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from homereel.config import Settings, get_settings
from homereel.dependencies import get_catalog_store
from homereel.models import MediaCreateRequest, MediaSaveResponse
from homereel.services.catalog_linker import link_subtitles
from homereel.services.catalog_store import CatalogStore
from homereel.services.sync_service import choose_default_track
from homereel.utils.filename_utils import resolve_upload_path
from homereel.utils.logging_utils import get_request_logger


router = APIRouter(prefix="/api/media", tags=["Media"])
logger = logging.getLogger(__name__)


def _link_quietly(store: CatalogStore, settings: Settings, file_path: str, log, **owner) -> None:
    try:
        linked = link_subtitles(
            store,
            settings.uploads_dir,
            file_path,
            subtitles_subdir=settings.subtitles_subdir,
            log=log,
            **owner
        )
        if linked:
            log.info(f"Linked {len(linked)} subtitle tracks for {file_path}")
    except Exception as e:
        log.error(f"Subtitle linking failed for {file_path}: {str(e)}")


def _remove_upload(settings: Settings, file_ref: str) -> None:
    path = resolve_upload_path(settings.uploads_dir, file_ref)
    if path and os.path.isfile(path):
        os.remove(path)


@router.get("")
async def list_media(store: CatalogStore = Depends(get_catalog_store)) -> List[Dict[str, Any]]:
    """List all catalog entries, newest first."""
    return store.list_media()


@router.get("/{media_id}")
async def get_media(media_id: int, store: CatalogStore = Depends(get_catalog_store)) -> Dict[str, Any]:
    """
    Get one catalog entry.

    Movies carry `available_subtitles` and `default_subtitle`; shows carry
    `episodes`, each with its own `available_subtitles` and `default_subtitle`.
    """
    media = store.get_media(media_id)
    if not media:
        raise HTTPException(status_code=404, detail="Media not found")

    if media.get("type") == "tv":
        episodes = store.list_episodes(media_id)
        for episode in episodes:
            episode["available_subtitles"] = store.list_subtitle_tracks(episode_id=episode["id"])
            episode["default_subtitle"] = choose_default_track(episode["available_subtitles"], episode.get("subtitle_path"))
        media["episodes"] = episodes
    else:
        media["available_subtitles"] = store.list_subtitle_tracks(media_id=media_id)
        media["default_subtitle"] = choose_default_track(media["available_subtitles"], media.get("subtitle_path"))

    return media


@router.post("", response_model=MediaSaveResponse)
async def save_media(
    payload: MediaCreateRequest,
    store: CatalogStore = Depends(get_catalog_store),
    settings: Settings = Depends(get_settings)
) -> MediaSaveResponse:
    """
    Register a movie, or an episode of a show.

    - type "tv": the show is looked up by tmdb_id (created when missing) and the
      (season, episode) row is inserted or updated; subtitles link to the episode.
      Returns the show id.
    - otherwise: a new movie row is inserted (movies are not deduplicated);
      subtitles link to the movie. Returns the movie id.
    """
    log = get_request_logger(f"register-{uuid.uuid4().hex[:8]}")
    data = payload.model_dump()

    try:
        if payload.type == "tv":
            show = store.find_show_by_tmdb_id(payload.tmdb_id)
            if show:
                media_id = show["id"]
            else:
                media_id = store.insert_media({**data, "file_path": None, "subtitle_path": None})
                log.info(f"Created show {payload.title!r} as media {media_id}")

            episode_id = store.upsert_episode(
                media_id,
                payload.season_number,
                payload.episode_number,
                payload.episode_title,
                payload.file_path,
                payload.subtitle_path
            )
            log.info(f"Saved S{payload.season_number}E{payload.episode_number} of media {media_id} as episode {episode_id}")

            if payload.file_path:
                _link_quietly(store, settings, payload.file_path, log, episode_id=episode_id)
        else:
            media_id = store.insert_media(data)
            log.info(f"Saved movie {payload.title!r} as media {media_id}")

            if payload.file_path:
                _link_quietly(store, settings, payload.file_path, log, media_id=media_id)
    except sqlite3.Error as e:
        log.error(f"Save media error: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to save media: {str(e)}")

    return MediaSaveResponse(id=media_id)


@router.delete("/{media_id}")
async def delete_media(
    media_id: int,
    store: CatalogStore = Depends(get_catalog_store),
    settings: Settings = Depends(get_settings)
) -> Dict[str, str]:
    """Delete a catalog entry, its episodes and subtitle tracks, and their files."""
    media = store.get_media(media_id)
    if not media:
        raise HTTPException(status_code=404, detail="Media not found")

    file_refs = [media.get("file_path"), media.get("subtitle_path")]
    file_refs += [t["file_path"] for t in store.list_subtitle_tracks(media_id=media_id)]
    for episode in store.list_episodes(media_id):
        file_refs += [episode.get("file_path"), episode.get("subtitle_path")]
        file_refs += [t["file_path"] for t in store.list_subtitle_tracks(episode_id=episode["id"])]

    try:
        store.delete_media(media_id)
    except sqlite3.Error as e:
        logger.error(f"Delete error for media {media_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to delete media")

    # Rows are gone; a file that cannot be removed is only orphaned on disk
    for file_ref in filter(None, file_refs):
        try:
            _remove_upload(settings, file_ref)
        except OSError as e:
            logger.warning(f"Could not remove {file_ref} of deleted media {media_id}: {str(e)}")

    return {"message": "Deleted successfully"}
