"""
Subtitles router module.

This module provides endpoints for:
- Parsing a linked subtitle track into cues
- Resolving the cue text to display at a playback position
"""

import os
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from homereel.config import Settings, get_settings
from homereel.dependencies import get_catalog_store
from homereel.models import Cue, CueTextResponse
from homereel.services.catalog_store import CatalogStore
from homereel.services.sync_service import SubtitleSession
from homereel.utils.filename_utils import resolve_upload_path
from homereel.utils.subtitle_utils import parse_subtitles


router = APIRouter(prefix="/api/subtitles", tags=["Subtitles"])


def _load_track_cues(track_id: int, store: CatalogStore, settings: Settings) -> List[Cue]:
    track = store.get_subtitle_track(track_id)
    if not track:
        raise HTTPException(status_code=404, detail="Subtitle track not found")

    path = resolve_upload_path(settings.uploads_dir, track["file_path"])
    if path is None or not os.path.isfile(path):
        raise HTTPException(status_code=404, detail="Subtitle file not found")

    with open(path, 'r', encoding='utf-8', errors='replace') as f:
        return parse_subtitles(f.read())


@router.get("/{track_id}")
async def get_subtitle_track(track_id: int, store: CatalogStore = Depends(get_catalog_store)) -> Dict[str, Any]:
    """Get one subtitle track row."""
    track = store.get_subtitle_track(track_id)
    if not track:
        raise HTTPException(status_code=404, detail="Subtitle track not found")
    return track


@router.get("/{track_id}/cues", response_model=List[Cue])
async def get_track_cues(
    track_id: int,
    store: CatalogStore = Depends(get_catalog_store),
    settings: Settings = Depends(get_settings)
) -> List[Cue]:
    """Parse the track's SRT/VTT file and return its cues in file order."""
    return _load_track_cues(track_id, store, settings)


@router.get("/{track_id}/cue", response_model=CueTextResponse)
async def get_cue_at(
    track_id: int,
    time: float = Query(..., ge=0, description="Playback position in seconds"),
    offset: float = Query(0.0, description="Subtitle delay in seconds (negative shows subtitles earlier)"),
    steps: Optional[int] = Query(None, description="Offset as a number of SUBTITLE_OFFSET_STEP increments; overrides offset"),
    enabled: bool = Query(True, description="Whether subtitles are switched on"),
    store: CatalogStore = Depends(get_catalog_store),
    settings: Settings = Depends(get_settings)
) -> CueTextResponse:
    """Return the caption on screen at `time` with the given offset, or null."""
    session = SubtitleSession(_load_track_cues(track_id, store, settings), offset_step=settings.subtitle_offset_step)
    if steps is not None:
        session.shift_offset(steps)
    else:
        session.offset = offset
    session.enabled = enabled
    return CueTextResponse(time=time, offset=session.offset, text=session.current_text(time))
