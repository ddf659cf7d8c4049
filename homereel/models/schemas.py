"""
Pydantic models for request/response validation.

This module contains the BaseModel schemas shared by the routers and the
services: catalog registration payloads, upload responses, subtitle track rows,
extraction results and parsed cues.
"""

from pydantic import BaseModel, Field
from typing import List, Optional


class Cue(BaseModel):
    """A single timed caption: start/end in fractional seconds, possibly multi-line text."""
    start: float
    end: float
    text: str


class ExtractedSubtitle(BaseModel):
    """One subtitle stream successfully extracted from an uploaded container."""
    language: str = Field(..., description="Stream language tag, 'und' when absent")
    label: str = Field(..., description="Human readable track label")
    file_path: str = Field(..., description="Path relative to the uploads root, e.g. subtitles/x_eng_0.vtt")
    stream_index: int = Field(..., description="Position of the stream among the container's subtitle streams")


class SubtitleTrack(BaseModel):
    """A persisted subtitle row linked to exactly one movie or episode."""
    id: int
    media_id: Optional[int] = None
    episode_id: Optional[int] = None
    language: str
    label: Optional[str] = None
    file_path: str
    is_default: bool = False


class UploadResponse(BaseModel):
    """Response after storing an uploaded video (and optional sidecar subtitle)."""
    file_path: str
    subtitle_path: Optional[str] = None
    extracted_subtitles: List[ExtractedSubtitle] = []


class MediaCreateRequest(BaseModel):
    """Registration payload for a movie, or for one episode of a show (type='tv')."""
    tmdb_id: Optional[int] = None
    title: str = Field(..., min_length=1)
    type: str = Field("movie", description="'movie' or 'tv'")
    poster_path: Optional[str] = None
    overview: Optional[str] = None
    release_date: Optional[str] = None
    file_path: Optional[str] = None
    subtitle_path: Optional[str] = None
    season_number: Optional[int] = None
    episode_number: Optional[int] = None
    episode_title: Optional[str] = None


class MediaSaveResponse(BaseModel):
    """Identifier of the saved movie or show."""
    id: int


class CueTextResponse(BaseModel):
    """Text to display at one playback tick (None when nothing is on screen)."""
    time: float
    offset: float
    text: Optional[str] = None
