"""
Models package for API request/response validation.

This package contains Pydantic models used throughout the application
for validating API requests and responses and for passing typed records
between the extraction, linking and playback services.
"""

from .schemas import (
    Cue,
    ExtractedSubtitle,
    SubtitleTrack,
    UploadResponse,
    MediaCreateRequest,
    MediaSaveResponse,
    CueTextResponse,
)

__all__ = [
    "Cue",
    "ExtractedSubtitle",
    "SubtitleTrack",
    "UploadResponse",
    "MediaCreateRequest",
    "MediaSaveResponse",
    "CueTextResponse",
]
