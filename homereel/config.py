"""
Configuration module for the homereel media server API.

This module centralizes all environment variables, constants, and runtime configuration
using pydantic-settings for type-safe configuration management.
"""

import os
from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # CORS Configuration
    allowed_origin: str = Field(
        default="*",
        validation_alias="ALLOWED_ORIGIN",
        description="Allowed CORS origin for API requests"
    )

    port: int = Field(
        default=3000,
        validation_alias="PORT",
        description="Port the API server listens on"
    )

    # Storage Configuration
    uploads_dir: str = Field(
        default="./uploads",
        validation_alias="UPLOADS_DIR",
        description="Root directory for uploaded videos and subtitle files"
    )

    subtitles_subdir: str = Field(
        default="subtitles",
        validation_alias="SUBTITLES_SUBDIR",
        description="Subdirectory of the uploads root holding extracted subtitles"
    )

    database_path: str = Field(
        default="./database.sqlite",
        validation_alias="DATABASE_PATH",
        description="SQLite catalog database file"
    )

    # TMDB Configuration
    tmdb_api_key: Optional[str] = Field(
        default=None,
        validation_alias="TMDB_API_KEY",
        description="API key for The Movie Database metadata lookups"
    )

    tmdb_base_url: str = Field(
        default="https://api.themoviedb.org/3",
        validation_alias="TMDB_BASE_URL",
        description="Base URL of the TMDB v3 API"
    )

    tmdb_timeout: int = Field(
        default=10,
        validation_alias="TMDB_TIMEOUT",
        description="Seconds to wait for a TMDB response"
    )

    # FFmpeg Configuration
    ffmpeg_binary: str = Field(
        default="ffmpeg",
        validation_alias="FFMPEG_BINARY",
        description="Path to the ffmpeg executable"
    )

    ffprobe_binary: str = Field(
        default="ffprobe",
        validation_alias="FFPROBE_BINARY",
        description="Path to the ffprobe executable"
    )

    probe_timeout: int = Field(
        default=60,
        validation_alias="PROBE_TIMEOUT",
        description="Seconds allowed for probing an uploaded container"
    )

    extraction_timeout: int = Field(
        default=600,
        validation_alias="EXTRACTION_TIMEOUT",
        description="Seconds allowed for extracting a single subtitle stream"
    )

    # Streaming / Playback
    stream_chunk_size: int = Field(
        default=64 * 1024,
        validation_alias="STREAM_CHUNK_SIZE",
        description="Bytes read per chunk when streaming a file"
    )

    subtitle_offset_step: float = Field(
        default=0.5,
        validation_alias="SUBTITLE_OFFSET_STEP",
        description="Seconds added or removed per subtitle offset adjustment"
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level for the homereel logger"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True
    )

    @property
    def subtitles_dir(self) -> str:
        """Absolute-or-relative path of the extracted subtitles directory."""
        return os.path.join(self.uploads_dir, self.subtitles_subdir)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure settings are loaded only once.
    """
    return Settings()


def ensure_media_dirs(settings: Settings) -> None:
    """Create the uploads root and its subtitles subdirectory if missing."""
    os.makedirs(settings.uploads_dir, exist_ok=True)
    os.makedirs(settings.subtitles_dir, exist_ok=True)
