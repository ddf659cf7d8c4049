"""
Subtitle extraction service for uploaded containers.

This module probes an uploaded video with ffprobe, picks out its embedded
subtitle streams and converts each text-based stream to a standalone WebVTT
file with ffmpeg.

Extraction Flow:
1. Probe the container (failure here raises ProbeFailedError)
2. Filter streams to codec_type == "subtitle"
3. Fan out one ffmpeg invocation per stream, concurrently
4. Each stream resolves to an ExtractedSubtitle or to a skip
   (unsupported codec, ffmpeg error, missing output)
5. Join the successful results in stream order

The caller records the results in the extraction manifest; this module only
writes files to disk.
"""

import os
import json
import asyncio
import logging
import subprocess
from typing import Any, Dict, List, Optional, Union

from homereel.config import Settings, get_settings
from homereel.models import ExtractedSubtitle
from homereel.utils.filename_utils import build_subtitle_filename, UNDETERMINED_LANGUAGE


# Codecs ffmpeg can turn into plain WebVTT text
SUPPORTED_SUBTITLE_CODECS = {"subrip", "ass", "ssa", "mov_text", "webvtt", "text"}


class ProbeFailedError(Exception):
    """Raised when the container cannot be opened or its stream list cannot be parsed."""


class StreamExtractionError(Exception):
    """Raised when ffmpeg fails to extract a single subtitle stream."""


def probe_streams(video_path: str, settings: Optional[Settings] = None) -> List[Dict[str, Any]]:
    """
    List all streams of a container using ffprobe.

    Args:
        video_path: Path to the video file
        settings: Settings providing the ffprobe binary and timeout

    Returns:
        List of ffprobe stream dicts (index, codec_type, codec_name, tags, ...)

    Raises:
        ProbeFailedError: If ffprobe cannot run, exits non-zero or prints invalid JSON
    """
    settings = settings or get_settings()
    cmd = [
        settings.ffprobe_binary,
        '-v', 'error',
        '-show_streams',
        '-of', 'json',
        video_path
    ]

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=settings.probe_timeout)
    except (OSError, subprocess.TimeoutExpired) as e:
        raise ProbeFailedError(f"ffprobe could not run on {video_path}: {str(e)}") from e

    if result.returncode != 0:
        raise ProbeFailedError(f"ffprobe failed on {video_path}: {result.stderr.strip()}")

    try:
        probe_data = json.loads(result.stdout or "{}")
    except json.JSONDecodeError as e:
        raise ProbeFailedError(f"ffprobe returned invalid JSON for {video_path}: {str(e)}") from e

    return probe_data.get("streams", [])


def describe_subtitle_stream(stream: Dict[str, Any], position: int) -> Dict[str, str]:
    """
    Derive language, label and codec for the position-th subtitle stream.

    Language comes from the language tag ("und" if absent). The label is the
    title tag, else the language tag, else "Track <position + 1>".
    """
    tags = stream.get("tags") or {}
    language = tags.get("language") or UNDETERMINED_LANGUAGE
    label = tags.get("title") or tags.get("language") or f"Track {position + 1}"
    codec = (stream.get("codec_name") or "").lower()
    return {"language": language, "label": label, "codec": codec}


def extract_stream(
    video_path: str,
    stream_index: int,
    output_path: str,
    settings: Optional[Settings] = None
) -> None:
    """
    Convert one container stream to WebVTT at output_path.

    Args:
        video_path: Path to the video file
        stream_index: Absolute ffprobe stream index to map
        output_path: Target .vtt path
        settings: Settings providing the ffmpeg binary and timeout

    Raises:
        StreamExtractionError: If ffmpeg fails or the output file is not created
    """
    settings = settings or get_settings()
    cmd = [
        settings.ffmpeg_binary,
        '-v', 'error',
        '-i', video_path,                # Input container
        '-map', f'0:{stream_index}',     # Exactly this stream
        '-f', 'webvtt',                  # Plain-text timed output
        '-y',                            # Overwrite output
        output_path
    ]

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=settings.extraction_timeout)
    except (OSError, subprocess.TimeoutExpired) as e:
        raise StreamExtractionError(f"ffmpeg could not run: {str(e)}") from e

    if result.returncode != 0 or not os.path.exists(output_path):
        stderr_tail = (result.stderr or "").strip()[-500:]
        raise StreamExtractionError(f"ffmpeg failed (exit {result.returncode}): {stderr_tail}")


async def _extract_one(
    video_path: str,
    stream: Dict[str, Any],
    position: int,
    subtitles_dir: str,
    subtitles_subdir: str,
    settings: Settings,
    log: Union[logging.Logger, logging.LoggerAdapter]
) -> Optional[ExtractedSubtitle]:
    """Extract one subtitle stream. Resolves to None instead of raising."""
    info = describe_subtitle_stream(stream, position)
    log.info(f"Found subtitle stream {position}: codec={info['codec']}, lang={info['language']}")

    if info["codec"] not in SUPPORTED_SUBTITLE_CODECS:
        log.warning(f"Skipping unsupported subtitle codec: {info['codec'] or 'unknown'} (stream {position})")
        return None

    filename = build_subtitle_filename(video_path, info["language"], position)
    output_path = os.path.join(subtitles_dir, filename)
    stream_index = stream.get("index", position)

    try:
        await asyncio.to_thread(extract_stream, video_path, stream_index, output_path, settings)
    except StreamExtractionError as e:
        log.warning(f"Failed to extract subtitle stream {position} ({info['language']}): {str(e)}")
        return None

    log.info(f"Extracted subtitle stream {position} to {filename}")
    return ExtractedSubtitle(
        language=info["language"],
        label=info["label"],
        # Relative to the uploads root, as served under /uploads
        file_path=f"{subtitles_subdir}/{filename}",
        stream_index=position
    )


async def extract_subtitles(
    video_path: str,
    output_dir: str,
    settings: Optional[Settings] = None,
    log: Optional[Union[logging.Logger, logging.LoggerAdapter]] = None
) -> List[ExtractedSubtitle]:
    """
    Extract every supported embedded subtitle stream of video_path.

    Files are written to <output_dir>/<subtitles_subdir>/ as
    <videoBaseName>_<language>_<n>.vtt where n is the stream's position among
    the container's subtitle streams.

    Args:
        video_path: Path of the uploaded video
        output_dir: Uploads root
        settings: Optional settings override
        log: Optional (request-scoped) logger

    Returns:
        Successfully extracted tracks, empty if the container has no subtitles

    Raises:
        ProbeFailedError: If the container cannot be probed
    """
    settings = settings or get_settings()
    log = log or logging.getLogger(__name__)

    streams = await asyncio.to_thread(probe_streams, video_path, settings)
    subtitle_streams = [s for s in streams if s.get("codec_type") == "subtitle"]

    if not subtitle_streams:
        log.info(f"No subtitle streams in {os.path.basename(video_path)}")
        return []

    subtitles_dir = os.path.join(output_dir, settings.subtitles_subdir)
    os.makedirs(subtitles_dir, exist_ok=True)

    outcomes = await asyncio.gather(*[
        _extract_one(video_path, stream, position, subtitles_dir, settings.subtitles_subdir, settings, log)
        for position, stream in enumerate(subtitle_streams)
    ])

    extracted = [outcome for outcome in outcomes if outcome is not None]
    log.info(f"Extracted {len(extracted)}/{len(subtitle_streams)} subtitle streams from {os.path.basename(video_path)}")
    return extracted
