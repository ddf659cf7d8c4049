"""
Filename utility functions for uploaded media and extracted subtitles.

This module provides utilities for:
- Generating unique storage names for uploaded files
- Building the extracted-subtitle filename convention
- Recovering the language tag from an extracted-subtitle filename
- Resolving stored file references inside the uploads root
"""

import os
import random
import time
from typing import Optional


UNDETERMINED_LANGUAGE = "und"


def generate_upload_filename(original_name: str) -> str:
    """
    Create a unique storage name that preserves the original extension.

    Format: <epoch-ms>-<random 9 digits><ext>, e.g. "1760790000000-123456789.mkv"
    """
    extension = os.path.splitext(original_name or "")[1].lower()
    unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 999_999_999):09d}"
    return f"{unique_suffix}{extension}"


def video_base_name(file_path: str) -> str:
    """Strip directory and extension: "dir/123-456.mkv" -> "123-456"."""
    return os.path.splitext(os.path.basename(file_path))[0]


def build_subtitle_filename(video_path: str, language: str, stream_number: int) -> str:
    """Return <videoBaseName>_<language>_<streamNumber>.vtt for an extracted stream."""
    return f"{video_base_name(video_path)}_{language}_{stream_number}.vtt"


def parse_language_from_subtitle_filename(filename: str) -> str:
    """
    Recover the language tag from <prefix>_<lang>_<index>.vtt.

    The language is the second-to-last underscore-delimited segment. Falls back
    to "und" when the name does not follow the convention. A language tag that
    itself contains an underscore cannot be recovered correctly.
    """
    stem = os.path.splitext(os.path.basename(filename))[0]
    parts = stem.split('_')
    if len(parts) < 3 or not parts[-1].isdigit() or not parts[-2]:
        return UNDETERMINED_LANGUAGE
    return parts[-2]


def resolve_upload_path(uploads_dir: str, file_ref: str) -> Optional[str]:
    """
    Resolve a stored file reference against the uploads root.

    Returns None when the reference would point outside the uploads root.
    """
    root = os.path.realpath(uploads_dir)
    candidate = os.path.realpath(os.path.join(root, file_ref))
    if candidate != root and not candidate.startswith(root + os.sep):
        return None
    return candidate
