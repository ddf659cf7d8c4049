"""
Catalog linker service.

Attaches extracted subtitle files to the movie or episode a video was
registered against. Extraction runs during upload, before any catalog id
exists; linking runs later, once the owning row's id is known.

Candidate files come from the extraction manifest recorded at upload time.
Videos without manifest rows fall back to scanning the subtitles directory for
files named after the video (<videoBaseName>_<lang>_<n>.vtt). That scan is a
plain string-prefix match: it can pick up unrelated files sharing the prefix,
and it recovers the language from the filename, which breaks for language tags
containing an underscore.

Every insert is preceded by an existence check on the file reference, so
linking the same video twice adds no rows. There is no locking across
requests; two registrations racing on the same file are settled by the
UNIQUE constraint on subtitles.file_path.
"""

import os
import sqlite3
import logging
from typing import List, Optional, Union

from homereel.models import ExtractedSubtitle, SubtitleTrack
from homereel.services.catalog_store import CatalogStore
from homereel.utils.filename_utils import video_base_name, parse_language_from_subtitle_filename


logger = logging.getLogger(__name__)


def scan_subtitles_dir(subtitles_dir: str, video_file: str, subtitles_subdir: str = "subtitles") -> List[ExtractedSubtitle]:
    """
    Find extracted files for video_file by filename prefix.

    Returns records whose language is parsed from the filename and whose label
    is the language itself, sorted by filename.
    """
    if not os.path.isdir(subtitles_dir):
        return []

    prefix = video_base_name(video_file)
    if not prefix:
        return []

    candidates = []
    for position, filename in enumerate(sorted(os.listdir(subtitles_dir))):
        if not filename.startswith(prefix):
            continue
        if not os.path.isfile(os.path.join(subtitles_dir, filename)):
            continue
        language = parse_language_from_subtitle_filename(filename)
        candidates.append(ExtractedSubtitle(
            language=language,
            label=language,
            file_path=f"{subtitles_subdir}/{filename}",
            stream_index=position
        ))
    return candidates


def link_subtitles(
    store: CatalogStore,
    uploads_dir: str,
    video_file: Optional[str],
    media_id: Optional[int] = None,
    episode_id: Optional[int] = None,
    subtitles_subdir: str = "subtitles",
    log: Optional[Union[logging.Logger, logging.LoggerAdapter]] = None
) -> List[SubtitleTrack]:
    """
    Link the subtitles extracted from video_file to one catalog owner.

    The owner is the episode when episode_id is given, otherwise the media row.

    Args:
        store: Open catalog store
        uploads_dir: Uploads root
        video_file: Registered video file reference (relative to uploads root)
        media_id: Owning movie id
        episode_id: Owning episode id (takes precedence over media_id)
        subtitles_subdir: Name of the subtitles subdirectory
        log: Optional (request-scoped) logger

    Returns:
        Newly inserted tracks (empty when everything was already linked)
    """
    log = log or logger
    if not video_file:
        return []
    if episode_id is not None:
        media_id = None
    elif media_id is None:
        raise ValueError("link_subtitles needs a media_id or an episode_id")

    video_name = os.path.basename(video_file)
    candidates = store.get_extraction_manifest(video_name)
    if candidates:
        log.debug(f"Linking {len(candidates)} manifest entries for {video_name}")
    else:
        candidates = scan_subtitles_dir(os.path.join(uploads_dir, subtitles_subdir), video_name, subtitles_subdir)
        log.debug(f"No manifest for {video_name}; directory scan found {len(candidates)} files")

    linked: List[SubtitleTrack] = []
    for candidate in candidates:
        if not os.path.isfile(os.path.join(uploads_dir, candidate.file_path)):
            log.warning(f"Extracted subtitle missing on disk, not linking: {candidate.file_path}")
            continue

        if store.subtitle_exists(candidate.file_path):
            log.debug(f"Subtitle already linked: {candidate.file_path}")
            continue

        try:
            track_id = store.insert_subtitle_track(
                file_path=candidate.file_path,
                language=candidate.language,
                label=candidate.label,
                media_id=media_id,
                episode_id=episode_id
            )
        except sqlite3.IntegrityError:
            log.info(f"Subtitle linked concurrently, skipping: {candidate.file_path}")
            continue

        log.info(f"Linked subtitle {candidate.file_path} ({candidate.language}) as track {track_id}")
        linked.append(SubtitleTrack(
            id=track_id,
            media_id=media_id,
            episode_id=episode_id,
            language=candidate.language,
            label=candidate.label,
            file_path=candidate.file_path,
            is_default=False
        ))

    return linked
