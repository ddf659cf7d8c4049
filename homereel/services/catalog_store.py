"""
Catalog store service backed by SQLite.

Holds the media catalog (movies and shows), show episodes, linked subtitle
tracks and the extraction manifest written during upload. The store is
constructed explicitly, opened once at process start and closed at shutdown;
routers and the catalog linker receive it as a dependency.
"""

import os
import logging
import sqlite3
import threading
from typing import Any, Dict, List, Optional

from homereel.models import ExtractedSubtitle


logger = logging.getLogger(__name__)


SCHEMA = """
CREATE TABLE IF NOT EXISTS media (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    tmdb_id INTEGER,
    title TEXT NOT NULL,
    type TEXT,
    poster_path TEXT,
    file_path TEXT,
    subtitle_path TEXT,
    overview TEXT,
    release_date TEXT
);

CREATE TABLE IF NOT EXISTS episodes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    media_id INTEGER NOT NULL,
    season_number INTEGER,
    episode_number INTEGER,
    title TEXT,
    file_path TEXT,
    subtitle_path TEXT,
    UNIQUE (media_id, season_number, episode_number),
    FOREIGN KEY (media_id) REFERENCES media(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS subtitles (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    media_id INTEGER,
    episode_id INTEGER,
    language TEXT NOT NULL DEFAULT 'und',
    label TEXT,
    file_path TEXT NOT NULL UNIQUE,
    is_default BOOLEAN NOT NULL DEFAULT 0,
    CHECK ((media_id IS NULL) != (episode_id IS NULL)),
    FOREIGN KEY (media_id) REFERENCES media(id) ON DELETE CASCADE,
    FOREIGN KEY (episode_id) REFERENCES episodes(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS extraction_manifest (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    video_file TEXT NOT NULL,
    language TEXT NOT NULL,
    label TEXT NOT NULL,
    file_path TEXT NOT NULL UNIQUE,
    stream_index INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_media_tmdb_id ON media(tmdb_id);
CREATE INDEX IF NOT EXISTS idx_episodes_media ON episodes(media_id);
CREATE INDEX IF NOT EXISTS idx_manifest_video ON extraction_manifest(video_file);
"""


class CatalogStore:
    """SQLite-backed catalog with an explicit open/close lifecycle."""

    def __init__(self, database_path: str):
        self.database_path = database_path
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> "CatalogStore":
        if self._conn is not None:
            return self
        conn = sqlite3.connect(self.database_path, timeout=60, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        self._conn = conn
        self.init_schema()
        logger.info(f"Catalog database opened at {self.database_path}")
        return self

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        logger.info("Catalog database closed")

    def init_schema(self) -> None:
        with self._lock:
            self.conn.executescript(SCHEMA)
            self.conn.commit()

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("CatalogStore is not open")
        return self._conn

    def _fetch_one(self, sql: str, params: tuple = ()) -> Optional[Dict[str, Any]]:
        with self._lock:
            row = self.conn.execute(sql, params).fetchone()
        return dict(row) if row else None

    def _fetch_all(self, sql: str, params: tuple = ()) -> List[Dict[str, Any]]:
        with self._lock:
            rows = self.conn.execute(sql, params).fetchall()
        return [dict(row) for row in rows]

    def _write(self, sql: str, params: tuple = ()) -> int:
        """Run one write statement and commit. Returns lastrowid."""
        with self._lock:
            try:
                cursor = self.conn.execute(sql, params)
                self.conn.commit()
            except sqlite3.Error:
                self.conn.rollback()
                raise
        return cursor.lastrowid

    # ------------------------------------------------------------------
    # Media / episodes
    # ------------------------------------------------------------------

    def list_media(self) -> List[Dict[str, Any]]:
        return self._fetch_all("SELECT * FROM media ORDER BY id DESC")

    def get_media(self, media_id: int) -> Optional[Dict[str, Any]]:
        return self._fetch_one("SELECT * FROM media WHERE id = ?", (media_id,))

    def find_show_by_tmdb_id(self, tmdb_id: Optional[int]) -> Optional[Dict[str, Any]]:
        if tmdb_id is None:
            return None
        return self._fetch_one(
            "SELECT * FROM media WHERE tmdb_id = ? AND type = 'tv' ORDER BY id LIMIT 1",
            (tmdb_id,)
        )

    def insert_media(self, data: Dict[str, Any]) -> int:
        """Insert a movie or show row. Movies are never deduplicated."""
        return self._write(
            """INSERT INTO media (tmdb_id, title, type, poster_path, file_path, subtitle_path, overview, release_date)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                data.get("tmdb_id"), data["title"], data.get("type"), data.get("poster_path"),
                data.get("file_path"), data.get("subtitle_path"), data.get("overview"),
                data.get("release_date"),
            )
        )

    def upsert_episode(
        self,
        media_id: int,
        season_number: Optional[int],
        episode_number: Optional[int],
        title: Optional[str],
        file_path: Optional[str],
        subtitle_path: Optional[str]
    ) -> int:
        """
        Insert the episode, or update file/subtitle/title of the existing
        (media_id, season, episode) row. Returns the episode id.
        """
        with self._lock:
            try:
                existing = self.conn.execute(
                    "SELECT id FROM episodes WHERE media_id = ? AND season_number IS ? AND episode_number IS ?",
                    (media_id, season_number, episode_number)
                ).fetchone()
                if existing:
                    self.conn.execute(
                        "UPDATE episodes SET file_path = ?, subtitle_path = ?, title = ? WHERE id = ?",
                        (file_path, subtitle_path, title, existing["id"])
                    )
                    episode_id = existing["id"]
                else:
                    cursor = self.conn.execute(
                        """INSERT INTO episodes (media_id, season_number, episode_number, title, file_path, subtitle_path)
                           VALUES (?, ?, ?, ?, ?, ?)""",
                        (media_id, season_number, episode_number, title, file_path, subtitle_path)
                    )
                    episode_id = cursor.lastrowid
                self.conn.commit()
            except sqlite3.Error:
                self.conn.rollback()
                raise
        return episode_id

    def get_episode(self, episode_id: int) -> Optional[Dict[str, Any]]:
        return self._fetch_one("SELECT * FROM episodes WHERE id = ?", (episode_id,))

    def list_episodes(self, media_id: int) -> List[Dict[str, Any]]:
        return self._fetch_all(
            "SELECT * FROM episodes WHERE media_id = ? ORDER BY season_number, episode_number",
            (media_id,)
        )

    def delete_media(self, media_id: int) -> None:
        """
        Delete a media row with its episodes, every subtitle row attached to
        either, and the extraction manifest of their video files.
        """
        with self._lock:
            try:
                video_rows = self.conn.execute(
                    """SELECT file_path FROM media WHERE id = ?
                       UNION SELECT file_path FROM episodes WHERE media_id = ?""",
                    (media_id, media_id)
                ).fetchall()
                # Manifest rows are keyed by the stored filename
                video_files = [(os.path.basename(row["file_path"]),) for row in video_rows if row["file_path"]]
                self.conn.executemany("DELETE FROM extraction_manifest WHERE video_file = ?", video_files)

                self.conn.execute(
                    "DELETE FROM subtitles WHERE episode_id IN (SELECT id FROM episodes WHERE media_id = ?)",
                    (media_id,)
                )
                self.conn.execute("DELETE FROM subtitles WHERE media_id = ?", (media_id,))
                self.conn.execute("DELETE FROM episodes WHERE media_id = ?", (media_id,))
                self.conn.execute("DELETE FROM media WHERE id = ?", (media_id,))
                self.conn.commit()
            except sqlite3.Error:
                self.conn.rollback()
                raise

    # ------------------------------------------------------------------
    # Subtitle tracks
    # ------------------------------------------------------------------

    def subtitle_exists(self, file_path: str) -> bool:
        return self._fetch_one("SELECT id FROM subtitles WHERE file_path = ?", (file_path,)) is not None

    def insert_subtitle_track(
        self,
        file_path: str,
        language: str,
        label: Optional[str],
        media_id: Optional[int] = None,
        episode_id: Optional[int] = None,
        is_default: bool = False
    ) -> int:
        """
        Insert a subtitle row owned by exactly one of media_id / episode_id.

        Raises:
            ValueError: If both or neither owner ids are given
            sqlite3.IntegrityError: If file_path is already linked
        """
        if (media_id is None) == (episode_id is None):
            raise ValueError("A subtitle track belongs to exactly one of media_id or episode_id")
        return self._write(
            """INSERT INTO subtitles (media_id, episode_id, language, label, file_path, is_default)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (media_id, episode_id, language, label, file_path, int(is_default))
        )

    def get_subtitle_track(self, track_id: int) -> Optional[Dict[str, Any]]:
        row = self._fetch_one("SELECT * FROM subtitles WHERE id = ?", (track_id,))
        if row:
            row["is_default"] = bool(row["is_default"])
        return row

    def list_subtitle_tracks(
        self,
        media_id: Optional[int] = None,
        episode_id: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        if episode_id is not None:
            rows = self._fetch_all("SELECT * FROM subtitles WHERE episode_id = ? ORDER BY id", (episode_id,))
        else:
            rows = self._fetch_all("SELECT * FROM subtitles WHERE media_id = ? ORDER BY id", (media_id,))
        for row in rows:
            row["is_default"] = bool(row["is_default"])
        return rows

    # ------------------------------------------------------------------
    # Extraction manifest
    # ------------------------------------------------------------------

    def record_extraction(self, video_file: str, results: List[ExtractedSubtitle]) -> None:
        """Persist the extraction results of one uploaded video, keyed by its stored filename."""
        if not results:
            return
        with self._lock:
            try:
                self.conn.executemany(
                    """INSERT OR IGNORE INTO extraction_manifest (video_file, language, label, file_path, stream_index)
                       VALUES (?, ?, ?, ?, ?)""",
                    [(video_file, r.language, r.label, r.file_path, r.stream_index) for r in results]
                )
                self.conn.commit()
            except sqlite3.Error:
                self.conn.rollback()
                raise

    def get_extraction_manifest(self, video_file: str) -> List[ExtractedSubtitle]:
        rows = self._fetch_all(
            "SELECT language, label, file_path, stream_index FROM extraction_manifest WHERE video_file = ? ORDER BY stream_index",
            (video_file,)
        )
        return [ExtractedSubtitle(**row) for row in rows]
