"""
Subtitle synchronization service.

Maps a playback position to the caption that should be on screen, taking the
viewer's timing offset into account. Evaluated on every playback tick, so it
only ever does an in-memory scan over already parsed cues.
"""

from typing import Any, Dict, List, Optional, Sequence

from homereel.models import Cue


def resolve_cue_text(
    cues: Sequence[Cue],
    current_time: float,
    offset: float = 0.0,
    enabled: bool = True
) -> Optional[str]:
    """
    Return the text of the first cue shown at current_time, or None.

    A cue is shown while start + offset <= current_time <= end + offset. A
    positive offset delays the subtitles, a negative one shows them earlier.
    """
    if not enabled or not cues:
        return None

    for cue in cues:
        if cue.start + offset <= current_time <= cue.end + offset:
            return cue.text
    return None


def choose_default_track(
    tracks: List[Dict[str, Any]],
    legacy_subtitle_path: Optional[str] = None
) -> Optional[Dict[str, Any]]:
    """
    Pick the subtitle track a player should load first.

    Order: a track flagged default, then English ("eng"), then the first track.
    Without any linked tracks the legacy sidecar file is returned as a
    pseudo-track, or None when there is nothing to show.
    """
    if tracks:
        for track in tracks:
            if track.get("is_default"):
                return track
        for track in tracks:
            if track.get("language") == "eng":
                return track
        return tracks[0]

    if legacy_subtitle_path:
        return {"file_path": legacy_subtitle_path, "is_legacy": True}
    return None


class SubtitleSession:
    """Subtitle state for one playback session: loaded cues, on/off flag and offset."""

    def __init__(self, cues: Optional[Sequence[Cue]] = None, offset_step: float = 0.5):
        self.cues: List[Cue] = list(cues or [])
        self.offset_step = offset_step
        self.offset = 0.0
        self.enabled = True

    def load(self, cues: Sequence[Cue]) -> None:
        """Replace the cues, e.g. after the viewer picked another track."""
        self.cues = list(cues)

    def clear(self) -> None:
        self.cues = []

    def toggle(self) -> bool:
        self.enabled = not self.enabled
        return self.enabled

    def shift_offset(self, steps: int) -> float:
        """Move the offset by a whole number of steps (negative steps show subtitles earlier)."""
        # Rounded so repeated 0.5 steps never drift to 0.49999...
        self.offset = round(self.offset + steps * self.offset_step, 3)
        return self.offset

    def current_text(self, current_time: float) -> Optional[str]:
        return resolve_cue_text(self.cues, current_time, self.offset, self.enabled)
