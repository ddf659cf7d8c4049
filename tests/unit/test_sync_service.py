"""
Unit tests for playback-time cue resolution.

This module tests:
- resolve_cue_text() window and offset handling
- SubtitleSession offset steps and toggling
- choose_default_track() selection order
"""

import pytest
from homereel.models import Cue
from homereel.services.sync_service import resolve_cue_text, choose_default_track, SubtitleSession


@pytest.fixture
def cues():
    return [
        Cue(start=2.0, end=4.0, text="First"),
        Cue(start=5.0, end=7.0, text="Second"),
    ]


class TestResolveCueText:
    """Test single-tick cue lookup."""

    def test_inside_window(self, cues):
        assert resolve_cue_text(cues, 3.0) == "First"
        assert resolve_cue_text(cues, 6.0) == "Second"

    def test_window_bounds_are_inclusive(self, cues):
        assert resolve_cue_text(cues, 2.0) == "First"
        assert resolve_cue_text(cues, 4.0) == "First"

    def test_gap_returns_none(self, cues):
        assert resolve_cue_text(cues, 4.5) is None
        assert resolve_cue_text(cues, 0.0) is None

    def test_positive_offset_delays_subtitles(self):
        """Test offset +0.5 shows a 2.0-4.0 cue during [2.5, 4.5] only."""
        cue = [Cue(start=2.0, end=4.0, text="Shifted")]

        assert resolve_cue_text(cue, 2.5, offset=0.5) == "Shifted"
        assert resolve_cue_text(cue, 4.5, offset=0.5) == "Shifted"
        assert resolve_cue_text(cue, 2.4, offset=0.5) is None
        assert resolve_cue_text(cue, 4.6, offset=0.5) is None

    def test_negative_offset_shows_subtitles_earlier(self, cues):
        assert resolve_cue_text(cues, 1.0, offset=-1.0) == "First"
        assert resolve_cue_text(cues, 3.5, offset=-1.0) is None

    def test_disabled_returns_none(self, cues):
        assert resolve_cue_text(cues, 3.0, enabled=False) is None

    def test_no_cues_returns_none(self):
        assert resolve_cue_text([], 3.0) is None

    def test_first_overlapping_cue_wins(self):
        overlapping = [Cue(start=1.0, end=5.0, text="A"), Cue(start=2.0, end=3.0, text="B")]
        assert resolve_cue_text(overlapping, 2.5) == "A"


class TestSubtitleSession:
    """Test per-playback subtitle state."""

    def test_offset_moves_in_fixed_steps(self, cues):
        session = SubtitleSession(cues, offset_step=0.5)

        assert session.shift_offset(1) == 0.5
        assert session.shift_offset(1) == 1.0
        assert session.shift_offset(-3) == -0.5

    def test_offset_does_not_drift(self):
        session = SubtitleSession(offset_step=0.1)
        for _ in range(10):
            session.shift_offset(1)
        assert session.offset == 1.0

    def test_current_text_uses_offset_and_flag(self, cues):
        session = SubtitleSession(cues)
        session.shift_offset(1)

        assert session.current_text(4.4) == "First"
        assert session.toggle() is False
        assert session.current_text(4.4) is None

    def test_load_and_clear(self, cues):
        session = SubtitleSession()
        assert session.current_text(3.0) is None

        session.load(cues)
        assert session.current_text(3.0) == "First"

        session.clear()
        assert session.current_text(3.0) is None


class TestChooseDefaultTrack:
    """Test which track a player loads first."""

    def test_default_flag_wins(self):
        tracks = [
            {"id": 1, "language": "eng", "is_default": False},
            {"id": 2, "language": "fre", "is_default": True},
        ]
        assert choose_default_track(tracks)["id"] == 2

    def test_english_preferred(self):
        tracks = [{"id": 1, "language": "spa"}, {"id": 2, "language": "eng"}]
        assert choose_default_track(tracks)["id"] == 2

    def test_first_track_fallback(self):
        tracks = [{"id": 1, "language": "spa"}, {"id": 2, "language": "fre"}]
        assert choose_default_track(tracks)["id"] == 1

    def test_legacy_sidecar_fallback(self):
        assert choose_default_track([], "123-456.srt") == {"file_path": "123-456.srt", "is_legacy": True}

    def test_nothing_available(self):
        assert choose_default_track([]) is None
