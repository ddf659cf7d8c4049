"""
Unit tests for utility modules.

This module tests:
- homereel/utils/filename_utils.py
- homereel/utils/timestamp_utils.py
- homereel/utils/logging_utils.py
"""

import logging
import os
import re

import pytest
from homereel.utils.filename_utils import (
    generate_upload_filename,
    video_base_name,
    build_subtitle_filename,
    parse_language_from_subtitle_filename,
    resolve_upload_path,
)
from homereel.utils.timestamp_utils import timecode_to_seconds
from homereel.utils.logging_utils import setup_logger, get_request_logger


class TestFilenameUtils:
    """Test filename utility functions."""

    def test_generate_upload_filename_keeps_extension(self):
        """Test generated names keep the original extension."""
        name = generate_upload_filename("My Movie (2020).MKV")
        assert re.fullmatch(r"\d+-\d{9}\.mkv", name)

    def test_generate_upload_filename_without_extension(self):
        """Test names without an extension stay extensionless."""
        assert re.fullmatch(r"\d+-\d{9}", generate_upload_filename("video"))

    def test_generate_upload_filename_is_unique(self):
        """Test repeated uploads of the same name get different storage names."""
        names = {generate_upload_filename("clip.mp4") for _ in range(20)}
        assert len(names) > 1

    def test_video_base_name(self):
        """Test directory and extension are stripped."""
        assert video_base_name("uploads/1700000000000-123456789.mkv") == "1700000000000-123456789"
        assert video_base_name("movie.mp4") == "movie"

    def test_build_subtitle_filename(self):
        """Test the <videoBaseName>_<language>_<n>.vtt convention."""
        assert build_subtitle_filename("/data/uploads/abc-1.mkv", "eng", 0) == "abc-1_eng_0.vtt"
        assert build_subtitle_filename("abc-1.mp4", "und", 3) == "abc-1_und_3.vtt"

    def test_parse_language_from_subtitle_filename(self):
        """Test the language is the second-to-last underscore segment."""
        assert parse_language_from_subtitle_filename("abc-1_eng_0.vtt") == "eng"
        assert parse_language_from_subtitle_filename("subtitles/abc-1_fre_12.vtt") == "fre"

    def test_parse_language_falls_back_to_und(self):
        """Test names off the convention fall back to 'und'."""
        assert parse_language_from_subtitle_filename("abc-1.vtt") == "und"
        assert parse_language_from_subtitle_filename("abc-1_eng.vtt") == "und"
        assert parse_language_from_subtitle_filename("abc-1_eng_x.vtt") == "und"

    def test_parse_language_with_underscore_tag_is_lossy(self):
        """Test a language tag containing an underscore is not recovered."""
        assert parse_language_from_subtitle_filename("abc-1_pt_BR_0.vtt") == "BR"

    def test_resolve_upload_path_inside_root(self, tmp_path):
        """Test references inside the uploads root resolve to absolute paths."""
        resolved = resolve_upload_path(str(tmp_path), "subtitles/a_eng_0.vtt")
        assert resolved == os.path.join(os.path.realpath(str(tmp_path)), "subtitles", "a_eng_0.vtt")

    def test_resolve_upload_path_rejects_escape(self, tmp_path):
        """Test references escaping the uploads root are rejected."""
        assert resolve_upload_path(str(tmp_path), "../etc/passwd") is None
        assert resolve_upload_path(str(tmp_path), "/etc/passwd") is None


class TestTimestampUtils:
    """Test timestamp utility functions."""

    def test_timecode_with_hours(self):
        assert timecode_to_seconds("01", "30", "45", "123") == pytest.approx(5445.123)

    def test_timecode_without_hours(self):
        assert timecode_to_seconds(None, "00", "01", "000") == 1.0
        assert timecode_to_seconds("", "02", "03", "500") == pytest.approx(123.5)


class TestLoggingUtils:
    """Test logging setup and request-scoped adapters."""

    def test_setup_logger_is_idempotent(self):
        """Test calling setup twice does not add duplicate handlers."""
        logger = setup_logger(logger_name="homereel-test")
        setup_logger(logger_name="homereel-test")
        assert len(logger.handlers) == 1

    def test_request_logger_injects_request_id(self):
        """Test the adapter carries the request id."""
        adapter = get_request_logger("upload-42")
        assert adapter.extra == {"request_id": "upload-42"}
        assert adapter.logger is logging.getLogger("homereel")

    def test_records_without_request_id_are_formatted(self, capsys):
        """Test module loggers without an adapter still format cleanly."""
        logger = setup_logger(logger_name="homereel-format-test")
        logger.warning("plain message")
        assert "[-] plain message" in capsys.readouterr().err
