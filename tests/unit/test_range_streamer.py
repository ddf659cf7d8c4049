"""
Unit tests for byte-range parsing and lazy file reads.

This module tests:
- parse_range_header() defaults, clamping and fallbacks
- iter_file_range() chunked reads of an inclusive span
"""

import pytest
from homereel.services.range_streamer import (
    parse_range_header,
    iter_file_range,
    RangeNotSatisfiableError,
)


class TestParseRangeHeader:
    """Test single-range header parsing."""

    def test_explicit_range(self):
        assert parse_range_header("bytes=0-99", 1000) == (0, 99)
        assert parse_range_header("bytes=500-999", 1000) == (500, 999)

    def test_open_ended_range(self):
        assert parse_range_header("bytes=200-", 1000) == (200, 999)

    def test_empty_start_defaults_to_zero(self):
        """Test 'bytes=-N' is read as start 0, end N."""
        assert parse_range_header("bytes=-100", 1000) == (0, 100)

    def test_end_is_clamped(self):
        assert parse_range_header("bytes=900-5000", 1000) == (900, 999)

    def test_no_header(self):
        assert parse_range_header(None, 1000) is None
        assert parse_range_header("", 1000) is None

    def test_multi_range_falls_back_to_full(self):
        assert parse_range_header("bytes=0-99,200-299", 1000) is None

    def test_malformed_falls_back_to_full(self):
        assert parse_range_header("items=0-99", 1000) is None
        assert parse_range_header("bytes=abc-def", 1000) is None
        assert parse_range_header("bytes=10", 1000) is None

    def test_start_beyond_file_is_unsatisfiable(self):
        with pytest.raises(RangeNotSatisfiableError):
            parse_range_header("bytes=1000-", 1000)

    def test_end_before_start_falls_back_to_full(self):
        """Test an inverted range is treated as malformed, not unsatisfiable."""
        assert parse_range_header("bytes=500-100", 1000) is None

    def test_start_beyond_file_wins_over_inverted_range(self):
        with pytest.raises(RangeNotSatisfiableError):
            parse_range_header("bytes=2000-100", 1000)


class TestIterFileRange:
    """Test lazy chunked reads."""

    @pytest.fixture
    def data_file(self, tmp_path):
        path = tmp_path / "video.bin"
        path.write_bytes(bytes(range(256)) * 10)
        return str(path)

    def test_reads_exact_span(self, data_file):
        body = b"".join(iter_file_range(data_file, 10, 1033, chunk_size=100))
        assert body == (bytes(range(256)) * 10)[10:1034]

    def test_chunks_respect_chunk_size(self, data_file):
        chunks = list(iter_file_range(data_file, 0, 2559, chunk_size=1000))
        assert [len(c) for c in chunks] == [1000, 1000, 560]

    def test_single_byte(self, data_file):
        assert b"".join(iter_file_range(data_file, 255, 255)) == b"\xff"

    def test_stops_at_end_of_file(self, data_file):
        body = b"".join(iter_file_range(data_file, 2500, 9999))
        assert len(body) == 60
