"""
Pytest configuration and shared fixtures for test suite.

This module provides:
- Temporary settings pointing uploads and the database at tmp_path
- An open catalog store per test
- Test client fixture for FastAPI with dependency overrides
- Sample subtitle documents and a fake ffprobe/ffmpeg runner
"""

import json
import os
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from unittest.mock import MagicMock

from homereel.config import Settings, get_settings, ensure_media_dirs
from homereel.dependencies import get_catalog_store
from homereel.services.catalog_store import CatalogStore


@pytest.fixture
def test_settings(tmp_path):
    """Settings with uploads and database under tmp_path."""
    settings = Settings(
        UPLOADS_DIR=str(tmp_path / "uploads"),
        DATABASE_PATH=str(tmp_path / "catalog.sqlite"),
        TMDB_API_KEY="",
        STREAM_CHUNK_SIZE=1000,
    )
    ensure_media_dirs(settings)
    return settings


@pytest.fixture
def catalog_store(test_settings):
    """Open catalog store on a fresh database."""
    store = CatalogStore(test_settings.database_path).open()
    yield store
    store.close()


@pytest_asyncio.fixture
async def client(test_settings, catalog_store):
    """
    Create async test client for FastAPI app.

    Uses httpx AsyncClient with ASGITransport to test the FastAPI app
    without needing to run a server. Startup events do not run under
    ASGITransport, so settings and store are injected via overrides.
    """
    from main import app

    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_catalog_store] = lambda: catalog_store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def sample_srt():
    return (
        "1\n"
        "00:00:01,000 --> 00:00:03,000\n"
        "Hello\n"
        "\n"
        "2\n"
        "00:00:04,500 --> 00:00:06,250\n"
        "Two lines\n"
        "of text\n"
        "\n"
    )


@pytest.fixture
def sample_vtt():
    return (
        "WEBVTT\n"
        "\n"
        "00:00:01.000 --> 00:00:03.000\n"
        "Hello\n"
        "\n"
        "00:00:04.500 --> 00:00:06.250 align:start\n"
        "Two lines\n"
        "of text\n"
    )


def make_probe_output(streams):
    """ffprobe -show_streams -of json output for the given stream dicts."""
    return json.dumps({"streams": streams})


@pytest.fixture
def fake_media_tools():
    """
    Build a subprocess.run replacement answering ffprobe with `streams` and
    ffmpeg by writing a small VTT file (or failing for `failing_indexes`).
    """
    def factory(streams, failing_indexes=(), probe_returncode=0):
        calls = []

        def run(cmd, **kwargs):
            calls.append(cmd)
            if "-show_streams" in cmd:
                return MagicMock(
                    returncode=probe_returncode,
                    stdout=make_probe_output(streams) if probe_returncode == 0 else "",
                    stderr="" if probe_returncode == 0 else "Invalid data found when processing input",
                )
            stream_index = int(cmd[cmd.index("-map") + 1].split(":")[1])
            if stream_index in failing_indexes:
                return MagicMock(returncode=1, stdout="", stderr="Subtitle encoding failed")
            with open(cmd[-1], "w") as f:
                f.write("WEBVTT\n\n00:00:01.000 --> 00:00:02.000\nExtracted\n")
            return MagicMock(returncode=0, stdout="", stderr="")

        run.calls = calls
        return run

    return factory


@pytest.fixture
def three_subtitle_streams():
    """Video + audio + three subtitle streams, the middle one image based."""
    return [
        {"index": 0, "codec_type": "video", "codec_name": "h264"},
        {"index": 1, "codec_type": "audio", "codec_name": "aac", "tags": {"language": "eng"}},
        {"index": 2, "codec_type": "subtitle", "codec_name": "subrip", "tags": {"language": "eng", "title": "English"}},
        {"index": 3, "codec_type": "subtitle", "codec_name": "hdmv_pgs_subtitle", "tags": {"language": "fre"}},
        {"index": 4, "codec_type": "subtitle", "codec_name": "ass", "tags": {"language": "spa"}},
    ]


@pytest.fixture
def write_file():
    """Write text or bytes to a path, creating parent directories."""
    def _write(path, content):
        os.makedirs(os.path.dirname(str(path)), exist_ok=True)
        mode = "wb" if isinstance(content, bytes) else "w"
        with open(path, mode) as f:
            f.write(content)
        return str(path)

    return _write
