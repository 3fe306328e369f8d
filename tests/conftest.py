"""
Test configuration and fixtures for the audio browse server tests.

Provides:
- A temporary artist/album/track library tree
- A call-counting tag reader stub standing in for Mutagen
- Server settings, application and test client
"""

import logging
import os
import sys
from pathlib import Path

import pytest
from starlette.testclient import TestClient

sys.path.insert(0, os.path.dirname(__file__))

from library_testing import COVER_BYTES, StubTagReader, touch  # noqa: E402

from audio_server.config import ServerConfig  # noqa: E402
from audio_server.metadata.tag_reader import EmbeddedPicture  # noqa: E402
from audio_server.server import create_app  # noqa: E402


@pytest.fixture(autouse=True)
def debug_logging(caplog):
    """Capture application logs at DEBUG so every log call is exercised."""
    caplog.set_level(logging.DEBUG, logger="audio_server")


@pytest.fixture
def library(tmp_path) -> Path:
    """
    Build a small library::

        Artist A/
            Album One/      01 - Intro.mp3, 02 - Song.mp3, notes.txt
            Album Two/      01 - Track.m4a, cover.jpg
            Empty Album/    readme.txt
            Broken Album/   bad.mp3
        Sigur Rós/
            Ágætis byrjun/  01 Intro.mp3
        Loose.txt
    """
    root = tmp_path / "library"
    artist = root / "Artist A"

    touch(artist / "Album One" / "01 - Intro.mp3")
    touch(artist / "Album One" / "02 - Song.mp3")
    touch(artist / "Album One" / "notes.txt")
    touch(artist / "Album Two" / "01 - Track.m4a")
    touch(artist / "Album Two" / "cover.jpg", COVER_BYTES)
    touch(artist / "Empty Album" / "readme.txt")
    touch(artist / "Broken Album" / "bad.mp3")
    touch(root / "Sigur Rós" / "Ágætis byrjun" / "01 Intro.mp3")
    touch(root / "Loose.txt")
    return root


@pytest.fixture
def tag_reader() -> StubTagReader:
    reader = StubTagReader()
    album_one = dict(artist="Artist A", album="Album One", year=2001, genre="Rock")
    reader.register(
        "01 - Intro.mp3",
        picture=EmbeddedPicture(mime="image/jpeg", data=COVER_BYTES),
        title="Intro",
        track={"no": 1, "of": 2},
        **album_one,
    )
    reader.register(
        "02 - Song.mp3",
        picture=EmbeddedPicture(mime="image/jpeg", data=COVER_BYTES),
        title="Song",
        track={"no": 2, "of": 2},
        **album_one,
    )
    reader.register("01 - Track.m4a", artist="Artist A", album="Album Two", year=2005, title="Track")
    reader.register("01 Intro.mp3", artist="Sigur Rós", album="Ágætis byrjun", year=1999, genre="Post-rock")
    return reader


@pytest.fixture
def settings(library) -> ServerConfig:
    return ServerConfig(
        mp3_path=str(library),
        external_protocol="http",
        cache_ttl_seconds=300,
        cache_clear_token=None,
        log_level="WARNING",
    )


@pytest.fixture
def app(settings, tag_reader):
    return create_app(settings, tag_reader=tag_reader)


@pytest.fixture
def client(app):
    """Test client with the application lifespan running."""
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client
