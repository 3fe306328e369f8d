"""
Tests for browse orchestration.
"""

import os

import pytest

from library_testing import first_listed, touch

from audio_server.exceptions import BrowseError, MetadataError
from audio_server.library.aggregator import AlbumAggregator
from audio_server.library.browser import LibraryBrowser
from audio_server.metadata import MetadataNormalizer
from audio_server.schemas import BrowseResult


def _url_for(path: str) -> str:
    return f"http://testserver/api/mp3/{path}"


@pytest.fixture
def browser(library, tag_reader):
    return LibraryBrowser(AlbumAggregator(MetadataNormalizer(library, tag_reader=tag_reader)))


@pytest.mark.asyncio
async def test_root_lists_artists_without_aggregation(library, browser, tag_reader):
    result = await browser.browse("", _url_for)

    assert sorted(result.folders) == ["Artist A", "Sigur Rós"]
    assert result.unsupported == ["Loose.txt"]
    assert result.files == []
    assert result.albums == []
    assert result.meta is None
    assert tag_reader.calls == []


@pytest.mark.asyncio
async def test_artist_level_aggregates_albums(library, browser):
    result = await browser.browse("Artist A", _url_for)

    assert result.folders == os.listdir(library / "Artist A")
    assert sorted(album.path for album in result.albums) == ["Artist A/Album One", "Artist A/Album Two"]
    assert result.meta is None


@pytest.mark.asyncio
async def test_album_level_attaches_first_file_summary(library, browser):
    album = library / "Artist A" / "Album One"

    result = await browser.browse("Artist A/Album One", _url_for)

    assert result.files == [name for name in os.listdir(album) if name.endswith(".mp3")]
    assert result.unsupported == ["notes.txt"]
    assert result.albums == []
    assert result.meta is not None
    assert result.meta.to_response().keys() == {"artist", "album", "year", "genre", "image"}
    assert result.files[0] == first_listed(album, ".mp3")


@pytest.mark.asyncio
async def test_meta_failure_leaves_meta_unset(browser):
    result = await browser.browse("Artist A/Broken Album", _url_for)

    assert result.files == ["bad.mp3"]
    assert result.meta is None


@pytest.mark.asyncio
async def test_unsupported_only_directory(library, browser):
    folder = library / "Artist A" / "Scans"
    for name in ("back.png", "booklet.pdf", "info.nfo"):
        touch(folder / name)

    result = await browser.browse("Artist A/Scans", _url_for)

    assert result.folders == []
    assert result.albums == []
    assert result.files == []
    assert result.unsupported == os.listdir(folder)
    assert result.meta is None


@pytest.mark.asyncio
async def test_meta_ignores_later_files(library, browser, tag_reader):
    album = library / "Artist A" / "Album One"
    first = first_listed(album, ".mp3")
    later = [name for name in os.listdir(album) if name.endswith(".mp3") and name != first][0]
    tag_reader.fail(later, MetadataError("should not be read"))

    result = await browser.browse("Artist A/Album One", _url_for)

    assert result.meta.album == "Album One"
    assert [path.name for path in tag_reader.calls] == [first]


@pytest.mark.asyncio
async def test_mixed_directory_runs_both_augmentations(library, browser):
    touch(library / "Artist A" / "Album Two" / "Bonus" / "extra.mp3")

    result = await browser.browse("Artist A/Album Two", _url_for)

    assert result.folders == ["Bonus"]
    assert result.files == ["01 - Track.m4a"]
    assert result.meta.album == "Album Two"
    # Bonus holds an undecodable file, so no album summary comes out of it
    assert result.albums == []


@pytest.mark.asyncio
async def test_unicode_path(browser):
    result = await browser.browse("Sigur Rós/Ágætis byrjun", _url_for)

    assert result.files == ["01 Intro.mp3"]
    assert result.meta.artist == "Sigur Rós"


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["Nobody", "Loose.txt", "../", "Artist A/../../..", "Artist A\x00x"])
async def test_unlistable_path_raises_browse_error(browser, path):
    with pytest.raises(BrowseError) as exc_info:
        await browser.browse(path, _url_for)

    assert exc_info.value.reason == BrowseError.NOT_FOUND


def test_to_response_shape():
    body = BrowseResult(path="A", unsupported=["x.txt"]).to_response()

    assert body == {"path": "A", "folders": [], "albums": [], "files": [], "unsupported": ["x.txt"]}
