"""
Per-album metadata aggregation for artist-level listings.

Each album folder is represented by its first usable source:
1. a ``cover.jpg`` / ``folder.jpg`` file, anywhere in the listing
2. otherwise the first supported audio file in listing order

Albums with neither are left out of the result.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, List, NamedTuple, Optional, Sequence

from starlette.concurrency import run_in_threadpool

from audio_server.error_utils import log_error
from audio_server.exceptions import FileSystemError, MetadataError
from audio_server.library.classifier import COVER_FILE_NAMES, classify, is_supported_audio, list_directory
from audio_server.library.paths import join_relative, resolve_library_path
from audio_server.metadata.normalizer import MetadataNormalizer
from audio_server.schemas import AlbumSummary, EntryKind

logger = logging.getLogger(__name__)

UrlBuilder = Callable[[str], str]


class AlbumSource(NamedTuple):
    """Entry chosen to represent an album folder."""
    name: str
    is_cover: bool


def find_album_source(album_dir: Path) -> Optional[AlbumSource]:
    """
    Pick the representative entry of an album folder.

    A cover file ends the scan immediately. The first audio file is kept as
    a fallback while the rest of the listing is checked for a cover.

    Raises:
        FileSystemError: If the folder cannot be listed
    """
    first_audio: Optional[str] = None

    for name in list_directory(album_dir):
        is_cover = name in COVER_FILE_NAMES
        if not is_cover and (first_audio is not None or not is_supported_audio(name)):
            continue

        try:
            entry = classify(name, album_dir / name)
        except FileSystemError as e:
            logger.warning(f"Skipping unreadable entry {name!r} in {album_dir.name}: {e.message}")
            continue

        if entry.kind == EntryKind.FOLDER:
            continue
        if is_cover:
            return AlbumSource(name=name, is_cover=True)
        if entry.kind == EntryKind.AUDIO:
            first_audio = name

    if first_audio is not None:
        return AlbumSource(name=first_audio, is_cover=False)
    return None


class AlbumAggregator:
    """
    Build one AlbumSummary per album folder of an artist.

    Attributes:
        normalizer: Metadata normalizer bound to the library root
    """

    def __init__(self, normalizer: MetadataNormalizer):
        self.normalizer = normalizer

    @property
    def library_root(self) -> Path:
        return self.normalizer.library_root

    def locate_source(self, album_path: str) -> Optional[AlbumSource]:
        """Resolve ``album_path`` and pick its representative entry."""
        return find_album_source(resolve_library_path(self.library_root, album_path))

    async def summarize(self, album_path: str, url_for: UrlBuilder) -> Optional[AlbumSummary]:
        """
        Summarize one album folder.

        Returns:
            AlbumSummary, or None when the folder yields nothing usable
        """
        try:
            source = await run_in_threadpool(self.locate_source, album_path)
        except FileSystemError as e:
            log_error(e, context={"album": album_path}, level="warning")
            return None

        if source is None:
            logger.debug(f"No cover or audio file in {album_path}, omitting album")
            return None

        source_path = join_relative(album_path, source.name)
        if source.is_cover:
            return AlbumSummary.from_cover(album_path, url_for(source_path))

        try:
            metadata = await run_in_threadpool(self.normalizer.extract, source_path, True)
        except (MetadataError, FileSystemError) as e:
            log_error(e, context={"album": album_path, "file": source.name}, level="warning")
            return None

        return AlbumSummary.from_metadata(album_path, metadata)

    async def aggregate(
        self,
        artist_path: str,
        album_names: Sequence[str],
        url_for: UrlBuilder,
    ) -> List[AlbumSummary]:
        """
        Summarize every album folder of an artist, preserving input order.

        Args:
            artist_path: Artist folder, relative to the library root
            album_names: Album folder names in listing order
            url_for: Builds a public URL for a library-relative file path

        Returns:
            List of AlbumSummary, at most one per album folder
        """
        summaries = await asyncio.gather(
            *(self.summarize(join_relative(artist_path, name), url_for) for name in album_names)
        )
        albums = [summary for summary in summaries if summary is not None]
        logger.debug(f"Aggregated {len(albums)}/{len(album_names)} albums for {artist_path}")
        return albums
