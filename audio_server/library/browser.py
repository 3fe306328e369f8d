"""
Browse orchestration: turn a directory listing into a BrowseResult.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from starlette.concurrency import run_in_threadpool

from audio_server.error_utils import log_error
from audio_server.exceptions import BrowseError, FileSystemError, MetadataError
from audio_server.library.aggregator import AlbumAggregator, UrlBuilder
from audio_server.library.classifier import classify_entries, list_directory
from audio_server.library.paths import join_relative, normalize_relative, resolve_library_path
from audio_server.schemas import AlbumSummary, BrowseResult, DirectoryEntry, EntryKind, TrackMetadata

logger = logging.getLogger(__name__)


class LibraryBrowser:
    """Browse the audio library one directory at a time."""

    def __init__(self, aggregator: AlbumAggregator):
        self.aggregator = aggregator
        self.normalizer = aggregator.normalizer

    def _list(self, request_path: str) -> List[DirectoryEntry]:
        try:
            directory = resolve_library_path(self.normalizer.library_root, request_path)
            names = list_directory(directory)
        except FileSystemError as e:
            raise BrowseError(e.message, details=e.details) from e
        return classify_entries(directory, names)

    async def _album_meta(self, file_path: str) -> Optional[TrackMetadata]:
        try:
            return await run_in_threadpool(self.normalizer.extract, file_path, True)
        except (MetadataError, FileSystemError) as e:
            log_error(e, context={"file": file_path}, level="warning")
            return None

    async def browse(self, request_path: str, url_for: UrlBuilder) -> BrowseResult:
        """
        List a library directory and attach aggregated metadata.

        Args:
            request_path: Directory relative to the library root ("" for root)
            url_for: Builds a public URL for a library-relative file path

        Returns:
            BrowseResult

        Raises:
            BrowseError: If the directory cannot be listed
        """
        request_path = normalize_relative(request_path)
        entries = await run_in_threadpool(self._list, request_path)

        folders = [entry.name for entry in entries if entry.kind == EntryKind.FOLDER]
        files = [entry.name for entry in entries if entry.kind == EntryKind.AUDIO]
        unsupported = [entry.name for entry in entries if entry.kind == EntryKind.UNSUPPORTED]

        async def no_meta() -> Optional[TrackMetadata]:
            return None

        async def no_albums() -> List[AlbumSummary]:
            return []

        meta_task = self._album_meta(join_relative(request_path, files[0])) if files else no_meta()
        # Root holds artist folders, one level above albums
        albums_task = (
            self.aggregator.aggregate(request_path, folders, url_for)
            if request_path and folders
            else no_albums()
        )

        meta, albums = await asyncio.gather(meta_task, albums_task)

        logger.info(
            f"Browsed '{request_path or '/'}': {len(folders)} folders, {len(files)} files, "
            f"{len(unsupported)} unsupported, {len(albums)} albums"
        )
        return BrowseResult(
            path=request_path,
            folders=folders,
            albums=albums,
            files=files,
            unsupported=unsupported,
            meta=meta,
        )
