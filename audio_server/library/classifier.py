"""
Directory entry classification.

Folders are detected with a real ``stat`` call; audio files by their
extension exactly as the platform reports it.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Iterable, List

from audio_server.exceptions import FileSystemError
from audio_server.schemas import DirectoryEntry, EntryKind

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS: frozenset[str] = frozenset({".mp3", ".m4a"})

COVER_FILE_NAMES: frozenset[str] = frozenset({"cover.jpg", "folder.jpg"})


def _reason(error: Exception) -> str:
    return getattr(error, "strerror", None) or str(error)


def is_supported_audio(name: str) -> bool:
    """Case-sensitive check against the supported extensions."""
    return os.path.splitext(name)[1] in SUPPORTED_FORMATS


def classify(entry_name: str, absolute_path: Path | str) -> DirectoryEntry:
    """
    Classify one directory entry.

    Args:
        entry_name: Name as returned by the directory listing
        absolute_path: Full path of the entry

    Returns:
        DirectoryEntry with its kind

    Raises:
        FileSystemError: If the entry cannot be stat'ed
    """
    try:
        mode = os.stat(absolute_path).st_mode
    except (OSError, ValueError) as e:
        raise FileSystemError(f"Cannot stat {entry_name}: {_reason(e)}", {"path": str(absolute_path)}) from e

    if stat.S_ISDIR(mode):
        kind = EntryKind.FOLDER
    elif is_supported_audio(entry_name):
        kind = EntryKind.AUDIO
    else:
        kind = EntryKind.UNSUPPORTED

    return DirectoryEntry(name=entry_name, kind=kind)


def list_directory(directory: Path) -> List[str]:
    """
    List entry names in directory order (unsorted).

    Raises:
        FileSystemError: If the directory cannot be listed
    """
    try:
        with os.scandir(directory) as entries:
            return [entry.name for entry in entries]
    except (OSError, ValueError) as e:
        # ValueError: embedded NUL byte
        raise FileSystemError(
            f"Cannot list directory {directory.name or directory}: {_reason(e)}",
            {"path": str(directory)},
        ) from e


def classify_entries(directory: Path, names: Iterable[str]) -> List[DirectoryEntry]:
    """
    Classify every name in ``directory``, skipping entries that cannot be read.
    """
    classified = []
    for name in names:
        try:
            classified.append(classify(name, directory / name))
        except FileSystemError as e:
            logger.warning(f"Skipping unreadable entry {name!r}: {e.message}")
    return classified
