"""
Path helpers for the audio library.

Request paths are relative, slash separated and already percent-decoded.
"""

import os
from pathlib import Path
from urllib.parse import quote

from audio_server.exceptions import FileSystemError


def normalize_relative(path: str) -> str:
    """Strip surrounding slashes so ``"/Artist/Album/"`` becomes ``"Artist/Album"``."""
    return path.strip("/")


def join_relative(parent: str, name: str) -> str:
    """Join a relative directory and an entry name without a leading slash."""
    parent = normalize_relative(parent)
    return f"{parent}/{name}" if parent else name


def resolve_library_path(root: Path, relative_path: str) -> Path:
    """
    Resolve a request path against the library root.

    Args:
        root: Absolute library root
        relative_path: Decoded path relative to the root

    Returns:
        Absolute filesystem path inside the root

    Raises:
        FileSystemError: If the path holds a NUL byte or escapes the library root
    """
    relative_path = normalize_relative(relative_path)
    if "\x00" in relative_path:
        raise FileSystemError("Path contains a NUL byte", {"path": relative_path})

    candidate = Path(os.path.normpath(root / relative_path)) if relative_path else root

    if candidate != root and root not in candidate.parents:
        raise FileSystemError(
            f"Path is outside the library: {relative_path}",
            {"path": relative_path},
        )
    return candidate


def static_url(base_url: str, mount: str, relative_path: str) -> str:
    """
    Build an absolute URL to a file served by a static mount.

    Example:
        >>> static_url("https://host", "/api/mp3", "A B/cover.jpg")
        'https://host/api/mp3/A%20B/cover.jpg'
    """
    return f"{base_url.rstrip('/')}{mount}/{quote(normalize_relative(relative_path), safe='/')}"
