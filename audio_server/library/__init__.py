"""
Audio library traversal.

The aggregator and browser modules depend on the metadata package and are
imported by their full module path.
"""

from .classifier import (
    COVER_FILE_NAMES,
    SUPPORTED_FORMATS,
    classify,
    classify_entries,
    is_supported_audio,
    list_directory,
)
from .paths import join_relative, normalize_relative, resolve_library_path, static_url

__all__ = [
    "COVER_FILE_NAMES",
    "SUPPORTED_FORMATS",
    "classify",
    "classify_entries",
    "is_supported_audio",
    "list_directory",
    "join_relative",
    "normalize_relative",
    "resolve_library_path",
    "static_url",
]
