"""
Audio metadata for the library browse server.

This module provides:
- Tag reading from MP3 (ID3) and M4A (MP4 atoms) files via Mutagen
- Normalization into TrackMetadata with data-URI cover images
- Album-summary projection for artist-level listings
"""

from .tag_reader import (
    EmbeddedPicture,
    RawTags,
    normalize_tags,
    read_tags,
)
from .normalizer import (
    MetadataNormalizer,
    build_track_metadata,
    picture_to_data_uri,
)

__all__ = [
    "EmbeddedPicture",
    "RawTags",
    "normalize_tags",
    "read_tags",
    "MetadataNormalizer",
    "build_track_metadata",
    "picture_to_data_uri",
]
