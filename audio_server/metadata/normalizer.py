"""
Metadata normalization on top of the tag reader.

Turns raw tags into a TrackMetadata: the first embedded picture becomes a
``data:`` URI and the raw bytes are dropped. Summary extraction keeps only
artist, album, year, genre and image.
"""

from __future__ import annotations

import base64
import logging
from pathlib import Path
from typing import Callable, Optional

from audio_server.library.paths import resolve_library_path
from audio_server.metadata.tag_reader import EmbeddedPicture, RawTags, read_tags
from audio_server.schemas import SUMMARY_FIELDS, TrackMetadata

logger = logging.getLogger(__name__)

TagReader = Callable[[Path], RawTags]


def picture_to_data_uri(picture: EmbeddedPicture) -> str:
    """Encode an embedded picture as ``data:<mime>;base64,<payload>``."""
    payload = base64.b64encode(picture.data).decode("ascii")
    return f"data:{picture.mime};base64,{payload}"


def build_track_metadata(raw: RawTags, summary_only: bool = False) -> TrackMetadata:
    """
    Build a TrackMetadata from raw tags.

    Args:
        raw: Output of the tag reader
        summary_only: Drop everything outside the album-summary subset

    Returns:
        TrackMetadata
    """
    fields = dict(raw.fields)
    image: Optional[str] = picture_to_data_uri(raw.picture) if raw.picture else None

    core = {name: fields.pop(name, None) for name in SUMMARY_FIELDS if name != "image"}
    extra = {} if summary_only else fields

    return TrackMetadata(image=image, extra_fields=extra, **core)


class MetadataNormalizer:
    """
    Extract normalized metadata for files inside the audio library.

    Attributes:
        library_root: Absolute library root that relative paths resolve against
        tag_reader: Callable reading raw tags from an absolute path
    """

    def __init__(self, library_root: Path, tag_reader: TagReader = read_tags):
        self.library_root = library_root
        self.tag_reader = tag_reader

    def extract(self, relative_path: str, summary_only: bool = False) -> TrackMetadata:
        """
        Extract metadata for one audio file.

        Args:
            relative_path: Path relative to the library root
            summary_only: Project to {artist, album, year, genre, image}

        Returns:
            TrackMetadata

        Raises:
            FileSystemError: If the path is outside the library or missing
            MetadataError: If the file cannot be decoded
        """
        file_path = resolve_library_path(self.library_root, relative_path)
        raw = self.tag_reader(file_path)
        metadata = build_track_metadata(raw, summary_only=summary_only)
        logger.debug(f"Extracted {'summary ' if summary_only else ''}metadata from {relative_path}")
        return metadata
