"""
Pydantic schemas for browse and metadata responses.

Models are immutable value objects built fresh per request. Each exposes a
``to_response()`` helper producing the JSON-ready dict sent to clients.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Directory entries
# ============================================================================

class EntryKind(str, Enum):
    """Classification of a directory entry"""
    FOLDER = "folder"
    AUDIO = "audio"
    UNSUPPORTED = "unsupported"


class DirectoryEntry(BaseModel):
    """A single classified child of a library directory"""
    model_config = ConfigDict(frozen=True)

    name: str
    kind: EntryKind


# ============================================================================
# Metadata
# ============================================================================

SUMMARY_FIELDS = ("artist", "album", "year", "genre", "image")


class TrackMetadata(BaseModel):
    """
    Normalized tags of one audio file.

    Attributes:
        artist: Track artist
        album: Album title
        year: Release year
        genre: First genre
        image: Embedded cover as a ``data:`` URI
        extra_fields: Remaining normalized tag fields (title, track, disk...)
    """
    model_config = ConfigDict(frozen=True)

    artist: Optional[str] = None
    album: Optional[str] = None
    year: Optional[int] = None
    genre: Optional[str] = None
    image: Optional[str] = None
    extra_fields: Dict[str, Any] = Field(default_factory=dict)

    def to_response(self) -> Dict[str, Any]:
        """Flatten extra fields next to the core fields, dropping unset values"""
        data: Dict[str, Any] = dict(self.extra_fields)
        for name in SUMMARY_FIELDS:
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        return data


class AlbumSummary(BaseModel):
    """Representative metadata for one album folder"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    path: str
    artist: Optional[str] = None
    album: Optional[str] = None
    year: Optional[int] = None
    genre: Optional[str] = None
    image: Optional[str] = None
    is_folder_cover: bool = Field(default=False, alias="isFolderCover")

    @classmethod
    def from_metadata(cls, path: str, metadata: TrackMetadata) -> "AlbumSummary":
        return cls(
            path=path,
            artist=metadata.artist,
            album=metadata.album,
            year=metadata.year,
            genre=metadata.genre,
            image=metadata.image,
        )

    @classmethod
    def from_cover(cls, path: str, image_url: str) -> "AlbumSummary":
        return cls(path=path, image=image_url, is_folder_cover=True)

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# ============================================================================
# Browse result
# ============================================================================

class BrowseResult(BaseModel):
    """
    Root response object of a browse request.

    ``albums`` is only filled at artist level, ``meta`` only at album level.
    """
    path: str
    folders: List[str] = Field(default_factory=list)
    albums: List[AlbumSummary] = Field(default_factory=list)
    files: List[str] = Field(default_factory=list)
    unsupported: List[str] = Field(default_factory=list)
    meta: Optional[TrackMetadata] = None

    def to_response(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "path": self.path,
            "folders": list(self.folders),
            "albums": [album.to_response() for album in self.albums],
            "files": list(self.files),
            "unsupported": list(self.unsupported),
        }
        if self.meta is not None:
            data["meta"] = self.meta.to_response()
        return data
