"""
Audio tag reading using Mutagen.

Reads the common tag fields of an audio file into one normalized shape,
whatever the container:
- MP3 (ID3v1, ID3v2.3, ID3v2.4)
- M4A/AAC (MP4 atoms)
- FLAC/OGG (Vorbis comments), for completeness of the single-file endpoint

Only the first embedded picture is kept.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from mutagen import File as MutagenFile
from mutagen import MutagenError
from mutagen.id3 import ID3
from mutagen.mp4 import MP4Cover, MP4Tags

from audio_server.exceptions import FileSystemError, MetadataError

logger = logging.getLogger(__name__)

DEFAULT_PICTURE_MIME = "image/jpeg"


@dataclass(frozen=True)
class EmbeddedPicture:
    """Raw bytes of an embedded cover image."""
    mime: str
    data: bytes


@dataclass
class RawTags:
    """Normalized tag fields plus the first embedded picture, if any."""
    fields: Dict[str, Any] = field(default_factory=dict)
    picture: Optional[EmbeddedPicture] = None


def _parse_year(value: Any) -> Optional[int]:
    """Extract a year from ``YYYY``, ``YYYY-MM-DD`` or an ID3 timestamp."""
    if value is None:
        return None
    year = getattr(value, "year", None)
    if isinstance(year, int):
        return year
    try:
        return int(str(value).strip().split("-")[0])
    except (ValueError, IndexError):
        return None


def _parse_position(value: Any) -> Optional[Dict[str, Optional[int]]]:
    """Parse ``"3/12"`` or ``(3, 12)`` into ``{"no": 3, "of": 12}``."""
    if value is None:
        return None
    if isinstance(value, tuple):
        number, total = (list(value) + [0, 0])[:2]
    else:
        parts = str(value).split("/", 1)
        try:
            number = int(parts[0]) if parts[0].strip() else 0
            total = int(parts[1]) if len(parts) > 1 and parts[1].strip() else 0
        except ValueError:
            return None
    if not number and not total:
        return None
    return {"no": number or None, "of": total or None}


def _first_text(frames: List[Any]) -> Optional[str]:
    for frame in frames:
        if getattr(frame, "text", None):
            text = str(frame.text[0]).strip()
            if text:
                return text
    return None


def _from_id3(tags: ID3) -> Tuple[Dict[str, Any], Optional[EmbeddedPicture]]:
    """Read ID3 frames (TPE1, TALB, TCON, TDRC...) and the first APIC frame."""
    fields: Dict[str, Any] = {}

    for frame_id, name in (
        ("TIT2", "title"),
        ("TPE1", "artist"),
        ("TPE2", "albumartist"),
        ("TALB", "album"),
        ("TCOM", "composer"),
    ):
        value = _first_text(tags.getall(frame_id))
        if value:
            fields[name] = value

    # TCON may hold ID3v1 references such as "(17)"; mutagen resolves them
    for frame in tags.getall("TCON"):
        genres = [genre for genre in frame.genres if genre]
        if genres:
            fields["genre"] = genres[0]
            break

    # TDRC = Recording Date (ID3v2.4) or TYER = Year (ID3v2.3)
    for frame_id in ("TDRC", "TYER"):
        frames = tags.getall(frame_id)
        if frames and frames[0].text:
            year = _parse_year(frames[0].text[0])
            if year is not None:
                fields["year"] = year
                break

    for frame_id, name in (("TRCK", "track"), ("TPOS", "disk")):
        position = _parse_position(_first_text(tags.getall(frame_id)))
        if position:
            fields[name] = position

    picture = None
    apic_frames = tags.getall("APIC")
    if apic_frames:
        frame = apic_frames[0]
        picture = EmbeddedPicture(mime=frame.mime or DEFAULT_PICTURE_MIME, data=bytes(frame.data))

    return fields, picture


def _from_mp4(tags: MP4Tags) -> Tuple[Dict[str, Any], Optional[EmbeddedPicture]]:
    """Read MP4 atoms (\\xa9ART, \\xa9alb, \\xa9day...) and the first covr image."""
    fields: Dict[str, Any] = {}

    for atom, name in (
        ("\xa9nam", "title"),
        ("\xa9ART", "artist"),
        ("aART", "albumartist"),
        ("\xa9alb", "album"),
        ("\xa9gen", "genre"),
        ("\xa9wrt", "composer"),
    ):
        values = tags.get(atom)
        if values and str(values[0]).strip():
            fields[name] = str(values[0]).strip()

    if tags.get("\xa9day"):
        year = _parse_year(tags["\xa9day"][0])
        if year is not None:
            fields["year"] = year

    for atom, name in (("trkn", "track"), ("disk", "disk")):
        values = tags.get(atom)
        if values:
            position = _parse_position(tuple(values[0]))
            if position:
                fields[name] = position

    picture = None
    covers = tags.get("covr")
    if covers:
        cover = covers[0]
        mime = "image/png" if getattr(cover, "imageformat", None) == MP4Cover.FORMAT_PNG else DEFAULT_PICTURE_MIME
        picture = EmbeddedPicture(mime=mime, data=bytes(cover))

    return fields, picture


def _from_vorbis(tags: Any, audio: Any) -> Tuple[Dict[str, Any], Optional[EmbeddedPicture]]:
    """Read Vorbis comments (lowercase keys) and FLAC picture blocks."""
    fields: Dict[str, Any] = {}

    for key in ("title", "artist", "albumartist", "album", "genre", "composer"):
        values = tags.get(key)
        if values and str(values[0]).strip():
            fields[key] = str(values[0]).strip()

    if tags.get("date"):
        year = _parse_year(tags["date"][0])
        if year is not None:
            fields["year"] = year

    for key, name in (("tracknumber", "track"), ("discnumber", "disk")):
        values = tags.get(key)
        if values:
            position = _parse_position(values[0])
            if position:
                fields[name] = position

    picture = None
    pictures = getattr(audio, "pictures", None)
    if pictures:
        picture = EmbeddedPicture(mime=pictures[0].mime or DEFAULT_PICTURE_MIME, data=bytes(pictures[0].data))

    return fields, picture


def normalize_tags(audio: Any) -> RawTags:
    """
    Normalize a loaded Mutagen file object.

    Args:
        audio: Object returned by ``mutagen.File``

    Returns:
        RawTags with common fields and the first embedded picture
    """
    tags = audio.tags
    if tags is None:
        fields: Dict[str, Any] = {}
        picture = None
    elif isinstance(tags, ID3):
        fields, picture = _from_id3(tags)
    elif isinstance(tags, MP4Tags):
        fields, picture = _from_mp4(tags)
    else:
        fields, picture = _from_vorbis(tags, audio)

    info = getattr(audio, "info", None)
    length = getattr(info, "length", None)
    if length:
        fields["duration"] = round(length, 3)

    return RawTags(fields=fields, picture=picture)


def read_tags(file_path: Path | str) -> RawTags:
    """
    Read and normalize the tags of an audio file.

    Args:
        file_path: Absolute path to the audio file

    Returns:
        RawTags for the file

    Raises:
        FileSystemError: If the file does not exist or is not a regular file
        MetadataError: If the file cannot be decoded as audio
    """
    file_path = Path(file_path)

    if not file_path.is_file():
        raise FileSystemError(f"File not found: {file_path.name}", {"path": str(file_path)})

    try:
        audio = MutagenFile(str(file_path))
    except (MutagenError, OSError) as e:
        raise MetadataError(f"Could not decode {file_path.name}: {e}", {"path": str(file_path)}) from e

    if audio is None:
        raise MetadataError(f"Unrecognized audio format: {file_path.name}", {"path": str(file_path)})

    raw = normalize_tags(audio)
    logger.debug(f"Read {len(raw.fields)} tag fields from {file_path.name}")
    return raw
