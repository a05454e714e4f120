from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple


class Quality(str, Enum):
    HIGH_RES = "hires"
    STANDARD = "standard"


@dataclass
class AlbumDirectory:
    """Snapshot of one release directory.

    ``quality`` and ``genre_hint`` are captured from the directory name when
    the snapshot is taken and must not be recomputed after the directory has
    been flattened or renamed. ``path`` follows the directory as it moves.
    """

    path: Path
    artist_raw: Optional[str]
    album_raw: Optional[str]
    genre_hint: Optional[str]
    quality_marker: Optional[str]
    quality: Quality
    has_disc_subfolders: bool
    has_audio: bool

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def is_high_res(self) -> bool:
        return self.quality is Quality.HIGH_RES


@dataclass(frozen=True, slots=True)
class DiscFolder:
    path: Path
    disc_index: int
    track_files: Tuple[Path, ...]
    image_files: Tuple[Path, ...]


@dataclass
class FlattenReport:
    album: Path
    disc_count: int = 0
    tracks_moved: int = 0
    images_moved: int = 0
    renamed: List[Tuple[Path, Path]] = field(default_factory=list)
    empty_discs: List[int] = field(default_factory=list)
    removed_folders: List[Path] = field(default_factory=list)
    leftover_folders: List[Path] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class TagReport:
    directory: Path
    tracks_tagged: int = 0
    tracks_failed: int = 0
    total_discs: int = 1
    artwork: Optional[Path] = None


class ProcessingError(Exception):
    """Raised when an album cannot be processed but the run should keep going."""


class UsageError(ProcessingError):
    pass


class NotADirectory(ProcessingError):
    pass


class NoDiscFoldersFound(ProcessingError):
    pass


class ArtworkError(ProcessingError):
    pass


class NoArtworkFound(ArtworkError):
    pass


class MetadataWriteFailed(ProcessingError):
    pass


class FileMoveFailed(ProcessingError):
    pass


class RelocationFailed(ProcessingError):
    pass


def parse_number(value: object) -> Optional[int]:
    """Read a tag value such as ``"03"`` or ``"3/12"`` as an int."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    cleaned = str(value).strip()
    if "/" in cleaned:
        cleaned = cleaned.split("/", 1)[0].strip()
    if cleaned.isdigit():
        return int(cleaned)
    return None
