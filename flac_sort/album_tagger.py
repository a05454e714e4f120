from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from .artwork import EmbedArtwork, prepare_embed_artwork
from .config import ArtworkSettings
from .meta_keys import (
    ALBUM,
    ALBUMARTIST,
    ARTIST,
    COMPILATION,
    DISCNUMBER,
    DISCTOTAL,
    GENRE,
    TITLE,
    TRACKNUMBER,
    TRACKTOTAL,
)
from .models import MetadataWriteFailed, NoArtworkFound, TagReport, parse_number
from .naming import format_artist, format_title
from .scanner import LibraryScanner
from .tagging import TagStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _TrackState:
    path: Path
    disc_number: int
    track_number: int
    title: Optional[str]
    artist: Optional[str]


class AlbumTagger:
    """Rewrites the complete tag set and cover art of every track in one directory."""

    def __init__(self, scanner: LibraryScanner, store: TagStore, artwork: ArtworkSettings) -> None:
        self.scanner = scanner
        self.store = store
        self.artwork_settings = artwork

    def tag(
        self,
        directory: Path,
        album_name: str,
        album_artist: str,
        genre: str,
        is_compilation: bool,
    ) -> TagReport:
        tracks = [self._read_state(path) for path in self.scanner.audio_files(directory)]
        total_discs = max([1] + [t.disc_number for t in tracks])
        # Per-disc totals: a flattened album keeps the count of its original disc.
        disc_sizes = Counter(t.disc_number for t in tracks)
        logger.debug(
            "%s: %d track(s), %d disc(s)", directory.name, len(tracks), total_discs
        )

        cover = self.find_cover(directory)
        artwork = prepare_embed_artwork(
            cover,
            max_dimension=self.artwork_settings.max_dimension,
            quality=self.artwork_settings.jpeg_quality,
            suffix=self.artwork_settings.embed_suffix,
        )
        report = TagReport(directory=directory, total_discs=total_discs, artwork=artwork.selected)
        shared = {
            ALBUM: album_name,
            ALBUMARTIST: album_artist,
            GENRE: genre,
            COMPILATION: "1" if is_compilation else "0",
            DISCTOTAL: str(total_discs),
        }
        try:
            for track in tracks:
                values = dict(shared)
                values.update(self._track_values(track, album_artist, disc_sizes[track.disc_number]))
                try:
                    self._write_track(track.path, values, artwork)
                except MetadataWriteFailed as exc:
                    logger.error("Failed to tag %s: %s", track.path.name, exc)
                    report.tracks_failed += 1
                    continue
                report.tracks_tagged += 1
                logger.debug("Updated %s", track.path.name)
        finally:
            artwork.cleanup()
        return report

    def find_cover(self, directory: Path) -> Path:
        images = self.scanner.image_files(directory)
        # A leftover resize is only skipped when the image it was made from is still here.
        leftovers = {f"{image.stem}{self.artwork_settings.embed_suffix}.jpg" for image in images}
        covers = [image for image in images if image.name not in leftovers]
        if not covers:
            raise NoArtworkFound(f"no cover image in {directory}")
        return covers[0]

    def _read_state(self, path: Path) -> _TrackState:
        tags = self.store.get_tags(path)
        return _TrackState(
            path=path,
            disc_number=parse_number(_first(tags, DISCNUMBER)) or 1,
            track_number=parse_number(_first(tags, TRACKNUMBER)) or 1,
            title=_first(tags, TITLE),
            artist=_first(tags, ARTIST),
        )

    @staticmethod
    def _track_values(track: _TrackState, album_artist: str, track_total: int) -> Dict[str, str]:
        values = {
            ARTIST: format_artist(track.artist) if track.artist else album_artist,
            TRACKNUMBER: str(track.track_number),
            TRACKTOTAL: str(track_total),
            DISCNUMBER: str(track.disc_number),
        }
        if track.title:
            values[TITLE] = format_title(track.title)
        return values

    def _write_track(self, path: Path, values: Dict[str, str], artwork: EmbedArtwork) -> None:
        self.store.replace_tags(path, values)
        self.store.remove_pictures(path)
        self.store.import_picture(path, artwork.selected)


def _first(tags: Dict[str, List[str]], key: str) -> Optional[str]:
    values = tags.get(key)
    if not values:
        return None
    value = values[0].strip()
    return value or None
