from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .album_tagger import AlbumTagger
from .config import Settings
from .flattener import DiscFlattener
from .fs_utils import move_path
from .models import (
    AlbumDirectory,
    FileMoveFailed,
    NotADirectory,
    ProcessingError,
    RelocationFailed,
    TagReport,
)
from .naming import album_dir_name, format_album, format_artist, split_album_dir_name
from .scanner import LibraryScanner
from .state import AlbumOutcome, AlbumState, Event, RunStatistics, transition
from .tagging import FlacTagStore, TagStore

logger = logging.getLogger(__name__)

COVER_FILENAME = "cover.jpg"


@dataclass
class _AlbumRun:
    album: AlbumDirectory
    stats: RunStatistics
    state: AlbumState = AlbumState.DISCOVERED

    def fire(self, event: Event) -> AlbumState:
        step = transition(self.state, event)
        self.state = step.state
        self.stats.apply(step.effects)
        return self.state

    def finish(self, event: Optional[Event] = None, message: Optional[str] = None) -> AlbumState:
        if event is not None:
            self.fire(event)
        self.stats.outcomes.append(
            AlbumOutcome(
                name=self.album.name,
                state=self.state,
                path=self.album.path,
                message=message,
            )
        )
        return self.state


class AlbumOrchestrator:
    """Drives albums through flatten, tag, rename and quality relocation."""

    def __init__(self, settings: Settings, store: Optional[TagStore] = None) -> None:
        self.settings = settings
        self.store = store or FlacTagStore()
        self.scanner = LibraryScanner(settings)
        self.flattener = DiscFlattener(self.scanner, self.store)
        self.tagger = AlbumTagger(self.scanner, self.store, settings.artwork)

    def sorting_available(self, root: Path) -> bool:
        sorting = self.settings.sorting
        return (root / sorting.cd_dir).is_dir() and (root / sorting.hires_dir).is_dir()

    def run(self, root: Path, fallback_genre: str, sort: Optional[bool] = None) -> RunStatistics:
        """Process every album under ``root``.

        ``sort=None`` relocates only when both destination trees already exist.
        ``sort=True`` creates them when missing.
        """
        if not root.is_dir():
            raise NotADirectory(f"{root} is not a directory")
        sorting = self.sorting_available(root) if sort is None else sort
        if sorting:
            for name in (self.settings.sorting.cd_dir, self.settings.sorting.hires_dir):
                (root / name).mkdir(exist_ok=True)
            logger.info(
                "Albums will be sorted into %s and %s",
                self.settings.sorting.cd_dir,
                self.settings.sorting.hires_dir,
            )
        stats = RunStatistics()
        # Albums are renamed while we go; take the listing up front.
        for directory in list(self.scanner.iter_candidates(root)):
            self._process_candidate(
                directory,
                stats,
                genre=fallback_genre,
                genre_from_name=True,
                relocate_root=root if sorting else None,
            )
        return stats

    def run_in_place(self, root: Path, genre: str) -> RunStatistics:
        """Tag and rename every album under ``root`` with one genre, without relocating."""
        if not root.is_dir():
            raise NotADirectory(f"{root} is not a directory")
        stats = RunStatistics()
        for directory in list(self.scanner.iter_candidates(root)):
            self._process_candidate(directory, stats, genre=genre, genre_from_name=False)
        return stats

    def process_album(self, path: Path, genre: str, remove_cover: bool = False) -> Path:
        """Single-album flow; returns the directory's final path."""
        if not path.is_dir():
            raise NotADirectory(f"{path} is not a directory")
        album = self.scanner.snapshot(path.resolve())
        if album.artist_raw is None:
            raise ProcessingError(f"{album.name} does not match the 'Artist - Album' pattern")
        if album.has_disc_subfolders:
            self.flattener.flatten(album.path)
        if not self.scanner.audio_files(album.path):
            raise ProcessingError(f"{album.name} contains no audio files")
        self.tag_and_rename(album, genre, remove_cover=remove_cover)
        return album.path

    def tag_and_rename(self, album: AlbumDirectory, genre: str, remove_cover: bool = False) -> TagReport:
        """Tag the album and rename its directory; ``album.path`` follows the rename."""
        parsed = split_album_dir_name(album.path.name)
        if parsed is None:
            raise ProcessingError(f"{album.name} does not match the 'Artist - Album' pattern")
        artist = format_artist(parsed[0])
        album_name = format_album(parsed[1])
        if not artist or not album_name:
            raise ProcessingError(f"{album.name}: empty artist or album after formatting")
        is_compilation = artist == self.settings.sorting.compilation_artist
        logger.info("PROCESSING : %s - %s", artist, album_name)

        report = self.tagger.tag(album.path, album_name, artist, genre, is_compilation)
        if report.tracks_failed:
            logger.warning(
                "%s: %d of %d track(s) could not be tagged",
                album.name,
                report.tracks_failed,
                report.tracks_failed + report.tracks_tagged,
            )
        if remove_cover:
            self._remove_cover(album.path)

        new_path = album.path.with_name(album_dir_name(artist, album_name))
        if new_path != album.path:
            move_path(album.path, new_path)
            logger.info("Renamed directory to: %s", new_path.name)
            album.path = new_path
        return report

    def _process_candidate(
        self,
        directory: Path,
        stats: RunStatistics,
        *,
        genre: str,
        genre_from_name: bool,
        relocate_root: Optional[Path] = None,
    ) -> AlbumState:
        # Quality and genre come from the name as it is now, before anything moves.
        album = self.scanner.snapshot(directory)
        run = _AlbumRun(album=album, stats=stats)
        if album.artist_raw is None:
            logger.warning("Skipping %s: does not match Artist - Album format", album.name)
            return run.finish(Event.REJECTED, "does not match Artist - Album format")
        if not album.has_audio and not album.has_disc_subfolders:
            logger.warning("Skipping %s: no audio files or disc folders", album.name)
            return run.finish(Event.REJECTED, "no audio files or disc folders")

        album_genre = (album.genre_hint or genre) if genre_from_name else genre
        logger.info(
            "Processing directory: %s (genre %s, %s)",
            album.name,
            album_genre,
            "hi-res" if album.is_high_res else "CD quality",
        )

        if album.has_disc_subfolders:
            run.fire(Event.DISCS_FOUND)
            try:
                report = self.flattener.flatten(album.path)
            except (ProcessingError, OSError) as exc:
                logger.error("Error flattening %s: %s", album.name, exc)
                return run.finish(Event.FLATTEN_ERROR, str(exc))
            run.fire(Event.FLATTEN_OK)
            logger.info(
                "Flattened %s: %d track(s) from %d disc(s)",
                album.name,
                report.tracks_moved,
                report.disc_count,
            )
            if not self.scanner.audio_files(album.path):
                logger.warning("Skipping %s: no audio files after flattening", album.name)
                return run.finish(Event.REJECTED, "no audio files after flattening")

        run.fire(Event.READY)
        try:
            self.tag_and_rename(album, album_genre)
        except (ProcessingError, OSError) as exc:
            logger.error("Error processing %s: %s", album.name, exc)
            return run.finish(Event.TAG_ERROR, str(exc))
        run.fire(Event.TAG_OK)
        logger.info("Successfully processed: %s", album.name)

        if relocate_root is None:
            return run.finish()

        run.fire(Event.RELOCATE)
        try:
            event = self._relocate(album, relocate_root)
        except RelocationFailed as exc:
            logger.error("Failed to relocate %s: %s", album.name, exc)
            return run.finish(Event.RELOCATE_ERROR, str(exc))
        return run.finish(event)

    def _relocate(self, album: AlbumDirectory, root: Path) -> Event:
        sorting = self.settings.sorting
        target_dir = root / (sorting.hires_dir if album.is_high_res else sorting.cd_dir)
        destination = target_dir / album.path.name
        try:
            move_path(album.path, destination)
        except FileMoveFailed as exc:
            raise RelocationFailed(str(exc)) from exc
        logger.info("Successfully moved to: %s/%s", target_dir.name, destination.name)
        album.path = destination
        return Event.MOVED_HIRES if album.is_high_res else Event.MOVED_CD

    def _remove_cover(self, directory: Path) -> None:
        for image in self.scanner.image_files(directory):
            if image.name.lower() != COVER_FILENAME:
                continue
            try:
                image.unlink()
                logger.info("Removed %s", image.name)
            except OSError as exc:
                logger.warning("Failed to remove %s: %s", image, exc)
