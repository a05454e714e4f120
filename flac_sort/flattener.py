from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from .fs_utils import disc_collision_path, is_empty_dir, move_path
from .meta_keys import DISCNUMBER, DISCTOTAL, TRACKTOTAL
from .models import DiscFolder, FlattenReport, NoDiscFoldersFound
from .scanner import LibraryScanner
from .tagging import TagStore

logger = logging.getLogger(__name__)


class DiscFlattener:
    """Merges ``Disc N`` / ``CD N`` sub-folders into the album root.

    Disc identity is kept in the tags: every track gets DISCNUMBER from its
    folder's position, DISCTOTAL from the number of disc folders and a
    per-disc TRACKTOTAL. A failed tag write or move aborts the flatten and
    leaves whatever was already merged in place.
    """

    def __init__(self, scanner: LibraryScanner, store: TagStore) -> None:
        self.scanner = scanner
        self.store = store

    def flatten(self, album_dir: Path) -> FlattenReport:
        discs = self.scanner.disc_folders(album_dir)
        if not discs:
            raise NoDiscFoldersFound(f"no disc folders in {album_dir}")

        report = FlattenReport(album=album_dir, disc_count=len(discs))
        logger.info("Flattening %d disc folder(s) in %s", len(discs), album_dir.name)
        for disc in discs:
            self._merge_disc(album_dir, disc, report)
        self._remove_disc_folders(discs, report)
        return report

    def _merge_disc(self, album_dir: Path, disc: DiscFolder, report: FlattenReport) -> None:
        if not disc.track_files:
            message = f"{disc.path.name}: no audio files, disc {disc.disc_index} skipped"
            logger.warning(message)
            report.warnings.append(message)
            report.empty_discs.append(disc.disc_index)
            return

        track_total = len(disc.track_files)
        for track in disc.track_files:
            self.store.set_tags(
                track,
                {
                    DISCNUMBER: str(disc.disc_index),
                    DISCTOTAL: str(report.disc_count),
                    TRACKTOTAL: str(track_total),
                },
            )
            self._move_into(album_dir, track, disc, report)
            report.tracks_moved += 1

        for image in disc.image_files:
            self._move_into(album_dir, image, disc, report)
            report.images_moved += 1

    def _move_into(self, album_dir: Path, source: Path, disc: DiscFolder, report: FlattenReport) -> None:
        destination = disc_collision_path(album_dir, source.name, disc.disc_index)
        move_path(source, destination)
        if destination.name != source.name:
            logger.info("Renamed %s/%s -> %s", disc.path.name, source.name, destination.name)
            report.renamed.append((source, destination))

    def _remove_disc_folders(self, discs: Sequence[DiscFolder], report: FlattenReport) -> None:
        for disc in discs:
            folder = disc.path
            if self.scanner.is_preserved(folder):
                continue
            try:
                if is_empty_dir(folder):
                    folder.rmdir()
                    report.removed_folders.append(folder)
                    logger.debug("Removed disc folder %s", folder)
                    continue
            except OSError as exc:
                logger.warning("Could not remove %s: %s", folder, exc)
            message = f"{folder.name}: not empty after flattening"
            logger.warning(message)
            report.warnings.append(message)
            report.leftover_folders.append(folder)
