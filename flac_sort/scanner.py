from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import List

from .config import Settings
from .fs_utils import list_files, list_subdirectories
from .models import AlbumDirectory, DiscFolder
from .naming import extract_genre, split_album_dir_name
from .quality import classify, quality_marker


class LibraryScanner:
    """Lists album candidates and their contents according to the naming convention."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._audio_exts = set(settings.library.audio_extensions)
        self._image_exts = set(settings.library.image_extensions)
        self._disc_prefixes = tuple(settings.library.disc_prefixes)
        self._preserved = tuple(settings.library.preserved_folders)

    def audio_files(self, directory: Path) -> List[Path]:
        return list_files(directory, self._audio_exts)

    def image_files(self, directory: Path) -> List[Path]:
        return list_files(directory, self._image_exts)

    def is_preserved(self, folder: Path) -> bool:
        lowered = folder.name.lower()
        return any(keyword in lowered for keyword in self._preserved)

    def is_disc_folder(self, folder: Path) -> bool:
        if self.is_preserved(folder):
            return False
        return folder.name.lower().startswith(self._disc_prefixes)

    def disc_folders(self, album_dir: Path) -> List[DiscFolder]:
        # Plain name order, so "Disc 10" lands before "Disc 2".
        folders = [d for d in list_subdirectories(album_dir) if self.is_disc_folder(d)]
        folders.sort(key=lambda p: p.name)
        return [
            DiscFolder(
                path=folder,
                disc_index=index,
                track_files=tuple(self.audio_files(folder)),
                image_files=tuple(self.image_files(folder)),
            )
            for index, folder in enumerate(folders, start=1)
        ]

    def has_disc_folders(self, album_dir: Path) -> bool:
        return any(self.is_disc_folder(d) for d in list_subdirectories(album_dir))

    def iter_candidates(self, root: Path) -> Iterator[Path]:
        for directory in list_subdirectories(root):
            if directory.name.startswith(("_", ".")):
                continue
            yield directory

    def snapshot(self, directory: Path) -> AlbumDirectory:
        """Capture everything derived from the directory name before it is mutated."""
        name = directory.name
        marker = self.settings.sorting.hires_marker
        parsed = split_album_dir_name(name)
        artist_raw, album_raw = parsed if parsed else (None, None)
        return AlbumDirectory(
            path=directory,
            artist_raw=artist_raw,
            album_raw=album_raw,
            genre_hint=extract_genre(name),
            quality_marker=quality_marker(name, marker),
            quality=classify(name, marker),
            has_disc_subfolders=self.has_disc_folders(directory),
            has_audio=bool(self.audio_files(directory)),
        )
