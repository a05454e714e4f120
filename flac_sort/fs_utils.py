from __future__ import annotations

import errno
import logging
import os
import shutil
from pathlib import Path
from typing import Iterable, List, Optional

from .models import FileMoveFailed

logger = logging.getLogger(__name__)


def is_sidecar_junk(path: Path) -> bool:
    # macOS AppleDouble files (._*) carry an audio/image suffix but are metadata blobs.
    return path.name.startswith("._")


def list_files(directory: Path, extensions: Iterable[str]) -> List[Path]:
    """Regular files directly inside ``directory`` with a matching suffix, by name."""
    exts = {ext.lower() for ext in extensions}
    try:
        entries = list(directory.iterdir())
    except FileNotFoundError:
        return []
    files = [
        entry
        for entry in entries
        if entry.suffix.lower() in exts and not is_sidecar_junk(entry) and entry.is_file()
    ]
    return sorted(files, key=lambda p: p.name)


def list_subdirectories(directory: Path) -> List[Path]:
    try:
        entries = list(directory.iterdir())
    except FileNotFoundError:
        return []
    return sorted((entry for entry in entries if entry.is_dir()), key=lambda p: p.name)


def is_empty_dir(directory: Path) -> bool:
    with os.scandir(directory) as it:
        return next(it, None) is None


def disc_collision_path(destination_dir: Path, name: str, disc_index: int) -> Path:
    """Free path for ``name`` in ``destination_dir``.

    The plain name is used when free, then ``<stem>_disc<N><ext>``, then
    ``<stem>_disc<N>_2<ext>``, ``_3`` and so on.
    """
    candidate = destination_dir / name
    if not os.path.lexists(candidate):
        return candidate
    original = Path(name)
    base = f"{original.stem}_disc{disc_index}"
    candidate = destination_dir / f"{base}{original.suffix}"
    counter = 2
    while os.path.lexists(candidate):
        candidate = destination_dir / f"{base}_{counter}{original.suffix}"
        counter += 1
    return candidate


def move_path(src: Path, dst: Path) -> None:
    """Move a file or directory to ``dst``, which must not exist yet."""
    if os.path.lexists(dst):
        raise FileMoveFailed(f"destination already exists: {dst}")
    try:
        try:
            src.rename(dst)
        except OSError as exc:
            if exc.errno != errno.EXDEV:
                raise
            # Cross-device rename failed; fall back to shutil.move which copies+removes.
            shutil.move(str(src), str(dst))
    except OSError as exc:
        raise FileMoveFailed(f"cannot move {src} -> {dst}: {exc}") from exc
    logger.debug("Moved %s -> %s", src, dst)


def remove_tree(path: Path) -> Optional[int]:
    """Delete ``path`` recursively, returning the number of files removed."""
    count = 0
    try:
        for root, dirs, files in os.walk(path, topdown=False):
            root_path = Path(root)
            for name in files:
                try:
                    (root_path / name).unlink()
                    count += 1
                except FileNotFoundError:
                    continue
            for name in dirs:
                (root_path / name).rmdir()
        path.rmdir()
        return count
    except OSError as exc:
        logger.warning("Failed to remove %s: %s", path, exc)
        return None
