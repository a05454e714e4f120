from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Tuple

from ..fs_utils import list_subdirectories, move_path
from ..models import FileMoveFailed

logger = logging.getLogger(__name__)

DEFAULT_GENRE = "Jazz"


def replacements(genre: str) -> Dict[str, str]:
    return {"[MP4]": "[FLAC]", "[Unknown]": f"[{genre}]"}


def cleaned_name(name: str, genre: str) -> str:
    for old, new in replacements(genre).items():
        name = name.replace(old, new)
    return name


def run(directory: Path, genre: str = DEFAULT_GENRE) -> Tuple[List[Path], List[Path]]:
    """Rename download folders directly under ``directory``; returns (renamed, skipped)."""
    renamed: List[Path] = []
    skipped: List[Path] = []
    for path in list_subdirectories(directory):
        new_name = cleaned_name(path.name, genre)
        if new_name == path.name:
            continue
        target = path.with_name(new_name)
        if target.exists():
            print(f"SKIP: '{path.name}' -> '{new_name}' (target exists)")
            skipped.append(path)
            continue
        try:
            move_path(path, target)
        except FileMoveFailed as exc:
            logger.warning("Could not rename %s: %s", path.name, exc)
            skipped.append(path)
            continue
        print(f"RENAMED: '{path.name}' -> '{new_name}'")
        renamed.append(target)
    return renamed, skipped
