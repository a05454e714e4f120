from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from ..fs_utils import list_files
from ..meta_keys import (
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
from ..tagging import TagStore


def _value(tags: Dict[str, List[str]], key: str, default: str = "") -> str:
    values = tags.get(key)
    if not values or not values[0].strip():
        return default
    return values[0].strip()


def format_track_line(store: TagStore, path: Path) -> str:
    tags = store.get_tags(path)
    sample_rate = store.sample_rate(path)
    bit_depth = store.bit_depth(path)
    track_disc = (
        f"{_value(tags, TRACKNUMBER, '0')} of {_value(tags, TRACKTOTAL, '0')} / "
        f"{_value(tags, DISCNUMBER, '1')} of {_value(tags, DISCTOTAL, '1')}"
    )
    tech = f"{sample_rate or ''}/{bit_depth or ''}"
    mark = "C" if _value(tags, COMPILATION) == "1" else " "
    return (
        f"{track_disc} {tech}  {mark}  {_value(tags, GENRE)}    {_value(tags, TITLE)}    "
        f"{_value(tags, ARTIST)} / {_value(tags, ALBUMARTIST)}"
    )


def run(store: TagStore, file: Optional[Path], directory: Path, extensions: List[str]) -> int:
    if file is not None:
        if not file.is_file():
            print(f"File not found: {file}")
            return 1
        print(format_track_line(store, file))
        return 0
    for path in list_files(directory, extensions):
        print(format_track_line(store, path))
    return 0
