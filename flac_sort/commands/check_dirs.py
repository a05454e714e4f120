from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator, List

from ..fs_utils import list_files, remove_tree


def iter_leaf_dirs_without_audio(root: Path, extensions: Iterable[str]) -> Iterator[Path]:
    """Leaf directories below ``root`` holding no audio file.

    Directories starting with ``_`` are neither reported nor count as
    children, so an album holding only ``_extras`` is still a leaf.
    """
    exts = list(extensions)
    for dirpath, dirnames, _ in os.walk(root):
        dirnames.sort()
        path = Path(dirpath)
        if path == root or path.name.startswith("_"):
            continue
        if any(not name.startswith("_") for name in dirnames):
            continue
        if not list_files(path, exts):
            yield path


def run(root: Path, extensions: List[str], *, clean: bool = False) -> int:
    if not root.is_dir():
        print(f"Error: '{root}' is not a valid directory.")
        return 1
    root = root.resolve()
    # Collect first; removing while walking would upset os.walk.
    for path in list(iter_leaf_dirs_without_audio(root, extensions)):
        if not clean:
            print(path)
            continue
        print(f"Removing: {path}")
        remove_tree(path)
    return 0
