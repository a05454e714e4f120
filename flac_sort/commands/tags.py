from __future__ import annotations

import os
import re
import sys
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

from ..fs_utils import list_files
from ..models import MetadataWriteFailed
from ..tagging import TagStore

INSPECT = "inspect"
OVERWRITE = "overwrite"
DRY_RUN = "dry-run"

STATS_ORDER = (
    ("scanned", "Files scanned"),
    ("with_tag", "Files with tag"),
    ("no_tag", "Files without tag"),
    ("matched", "Matched"),
    ("deleted", "Deleted"),
    ("updated", "Updated"),
    ("unchanged", "Unchanged"),
    ("kept_nomatch", "Kept (no match)"),
)


@dataclass
class TagEditOptions:
    mode: str
    tag: str
    pattern: Optional[str] = None
    replacement: str = ""
    recursive: bool = False
    delete_on_match: bool = False
    show_stats: bool = False
    hide_missing: bool = False
    hide_nomatch: bool = False


def iter_flac_files(base: Path, recursive: bool, extensions: List[str]) -> Iterator[Path]:
    if not recursive:
        yield from (p for p in list_files(base, extensions) if not p.is_symlink())
        return
    exts = {ext.lower() for ext in extensions}
    for dirpath, dirnames, filenames in os.walk(base, followlinks=False):
        dirnames.sort()
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if path.suffix.lower() in exts and not path.is_symlink():
                yield path


def run(store: TagStore, base: Path, options: TagEditOptions, extensions: List[str]) -> int:
    """Inspect or rewrite one tag across the FLAC files under ``base``.

    Multiple values of the tag are joined with ``;`` before matching. Returns
    the process exit code.
    """
    if not base.is_dir():
        print(f"Error: {base} is not a directory", file=sys.stderr)
        return 2
    if options.mode != INSPECT and options.pattern is None:
        print("Error: a regex is required to overwrite", file=sys.stderr)
        return 1
    try:
        regex = re.compile(options.pattern) if options.pattern is not None else None
    except re.error as exc:
        print(f"Error: invalid regex {options.pattern!r}: {exc}", file=sys.stderr)
        return 1
    counts: Counter[str] = Counter()
    for path in iter_flac_files(base.resolve(), options.recursive, extensions):
        counts["scanned"] += 1
        try:
            _process(store, path, options, regex, counts)
        except MetadataWriteFailed as exc:
            print(f"{path}\terror: {exc}", file=sys.stderr)
    if options.show_stats:
        _print_stats(options.mode, counts)
    return 0


def _process(
    store: TagStore,
    path: Path,
    options: TagEditOptions,
    regex: Optional[re.Pattern[str]],
    counts: Counter[str],
) -> None:
    values = ";".join(store.get_tags(path).get(options.tag.upper(), []))

    if options.mode == INSPECT:
        counts["with_tag" if values else "no_tag"] += 1
        shown = values or "(none)"
        if regex is not None and not regex.search(shown):
            counts["kept_nomatch"] += 1
            return
        if regex is not None:
            counts["matched"] += 1
        counts["printed"] += 1
        print(f"{path}\t{shown}")
        return

    if not values:
        counts["no_tag"] += 1
        if not options.hide_missing:
            print(f"{path}\t(no tag) - skipped")
        return
    counts["with_tag"] += 1
    if regex is None or not regex.search(values):
        counts["kept_nomatch"] += 1
        if not options.hide_nomatch:
            print(f"{path}\t(no match) - kept: {values}")
        return
    counts["matched"] += 1

    dry_run = options.mode == DRY_RUN
    if options.delete_on_match:
        if dry_run:
            print(f"{path}\tDRY-RUN: would DELETE tag '{options.tag}' (was: {values})")
        else:
            store.remove_tag(path, options.tag)
            print(f"{path}\tdeleted tag '{options.tag}' (was: {values})")
        counts["deleted"] += 1
        return

    new_values = regex.sub(options.replacement, values)
    if new_values == values:
        print(f"{path}\t(match but unchanged) - kept: {values}")
        counts["unchanged"] += 1
        return
    if dry_run:
        print(f"{path}\tDRY-RUN: would update: {values} -> {new_values}")
    else:
        store.remove_tag(path, options.tag)
        store.set_tag(path, options.tag, new_values)
        print(f"{path}\tupdated: {values} -> {new_values}")
    counts["updated"] += 1


def _print_stats(mode: str, counts: Counter[str]) -> None:
    print(f"---- tag stats ({mode})", file=sys.stderr)
    for key, label in STATS_ORDER:
        print(f"{label + ':':<19}{counts[key]}", file=sys.stderr)
    if mode == INSPECT:
        print(f"{'Printed:':<19}{counts['printed']}", file=sys.stderr)
