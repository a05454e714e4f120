from __future__ import annotations

import re
from typing import List, Optional, Tuple

ALBUM_SEPARATOR = " - "
DEFAULT_QUALITY_MARKER = "[24B-"

_BRACKET_GROUP = re.compile(r"\[[^\]]*\]")
_BRACKET_CONTENT = re.compile(r"\[([^\]]*)\]")
_YEAR_GROUP = re.compile(r"\(\d{4}\)")
_BRACKET_CHARS = re.compile(r"[()\[\]]")
_WHITESPACE = re.compile(r"\s+")
_FEATURING = re.compile(r"\bfeaturing\b", re.IGNORECASE)
_WORD_START = re.compile(r"\b(\w)")
_AFTER_PERIOD = re.compile(r"\.(\w)")
_AFTER_APOSTROPHE = re.compile(r"(['’])(\w)")
_FEAT_CAPITALIZED = re.compile(r"\bFeat\.")


def format_album(raw: str) -> str:
    """Display form of an album name taken from a directory name.

    Bracket groups and ``(YYYY)`` year groups are dropped, stray bracket
    characters removed, then the shared capitalization rules apply with
    `` & `` spelled out as `` And ``.
    """
    name = _BRACKET_GROUP.sub("", raw)
    name = _YEAR_GROUP.sub("", name)
    name = _BRACKET_CHARS.sub("", name)
    return _ampersand(_capitalize_words(name), "And")


def format_artist(raw: str) -> str:
    """Display form of an artist; the conjunction is always a lowercase ``and``."""
    name = _capitalize_words(raw)
    name = _ampersand(name, "and")
    return name.replace(" And ", " and ")


def format_title(raw: str) -> str:
    return _ampersand(_capitalize_words(raw), "And")


def _capitalize_words(value: str) -> str:
    text = _WHITESPACE.sub(" ", value).strip()
    text = _FEATURING.sub("feat.", text)
    text = _WORD_START.sub(lambda m: m.group(1).upper(), text)
    text = _AFTER_PERIOD.sub(lambda m: "." + m.group(1).upper(), text)
    text = _AFTER_APOSTROPHE.sub(lambda m: m.group(1) + m.group(2).lower(), text)
    return _FEAT_CAPITALIZED.sub("feat.", text)


def _ampersand(value: str, replacement: str) -> str:
    return value.replace(" & ", f" {replacement} ")


def split_album_dir_name(name: str) -> Optional[Tuple[str, str]]:
    """Split ``Artist - Album [..]`` on the first separator."""
    if ALBUM_SEPARATOR not in name:
        return None
    artist, album = name.split(ALBUM_SEPARATOR, 1)
    artist = artist.strip()
    album = album.strip()
    if not artist or not album:
        return None
    return artist, album


def album_dir_name(artist: str, album: str) -> str:
    return f"{artist}{ALBUM_SEPARATOR}{album}"


def bracket_groups(name: str) -> List[str]:
    return [group.strip() for group in _BRACKET_CONTENT.findall(name)]


def is_quality_group(group: str, marker: str = DEFAULT_QUALITY_MARKER) -> bool:
    return f"[{group}]".startswith(marker)


def extract_genre(name: str, fallback: Optional[str] = None) -> Optional[str]:
    """Last non-empty bracket group of ``name``, as written.

    A trailing quality marker wins over an earlier genre group, so
    ``Foo - Bar [Jazz] [24B-96]`` yields ``24B-96``.
    """
    for group in reversed(bracket_groups(name)):
        if group:
            return group
    return fallback
