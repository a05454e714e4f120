from __future__ import annotations

from typing import Optional

from .models import Quality
from .naming import DEFAULT_QUALITY_MARKER, bracket_groups, is_quality_group


def classify(directory_name: str, marker: str = DEFAULT_QUALITY_MARKER) -> Quality:
    # Case-sensitive: "[24b-" is not a hi-res marker.
    if marker in directory_name:
        return Quality.HIGH_RES
    return Quality.STANDARD


def quality_marker(directory_name: str, marker: str = DEFAULT_QUALITY_MARKER) -> Optional[str]:
    for group in bracket_groups(directory_name):
        if is_quality_group(group, marker):
            return group
    return None
