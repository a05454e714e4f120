from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator


def _lower_extensions(values: List[str]) -> List[str]:
    result = []
    for value in values:
        ext = value.strip().lower()
        if ext and not ext.startswith("."):
            ext = f".{ext}"
        if ext:
            result.append(ext)
    return result


class LibrarySettings(BaseModel):
    audio_extensions: List[str] = Field(default_factory=lambda: [".flac"])
    image_extensions: List[str] = Field(
        default_factory=lambda: [".jpg", ".jpeg", ".png", ".gif", ".bmp"]
    )
    disc_prefixes: List[str] = Field(default_factory=lambda: ["disc", "cd"])
    preserved_folders: List[str] = Field(default_factory=lambda: ["artwork", "scans"])

    @field_validator("audio_extensions", "image_extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, values: List[str]) -> List[str]:
        return _lower_extensions(values)

    @field_validator("disc_prefixes", "preserved_folders", mode="before")
    @classmethod
    def _lower_names(cls, values: List[str]) -> List[str]:
        return [v.strip().lower() for v in values if v and v.strip()]


class ArtworkSettings(BaseModel):
    max_dimension: int = 1400
    jpeg_quality: int = 85
    embed_suffix: str = "_embed"

    @field_validator("jpeg_quality")
    @classmethod
    def _check_quality(cls, value: int) -> int:
        if not 1 <= value <= 95:
            raise ValueError("jpeg_quality must be between 1 and 95")
        return value


class SortingSettings(BaseModel):
    cd_dir: str = "_CD"
    hires_dir: str = "_Hires"
    hires_marker: str = "[24B-"
    compilation_artist: str = "Various Artists"


class Settings(BaseModel):
    library: LibrarySettings = LibrarySettings()
    artwork: ArtworkSettings = ArtworkSettings()
    sorting: SortingSettings = SortingSettings()

    @classmethod
    def load(cls, path: Path) -> "Settings":
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
        return cls.model_validate(raw or {})

    @classmethod
    def from_optional(cls, path: Optional[Path]) -> "Settings":
        if path is None:
            return cls()
        return cls.load(path)


def find_config(explicit_path: Optional[Path]) -> Optional[Path]:
    if explicit_path:
        if not explicit_path.exists():
            raise FileNotFoundError(f"Config file not found: {explicit_path}")
        return explicit_path
    cwd = Path.cwd()
    for candidate in (cwd / "flac-sort.yaml", cwd / "flac-sort.yml"):
        if candidate.exists():
            return candidate
    return None
