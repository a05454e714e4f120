from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Protocol

from mutagen import MutagenError
from mutagen.flac import FLAC, Picture

from .artwork import image_dimensions
from .meta_keys import FRONT_COVER
from .models import ArtworkError, MetadataWriteFailed

logger = logging.getLogger(__name__)

IMAGE_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
}


class TagStore(Protocol):
    """Per-track key/value tag access used by the tagger and the flattener."""

    def get_tag(self, path: Path, key: str) -> Optional[str]: ...

    def get_tags(self, path: Path) -> Dict[str, List[str]]: ...

    def set_tag(self, path: Path, key: str, value: str) -> None: ...

    def set_tags(self, path: Path, values: Mapping[str, str]) -> None: ...

    def replace_tags(self, path: Path, values: Mapping[str, str]) -> None: ...

    def remove_all_tags(self, path: Path) -> None: ...

    def remove_tag(self, path: Path, key: str) -> None: ...

    def remove_pictures(self, path: Path) -> None: ...

    def import_picture(self, path: Path, image_path: Path, picture_type: int = FRONT_COVER) -> None: ...

    def sample_rate(self, path: Path) -> Optional[int]: ...

    def bit_depth(self, path: Path) -> Optional[int]: ...


class FlacTagStore:
    """Vorbis comment and picture block access through mutagen."""

    def get_tag(self, path: Path, key: str) -> Optional[str]:
        values = self.get_tags(path).get(key.upper())
        if not values:
            return None
        return values[0]

    def get_tags(self, path: Path) -> Dict[str, List[str]]:
        audio = self._read(path)
        if audio is None or audio.tags is None:
            return {}
        result: Dict[str, List[str]] = {}
        for key, value in audio.tags:
            result.setdefault(key.upper(), []).append(value)
        return result

    def set_tag(self, path: Path, key: str, value: str) -> None:
        self.set_tags(path, {key: value})

    def set_tags(self, path: Path, values: Mapping[str, str]) -> None:
        def _apply(audio: FLAC) -> None:
            for key, value in values.items():
                audio[key] = [str(value)]

        self._mutate(path, _apply)

    def replace_tags(self, path: Path, values: Mapping[str, str]) -> None:
        def _apply(audio: FLAC) -> None:
            self._clear_tags(audio)
            for key, value in values.items():
                audio[key] = [str(value)]

        self._mutate(path, _apply)

    def remove_all_tags(self, path: Path) -> None:
        self._mutate(path, self._clear_tags)

    def remove_tag(self, path: Path, key: str) -> None:
        def _apply(audio: FLAC) -> None:
            if key in audio.tags:
                del audio.tags[key]

        self._mutate(path, _apply)

    def remove_pictures(self, path: Path) -> None:
        self._mutate(path, lambda audio: audio.clear_pictures())

    def import_picture(self, path: Path, image_path: Path, picture_type: int = FRONT_COVER) -> None:
        try:
            data = image_path.read_bytes()
        except OSError as exc:
            raise MetadataWriteFailed(f"cannot read artwork {image_path}: {exc}") from exc
        picture = Picture()
        picture.type = picture_type
        picture.mime = IMAGE_MIME_TYPES.get(image_path.suffix.lower(), "image/jpeg")
        picture.desc = "Cover"
        picture.data = data
        try:
            picture.width, picture.height = image_dimensions(image_path)
        except ArtworkError:
            logger.debug("Could not read dimensions of %s", image_path)
        self._mutate(path, lambda audio: audio.add_picture(picture))

    def sample_rate(self, path: Path) -> Optional[int]:
        audio = self._read(path)
        if audio is None:
            return None
        return getattr(audio.info, "sample_rate", None)

    def bit_depth(self, path: Path) -> Optional[int]:
        audio = self._read(path)
        if audio is None:
            return None
        return getattr(audio.info, "bits_per_sample", None)

    @staticmethod
    def _clear_tags(audio: FLAC) -> None:
        for key in list(audio.tags.keys()):
            del audio.tags[key]

    def _read(self, path: Path) -> Optional[FLAC]:
        try:
            return FLAC(path)
        except (MutagenError, OSError) as exc:
            logger.debug("Failed to read tags for %s: %s", path, exc)
            return None

    def _mutate(self, path: Path, change: Callable[[FLAC], None]) -> None:
        try:
            audio = FLAC(path)
            if audio.tags is None:
                audio.add_tags()
            change(audio)
            audio.save()
        except (MutagenError, OSError, ValueError) as exc:
            raise MetadataWriteFailed(f"cannot write tags to {path}: {exc}") from exc
