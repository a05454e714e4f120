from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image

from .models import ArtworkError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EmbedArtwork:
    source: Path
    selected: Path
    temporary: Optional[Path] = None

    def cleanup(self) -> None:
        if self.temporary is None:
            return
        try:
            self.temporary.unlink()
            logger.debug("Removed temporary artwork %s", self.temporary)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Failed to remove temporary artwork %s: %s", self.temporary, exc)


def image_dimensions(path: Path) -> Tuple[int, int]:
    try:
        with Image.open(path) as img:
            return img.size
    except OSError as exc:
        raise ArtworkError(f"cannot read image {path}: {exc}") from exc


def prepare_embed_artwork(
    cover: Path,
    max_dimension: int = 1400,
    quality: int = 85,
    suffix: str = "_embed",
) -> EmbedArtwork:
    """Pick the image to embed for ``cover``.

    Covers within ``max_dimension`` are embedded as-is. Larger covers are
    downscaled into ``<stem><suffix>.jpg`` next to the original (aspect ratio
    kept, metadata dropped) and whichever file is smaller wins. The caller owns
    cleanup of the temporary file.
    """
    width, height = image_dimensions(cover)
    if width <= max_dimension and height <= max_dimension:
        return EmbedArtwork(source=cover, selected=cover)

    resized = cover.with_name(f"{cover.stem}{suffix}.jpg")
    try:
        with Image.open(cover) as img:
            rgb = img.convert("RGB")
        rgb.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)
        rgb.save(resized, format="JPEG", quality=quality, optimize=True, dpi=(72, 72))
    except OSError as exc:
        raise ArtworkError(f"cannot resize {cover}: {exc}") from exc

    original_size = cover.stat().st_size
    resized_size = resized.stat().st_size
    logger.debug(
        "Artwork %s: %dx%d, %d bytes; resized %dx%d, %d bytes",
        cover.name,
        width,
        height,
        original_size,
        rgb.width,
        rgb.height,
        resized_size,
    )
    selected = resized if resized_size < original_size else cover
    return EmbedArtwork(source=cover, selected=selected, temporary=resized)
