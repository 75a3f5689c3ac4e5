"""JPEG decoding, thumbnailing and metadata extraction with Pillow.

Thumbnails are produced with a fixed LANCZOS filter and fixed JPEG encoder
settings so the same input always yields the same bytes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import io

from loguru import logger
from PIL import Image, ImageOps, UnidentifiedImageError

from photo_gallery.core.errors import DecodeError
from photo_gallery.infrastructure.utils import get_exif_datetime_original

IMAGE_EXTENSIONS = (".jpg", ".jpeg")
THUMBNAIL_QUALITY = 85

# Pillow reports JPEGs carrying an MPF segment (most phone cameras) as MPO;
# only the first frame is decoded.
JPEG_FORMATS = frozenset({"JPEG", "MPO"})

_RESAMPLE = getattr(Image, "Resampling", Image).LANCZOS


def is_jpeg_name(name: str) -> bool:
    """Return True when `name` carries a JPEG extension (case-insensitive)."""
    return name.lower().endswith(IMAGE_EXTENSIONS)


@dataclass(frozen=True)
class ProcessedImage:
    thumbnail: bytes
    shooting_date: datetime | None = None


class ImageProcessor:
    """Turns raw JPEG bytes into a bounded thumbnail and a shooting date."""

    def process(self, raw: bytes, max_side: int, name: str = "<bytes>") -> ProcessedImage:
        """Decode `raw`, build a thumbnail no larger than `max_side` per side.

        Raises:
            DecodeError: `raw` is not a decodable JPEG. The error names `name`.
        """
        try:
            with Image.open(io.BytesIO(raw)) as im:
                if im.format not in JPEG_FORMATS:
                    raise DecodeError(name, f"unsupported image format {im.format!r}")
                im.load()
                shooting_date = get_exif_datetime_original(im)
                thumb = self._thumbnail(im, max_side)
        except (
            UnidentifiedImageError,
            OSError,
            ValueError,
            SyntaxError,
            EOFError,
            Image.DecompressionBombError,
        ) as ex:
            raise DecodeError(name, f"cannot decode image: {ex}") from ex

        buf = io.BytesIO()
        thumb.save(buf, format="JPEG", quality=THUMBNAIL_QUALITY)
        logger.debug("Thumbnail for {}: {}x{}", name, thumb.width, thumb.height)
        return ProcessedImage(thumbnail=buf.getvalue(), shooting_date=shooting_date)

    @staticmethod
    def _thumbnail(im: Image.Image, max_side: int) -> Image.Image:
        try:
            out = ImageOps.exif_transpose(im)
        except (OSError, ValueError, AttributeError, TypeError) as ex:
            logger.debug("exif_transpose skipped: {}", ex)
            out = im.copy()
        if out is None or out is im:
            out = im.copy()
        if out.mode not in ("RGB", "L"):
            out = out.convert("RGB")
        out.thumbnail((max_side, max_side), _RESAMPLE)
        return out
