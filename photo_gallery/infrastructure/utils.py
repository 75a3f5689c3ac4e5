"""Utilities for EXIF date extraction, index date formatting and file writes.

Date handling is best-effort: helpers here never raise on bad metadata and
callers should expect `None` when a date is not available.
"""

from __future__ import annotations

from datetime import datetime
import os
from pathlib import Path
import tempfile
from typing import Any

from loguru import logger
from PIL import Image

from photo_gallery.core.errors import MetadataError

EXIF_DT_FMT = "%Y:%m:%d %H:%M:%S"
EXIF_IFD_POINTER = 0x8769
TAG_DATETIME_ORIGINAL = 36867

# Written by older indexes for photos without a shooting date.
ZERO_TIME_PREFIX = "0001-01-01T00:00:00"

FILE_MODE = 0o644

# Per-album folder holding generated thumbnails.
THUMBNAILS_DIR_NAME = "thumbnails"


def read_datetime_original(im: Image.Image) -> datetime:
    """Return EXIF DateTimeOriginal of `im` or raise `MetadataError`."""
    source = getattr(im, "filename", "") or "<bytes>"
    try:
        exif = im.getexif()
    except (OSError, ValueError, TypeError, SyntaxError) as ex:
        raise MetadataError(source, f"unreadable EXIF block: {ex}") from ex
    if not exif:
        raise MetadataError(source, "no EXIF data")

    value: Any = None
    try:
        value = exif.get_ifd(EXIF_IFD_POINTER).get(TAG_DATETIME_ORIGINAL)
    except (OSError, ValueError, TypeError, KeyError) as ex:
        logger.debug("Exif IFD unreadable for {}: {}", source, ex)
    if not value:
        value = exif.get(TAG_DATETIME_ORIGINAL)
    if not value:
        raise MetadataError(source, "DateTimeOriginal missing")

    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore")
    text = str(value).strip().rstrip("\x00")
    try:
        return datetime.strptime(text, EXIF_DT_FMT)
    except ValueError as ex:
        raise MetadataError(source, f"malformed DateTimeOriginal {text!r}") from ex


def get_exif_datetime_original(im: Image.Image) -> datetime | None:
    """Best-effort DateTimeOriginal; None when missing or malformed."""
    try:
        return read_datetime_original(im)
    except MetadataError as ex:
        logger.debug("No shooting date: {}", ex)
        return None


def format_index_datetime(dt: datetime | None) -> str | None:
    """Format a shooting date for the index; None when absent."""
    return dt.isoformat() if dt else None


def parse_index_datetime(value: Any) -> datetime | None:
    """Parse a shooting date read from the index.

    Raises ValueError for values that are present but not ISO-8601. Zero
    times and empty values mean "no date". Aware values are converted to
    naive ones so they compare with EXIF dates.
    """
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValueError(f"shooting_date must be a string, got {value!r}")
    if value.startswith(ZERO_TIME_PREFIX):
        return None
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    dt = datetime.fromisoformat(text)
    return dt.replace(tzinfo=None) if dt.tzinfo else dt


def write_atomic(path: Path, data: bytes) -> None:
    """Write `data` to `path` through a temporary sibling and `os.replace`.

    Readers see either the old or the new content, never a partial file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, FILE_MODE)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise
