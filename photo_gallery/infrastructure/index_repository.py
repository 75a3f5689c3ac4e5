"""JSON persistence for per-album photo indexes.

The index records, for every photo of the previous run, its checksum, derived
paths and shooting date. Saving replaces the file atomically so an
interrupted write leaves the previous index intact.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger

from photo_gallery.core.errors import CacheCorruptionError, GalleryIOError
from photo_gallery.core.models import AlbumIndex, PhotoItem
from photo_gallery.infrastructure.utils import (
    format_index_datetime,
    parse_index_datetime,
    write_atomic,
)

INDEX_FILE_NAME = "index.json"

REQUIRED_KEYS = ("title", "photo_path", "thumbnail_path", "photo_checksum")


def _item_to_dict(item: PhotoItem) -> dict[str, Any]:
    return {
        "title": item.title,
        "photo_path": item.photo_path,
        "thumbnail_path": item.thumbnail_path,
        "shooting_date": format_index_datetime(item.shooting_date),
        "photo_checksum": item.checksum,
    }


def _item_from_dict(row: Any) -> PhotoItem:
    """Build a `PhotoItem` from one index row; ValueError on bad shape."""
    if not isinstance(row, dict):
        raise ValueError(f"photo entry must be an object, got {type(row).__name__}")
    missing = [k for k in REQUIRED_KEYS if k not in row]
    if missing:
        raise ValueError(f"photo entry missing keys: {missing}")
    return PhotoItem(
        title=str(row["title"]),
        photo_path=str(row["photo_path"]),
        thumbnail_path=str(row["thumbnail_path"]),
        checksum=str(row["photo_checksum"]),
        shooting_date=parse_index_datetime(row.get("shooting_date")),
    )


class JsonIndexRepository:
    """Load and save album indexes as `index.json` in the album output folder."""

    def index_path(self, album_dir: str | Path) -> Path:
        return Path(album_dir) / INDEX_FILE_NAME

    def load(self, album_dir: str | Path) -> AlbumIndex:
        """Return the index stored in `album_dir`, or an empty one.

        Raises:
            CacheCorruptionError: the file exists but cannot be parsed.
            GalleryIOError: the file exists but cannot be read.
        """
        path = self.index_path(album_dir)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            logger.debug("No previous index at {}", path)
            return AlbumIndex()
        except OSError as ex:
            raise GalleryIOError(path, f"cannot read index: {ex}") from ex

        try:
            data = json.loads(raw.decode("utf-8"))
            if not isinstance(data, dict):
                raise ValueError("index must be a JSON object")
            photos = [_item_from_dict(row) for row in data.get("photos") or []]
            cover_row = data.get("cover")
            cover = _item_from_dict(cover_row) if cover_row else None
        except (UnicodeDecodeError, ValueError, TypeError) as ex:
            raise CacheCorruptionError(path, f"corrupt index: {ex}") from ex

        titles = [p.title for p in photos]
        if len(set(titles)) != len(titles):
            raise CacheCorruptionError(path, "corrupt index: duplicate photo titles")
        return AlbumIndex(photos=photos, cover=cover)

    def save(self, album_dir: str | Path, index: AlbumIndex) -> None:
        """Replace the index in `album_dir` with `index`."""
        path = self.index_path(album_dir)
        payload = {
            "photos": [_item_to_dict(p) for p in index.photos],
            "cover": _item_to_dict(index.cover) if index.cover else None,
        }
        data = json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")
        try:
            write_atomic(path, data)
        except OSError as ex:
            raise GalleryIOError(path, f"cannot write index: {ex}") from ex
        logger.debug("Index written: {} ({} photos)", path, len(index.photos))
