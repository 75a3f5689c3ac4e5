"""Builds the album output model consumed by template rendering."""

from __future__ import annotations

from collections.abc import Sequence

from photo_gallery.core.models import Album, AlbumIndex, PhotoItem

COVER_FILE_NAME = "cover.jpg"


def find_cover(photos: Sequence[PhotoItem]) -> PhotoItem | None:
    """Return the photo explicitly named as cover, or None."""
    for photo in photos:
        if photo.title == COVER_FILE_NAME:
            return photo
    return None


def build_album(name: str, folder: str, sorted_photos: Sequence[PhotoItem]) -> Album:
    """Create an `Album` from already sorted photos.

    When no cover photo exists the album has no explicit cover and renderers
    fall back to the first photo.
    """
    photos = list(sorted_photos)
    return Album(name=name, folder=folder, photos=photos, cover=find_cover(photos))


def index_for(album: Album) -> AlbumIndex:
    """Return the index to persist for `album`."""
    return AlbumIndex(photos=list(album.photos), cover=album.cover)
