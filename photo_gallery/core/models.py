"""Core domain models for gallery photos, albums and the per-album index."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class PhotoItem:
    """A single processed photo and the paths of its derived artifacts.

    Paths are relative to the album output folder.
    """

    title: str
    photo_path: str
    thumbnail_path: str
    checksum: str
    shooting_date: datetime | None = None


@dataclass
class Album:
    """A collection of photos rendered together under one output folder."""

    name: str
    folder: str
    photos: list[PhotoItem] = field(default_factory=list)
    cover: PhotoItem | None = None


@dataclass
class AlbumIndex:
    """Photos recorded by the previous run of an album, keyed by title."""

    photos: list[PhotoItem] = field(default_factory=list)
    cover: PhotoItem | None = None

    def __post_init__(self) -> None:
        self._by_title = {p.title: p for p in self.photos}

    def get(self, title: str) -> PhotoItem | None:
        """Return the recorded photo named `title`, if any."""
        return self._by_title.get(title)

    def titles(self) -> set[str]:
        return set(self._by_title)
