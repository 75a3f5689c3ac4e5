"""Sorting service for album photos.

Photos are ordered by shooting date when available and by title otherwise.
The result only depends on the set of photos and the direction, never on the
order in which workers produced them.
"""

from __future__ import annotations

from collections.abc import Iterable

from photo_gallery.core.models import PhotoItem


class SortService:
    """Provides the deterministic photo ordering used for every album."""

    def sort(self, photos: Iterable[PhotoItem], ascending: bool = False) -> list[PhotoItem]:
        """Return `photos` sorted by shooting date, falling back to title.

        Args:
            photos: Photos in any order.
            ascending: Oldest first when True, newest first otherwise. The
                same direction applies to the title fallback.

        Dated photos come first; two dated photos compare by date (title
        breaks ties), everything else compares by title.
        """
        dated: list[PhotoItem] = []
        undated: list[PhotoItem] = []
        for photo in photos:
            (dated if photo.shooting_date is not None else undated).append(photo)

        dated.sort(key=lambda p: (p.shooting_date, p.title), reverse=not ascending)
        undated.sort(key=lambda p: p.title, reverse=not ascending)
        return dated + undated
