"""Content-checksum change detection against the previous album index."""

from __future__ import annotations

from dataclasses import dataclass
import hashlib

from photo_gallery.core.models import AlbumIndex, PhotoItem


@dataclass(frozen=True)
class Decision:
    """Outcome of `decide`.

    Attributes:
        checksum: Hex digest of the raw bytes, computed once per run.
        reuse: The previously recorded item when it is still current; None
            means the photo must be (re)processed.
    """

    checksum: str
    reuse: PhotoItem | None = None

    @property
    def needs_processing(self) -> bool:
        return self.reuse is None


def compute_checksum(raw: bytes) -> str:
    """Return the MD5 hex digest of `raw`.

    MD5 is used for change detection only; it matches the checksums stored in
    existing album indexes.
    """
    return hashlib.md5(raw, usedforsecurity=False).hexdigest()


def decide(title: str, raw: bytes, index: AlbumIndex) -> Decision:
    """Decide whether the photo `title` with content `raw` can be reused."""
    checksum = compute_checksum(raw)
    previous = index.get(title)
    if previous is not None and previous.checksum == checksum:
        return Decision(checksum=checksum, reuse=previous)
    return Decision(checksum=checksum)
