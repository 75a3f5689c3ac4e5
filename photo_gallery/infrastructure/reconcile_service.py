"""Removal of derived artifacts for photos that disappeared from an album.

Deletion is best-effort: failures are logged and reported, never raised, and
source photos are never touched.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
import os
from pathlib import Path

from loguru import logger
from send2trash import send2trash

from photo_gallery.core.models import AlbumIndex, PhotoItem
from photo_gallery.infrastructure.utils import THUMBNAILS_DIR_NAME


@dataclass
class ReconcileResult:
    """Outcome of a reconciliation.

    Attributes:
        deleted: Titles whose artifacts were removed (or already gone).
        failed: Tuples of (path, reason) for artifacts that could not be removed.
    """

    deleted: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)


class ReconcileService:
    """Deletes thumbnails and copies of photos no longer in the source folder."""

    def __init__(self, send_to_trash: bool = False) -> None:
        self._send_to_trash = send_to_trash

    def plan(self, previous: AlbumIndex, current: Iterable[PhotoItem]) -> list[PhotoItem]:
        """Return previously indexed photos absent from `current`."""
        current_titles = {p.title for p in current}
        return [p for p in previous.photos if p.title not in current_titles]

    def reconcile(
        self,
        previous: AlbumIndex,
        current: Iterable[PhotoItem],
        output_dir: str | Path,
        copies_enabled: bool,
        source_dir: str | Path | None = None,
    ) -> ReconcileResult:
        """Delete artifacts of stale photos under `output_dir`.

        Only paths resolving inside `output_dir` are ever removed: thumbnails
        must sit in its `thumbnails` folder, copies anywhere below it but never
        inside `source_dir`. Other paths are reported in `failed` and kept.

        Args:
            previous: Index written by the previous run.
            current: Photos found by this run.
            output_dir: Album output folder the index paths are relative to.
            copies_enabled: Whether photo copies live in `output_dir`. When
                False, `photo_path` points at a source file and is left alone.
            source_dir: Album photos folder. Nothing inside it is deleted
                except thumbnails.
        """
        result = ReconcileResult()
        base = Path(output_dir)
        out_root = base.resolve()
        thumbs_root = out_root / THUMBNAILS_DIR_NAME
        source = Path(source_dir).resolve() if source_dir is not None else None
        for stale in self.plan(previous, current):
            logger.info("[deleting]\t {}", stale.title)
            targets = [(base / stale.thumbnail_path, thumbs_root)]
            if copies_enabled:
                targets.append((base / stale.photo_path, out_root))
            ok = True
            for target, root in targets:
                reason = self._check_target(target, root, source, thumbs_root)
                if reason is None:
                    reason = self._remove(target)
                if reason is not None:
                    ok = False
                    result.failed.append((str(target), reason))
            if ok:
                result.deleted.append(stale.title)
        return result

    @staticmethod
    def _check_target(
        target: Path, root: Path, source: Path | None, thumbs_root: Path
    ) -> str | None:
        """Return why `target` must not be deleted, or None when it may be."""
        resolved = target.resolve()
        if resolved == root or not resolved.is_relative_to(root):
            reason = f"refusing to delete path outside {root}"
        elif resolved.is_dir():
            reason = "refusing to delete a folder"
        elif (
            source is not None
            and resolved.is_relative_to(source)
            and not resolved.is_relative_to(thumbs_root)
        ):
            reason = f"refusing to delete path inside photos folder {source}"
        else:
            return None
        logger.warning("Skip deleting {}: {}", target, reason)
        return reason

    def _remove(self, path: Path) -> str | None:
        """Remove `path`; return a failure reason or None on success."""
        if not path.exists():
            logger.debug("Artifact already gone: {}", path)
            return None
        try:
            if self._send_to_trash:
                send2trash(os.path.normpath(str(path)))
            else:
                path.unlink()
            return None
        except (OSError, UnicodeEncodeError) as ex:
            logger.warning("Failed to delete {}: {}", path, ex)
            return str(ex)
