"""Runs one album end to end: process, sort, reconcile, assemble, render."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from loguru import logger

from photo_gallery.app.worker_pool import AlbumWorkerPool, same_folder
from photo_gallery.core.models import Album, PhotoItem
from photo_gallery.core.services.album_assembler import build_album, index_for
from photo_gallery.core.services.sort_service import SortService
from photo_gallery.infrastructure.index_repository import JsonIndexRepository
from photo_gallery.infrastructure.reconcile_service import ReconcileService
from photo_gallery.infrastructure.settings import GalleryConfig
from photo_gallery.infrastructure.template_renderer import TemplateRenderer


class AlbumPipeline:
    """Orchestrates the processing of a single album.

    Collaborators are injectable so tests can instrument them. Concurrent
    runs against the same output folder are not supported.
    """

    def __init__(
        self,
        config: GalleryConfig,
        repo: JsonIndexRepository | None = None,
        pool: AlbumWorkerPool | None = None,
        sorter: SortService | None = None,
        reconciler: ReconcileService | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self._config = config
        self._repo = repo or JsonIndexRepository()
        self._pool = pool or AlbumWorkerPool(config)
        self._sorter = sorter or SortService()
        self._reconciler = reconciler or ReconcileService(send_to_trash=config.send_to_trash)
        self._renderer = renderer

    def run(self, source_dir: str | Path, output_dir: str | Path, name: str) -> Album:
        """Generate the album `name` from `source_dir` into `output_dir`.

        Raises:
            GalleryError: any fatal failure; the previous index is then kept.
        """
        source = Path(source_dir)
        output = Path(output_dir)
        logger.info("Album '{}': {} -> {}", name, source, output)

        previous = self._repo.load(output)
        photos = self._pool.run_album(source, output, previous)
        ordered = self._sorter.sort(photos, ascending=self._config.ascending)

        result = self._reconciler.reconcile(
            previous,
            ordered,
            output,
            copies_enabled=not same_folder(source, output),
            source_dir=source,
        )
        if result.failed:
            logger.warning("Album '{}': {} stale artifacts not removed", name, len(result.failed))

        album = self.assemble(name, source.name, ordered, output)
        if self._renderer is not None:
            self._renderer.render_album(album, output)
        logger.info(
            "Album '{}' done: {} photos, {} removed", name, len(album.photos), len(result.deleted)
        )
        return album

    def assemble(
        self, name: str, folder: str, sorted_photos: Sequence[PhotoItem], output_dir: str | Path
    ) -> Album:
        """Build the album model and persist its refreshed index."""
        album = build_album(name, folder, sorted_photos)
        self._repo.save(output_dir, index_for(album))
        return album
