"""Gallery generation across one or many albums."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from photo_gallery.app.album_pipeline import AlbumPipeline
from photo_gallery.core.errors import GalleryError, GalleryIOError
from photo_gallery.core.models import Album
from photo_gallery.infrastructure.settings import GalleryConfig
from photo_gallery.infrastructure.template_renderer import TemplateRenderer
from photo_gallery.infrastructure.utils import THUMBNAILS_DIR_NAME


@dataclass
class GalleryResult:
    """Albums generated by a run and the albums that failed.

    Attributes:
        albums: Generated albums holding at least one photo, in folder order.
        failures: Tuples of (album name, error) for albums that failed.
    """

    albums: list[Album] = field(default_factory=list)
    failures: list[tuple[str, GalleryError]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class GalleryGenerator:
    """Generates a single album or, in album mode, one album per subfolder."""

    def __init__(
        self,
        config: GalleryConfig,
        pipeline: AlbumPipeline | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self._config = config
        self._renderer = renderer or TemplateRenderer(config)
        self._pipeline = pipeline or AlbumPipeline(config, renderer=self._renderer)

    def discover_albums(self, photos_dir: str | Path) -> list[Path]:
        """Return the top-level album folders of `photos_dir`, sorted by name."""
        root = Path(photos_dir)
        try:
            entries = sorted(root.iterdir(), key=lambda p: p.name)
        except OSError as ex:
            raise GalleryIOError(root, f"cannot list directory: {ex}") from ex
        return [
            p
            for p in entries
            if p.is_dir() and p.name != THUMBNAILS_DIR_NAME and not p.name.startswith(".")
        ]

    def generate(self, photos_dir: str | Path) -> GalleryResult:
        """Generate the gallery for `photos_dir`.

        Raises:
            GalleryIOError: `photos_dir` is not a directory.
        """
        root = Path(photos_dir)
        if not root.is_dir():
            raise GalleryIOError(root, "directory does not exist")
        output_root = self._config.output_dir or root

        if not self._config.enable_albums:
            result = GalleryResult()
            try:
                result.albums.append(self._pipeline.run(root, output_root, self._config.title))
            except GalleryError as ex:
                logger.error("Album '{}' failed: {}", self._config.title, ex)
                result.failures.append((self._config.title, ex))
            return result

        result = self._generate_albums(root, Path(output_root))
        self._renderer.render_index(result.albums, output_root)
        logger.info("Gallery index written for {} albums", len(result.albums))
        return result

    def _generate_albums(self, root: Path, output_root: Path) -> GalleryResult:
        folders = [p for p in self.discover_albums(root) if not _is_output_root(p, output_root)]
        result = GalleryResult()
        with ThreadPoolExecutor(
            max_workers=self._config.album_parallel, thread_name_prefix="album"
        ) as executor:
            futures = [
                (
                    folder.name,
                    executor.submit(
                        self._pipeline.run, folder, output_root / folder.name, folder.name
                    ),
                )
                for folder in folders
            ]
            for name, future in futures:
                try:
                    album = future.result()
                except GalleryError as ex:
                    logger.error("Album '{}' failed: {}", name, ex)
                    result.failures.append((name, ex))
                    continue
                if album.photos:
                    result.albums.append(album)
                else:
                    logger.info("Album '{}' has no photos, skipped", name)
        return result


def _is_output_root(folder: Path, output_root: Path) -> bool:
    """True when `folder` is the configured output root nested in the photos dir."""
    try:
        return folder.resolve() == output_root.resolve()
    except OSError:
        return False
