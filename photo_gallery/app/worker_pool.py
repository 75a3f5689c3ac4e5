"""Bounded-concurrency processing of the photos of one album.

The coordinator admits at most `max_concurrency` photos at a time. The first
failing photo cancels the remaining work and fails the whole album: either
every photo is accounted for or the album run raises.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
import threading

from loguru import logger

from photo_gallery.core.errors import GalleryError, GalleryIOError
from photo_gallery.core.models import AlbumIndex, PhotoItem
from photo_gallery.core.services.change_detector import decide
from photo_gallery.infrastructure.image_service import ImageProcessor, is_jpeg_name
from photo_gallery.infrastructure.settings import GalleryConfig
from photo_gallery.infrastructure.utils import THUMBNAILS_DIR_NAME, write_atomic


def same_folder(a: str | Path, b: str | Path) -> bool:
    return Path(a).resolve() == Path(b).resolve()


@dataclass
class _AlbumRun:
    """State shared between the coordinator and the workers of one album."""

    source_dir: Path
    output_dir: Path
    index: AlbumIndex
    copies_enabled: bool
    cancel: threading.Event = field(default_factory=threading.Event)
    lock: threading.Lock = field(default_factory=threading.Lock)
    photos: list[PhotoItem] = field(default_factory=list)
    error: BaseException | None = None

    def add(self, photo: PhotoItem) -> None:
        with self.lock:
            self.photos.append(photo)

    def fail(self, ex: BaseException) -> None:
        """Record the first failure and cancel outstanding work."""
        with self.lock:
            if self.error is None:
                self.error = ex
        self.cancel.set()


class AlbumWorkerPool:
    """Runs change detection and image processing for every photo of an album."""

    def __init__(self, config: GalleryConfig, processor: ImageProcessor | None = None) -> None:
        self._config = config
        self._processor = processor or ImageProcessor()

    def list_photos(self, source_dir: str | Path) -> list[Path]:
        """Return JPEG files directly inside `source_dir`, sorted by name."""
        source = Path(source_dir)
        try:
            entries = sorted(source.iterdir(), key=lambda p: p.name)
        except OSError as ex:
            raise GalleryIOError(source, f"cannot list directory: {ex}") from ex
        return [p for p in entries if p.is_file() and is_jpeg_name(p.name)]

    def run_album(
        self,
        source_dir: str | Path,
        output_dir: str | Path,
        index: AlbumIndex,
        max_concurrency: int | None = None,
    ) -> list[PhotoItem]:
        """Process every photo of `source_dir` into `output_dir`.

        Args:
            source_dir: Folder holding the source photos (not recursed).
            output_dir: Album output folder receiving thumbnails and copies.
            index: Index of the previous run, read-only here.
            max_concurrency: Worker limit; defaults to the configured value.

        Returns:
            The album photos in unspecified order.

        Raises:
            GalleryError: the first decode or I/O failure of any photo.
        """
        limit = max_concurrency or self._config.parallel
        source = Path(source_dir)
        output = Path(output_dir)
        run = _AlbumRun(
            source_dir=source,
            output_dir=output,
            index=index,
            copies_enabled=not same_folder(source, output),
        )

        paths = self.list_photos(source)
        thumbs_dir = output / THUMBNAILS_DIR_NAME
        try:
            thumbs_dir.mkdir(parents=True, exist_ok=True)
        except OSError as ex:
            raise GalleryIOError(thumbs_dir, f"cannot create directory: {ex}") from ex

        slots = threading.BoundedSemaphore(limit)
        with ThreadPoolExecutor(max_workers=limit, thread_name_prefix="photo") as executor:
            for path in paths:
                slots.acquire()
                if run.cancel.is_set():
                    slots.release()
                    break
                try:
                    executor.submit(self._run_unit, path, run, slots)
                except RuntimeError:
                    slots.release()
                    raise

        if run.error is not None:
            raise run.error
        return run.photos

    def _run_unit(self, path: Path, run: _AlbumRun, slots: threading.BoundedSemaphore) -> None:
        try:
            photo = self._process_photo(path, run)
            if photo is not None:
                run.add(photo)
        except GalleryError as ex:
            logger.error("Photo failed: {}", ex)
            run.fail(ex)
        except Exception as ex:  # pylint: disable=broad-exception-caught
            logger.exception("Unexpected failure for {}", path)
            run.fail(ex)
        finally:
            slots.release()

    def _process_photo(self, path: Path, run: _AlbumRun) -> PhotoItem | None:
        """Reuse or (re)process one photo; None when the album was cancelled."""
        if run.cancel.is_set():
            return None
        name = path.name
        try:
            raw = path.read_bytes()
        except OSError as ex:
            raise GalleryIOError(path, f"cannot read photo: {ex}") from ex

        decision = decide(name, raw, run.index)
        if decision.reuse is not None:
            logger.info("[skipping]\t {}", name)
            return decision.reuse

        if run.cancel.is_set():
            return None
        logger.info("[processing]\t {}", name)
        processed = self._processor.process(raw, self._config.thumbnail_max_size, name=str(path))

        if run.cancel.is_set():
            return None
        thumbnail_path = f"{THUMBNAILS_DIR_NAME}/{name}"
        self._write(run.output_dir / thumbnail_path, processed.thumbnail)
        if run.copies_enabled:
            self._write(run.output_dir / name, raw)

        return PhotoItem(
            title=name,
            photo_path=name,
            thumbnail_path=thumbnail_path,
            checksum=decision.checksum,
            shooting_date=processed.shooting_date,
        )

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        try:
            write_atomic(path, data)
        except OSError as ex:
            raise GalleryIOError(path, f"cannot write file: {ex}") from ex
