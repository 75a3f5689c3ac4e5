"""Shared fixtures: synthetic JPEGs and a small gallery configuration."""

from __future__ import annotations

from datetime import datetime
import io
from pathlib import Path
import threading
import time

from PIL import Image
import pytest

from photo_gallery.core.errors import DecodeError
from photo_gallery.infrastructure.image_service import ImageProcessor, ProcessedImage
from photo_gallery.infrastructure.settings import GalleryConfig


def jpeg_bytes(
    size: tuple[int, int] = (64, 48),
    color: tuple[int, int, int] = (200, 30, 30),
    shooting_date: str | None = None,
) -> bytes:
    """Encode a solid-color JPEG, optionally with an EXIF DateTimeOriginal."""
    img = Image.new("RGB", size, color=color)
    buf = io.BytesIO()
    if shooting_date is not None:
        exif = Image.Exif()
        exif[36867] = shooting_date
        img.save(buf, format="JPEG", exif=exif.tobytes())
    else:
        img.save(buf, format="JPEG")
    return buf.getvalue()


def make_jpeg(path: Path, **kwargs) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(jpeg_bytes(**kwargs))
    return path


class CountingProcessor(ImageProcessor):
    """Real processor that records which photos it decoded."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def process(self, raw: bytes, max_side: int, name: str = "<bytes>") -> ProcessedImage:
        with self._lock:
            self.calls.append(Path(name).name)
        return super().process(raw, max_side, name=name)


class FakeProcessor:
    """Processor stub that tracks concurrency and can fail on given names."""

    def __init__(self, delay: float = 0.0, fail_on: tuple[str, ...] = ()) -> None:
        self.delay = delay
        self.fail_on = fail_on
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def process(self, raw: bytes, max_side: int, name: str = "<bytes>") -> ProcessedImage:
        title = Path(name).name
        with self._lock:
            self.calls.append(title)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            time.sleep(self.delay)
            if title in self.fail_on:
                raise DecodeError(name, "cannot decode image: broken")
            return ProcessedImage(thumbnail=b"thumb:" + raw, shooting_date=None)
        finally:
            with self._lock:
                self.in_flight -= 1


@pytest.fixture
def config() -> GalleryConfig:
    return GalleryConfig(title="Holidays", thumbnail_max_size=32, parallel=4)


@pytest.fixture
def photos_dir(tmp_path: Path) -> Path:
    """An album folder with two dated photos and one undated photo."""
    root = tmp_path / "photos"
    make_jpeg(root / "a.jpg", color=(10, 20, 30), shooting_date="2023:01:02 10:00:00")
    make_jpeg(root / "b.JPG", color=(40, 50, 60), shooting_date="2023:01:01 10:00:00")
    make_jpeg(root / "c.jpeg", color=(70, 80, 90))
    return root


def dt(text: str) -> datetime:
    return datetime.fromisoformat(text)
