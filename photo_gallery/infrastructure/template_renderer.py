"""HTML/CSS rendering of albums with Jinja2."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    select_autoescape,
)
from loguru import logger

from photo_gallery.core.errors import GalleryIOError, RenderError
from photo_gallery.core.models import Album, PhotoItem
from photo_gallery.infrastructure.settings import GalleryConfig
from photo_gallery.infrastructure.utils import write_atomic

TEMPLATES_DIR = Path(__file__).parent / "templates"


def is_same_month(photos: Sequence[PhotoItem], idx: int) -> bool:
    """Return True when photo `idx` was shot in the same month as the previous one."""
    if idx <= 0 or idx >= len(photos):
        return False
    left = photos[idx - 1].shooting_date
    right = photos[idx].shooting_date
    if left is None or right is None:
        return left is None and right is None
    return (left.year, left.month) == (right.year, right.month)


def album_cover(album: Album) -> str:
    """Thumbnail URL of the album cover, relative to the gallery root."""
    cover = album.cover or (album.photos[0] if album.photos else None)
    if cover is None:
        return ""
    return f"{album.folder}/{cover.thumbnail_path}"


@dataclass(frozen=True)
class _Page:
    template: str
    file_name: str


ALBUM_PAGES = (_Page("album.html.j2", "index.html"), _Page("album.css.j2", "index.css"))
ROOT_PAGES = (_Page("index.html.j2", "index.html"), _Page("index.css.j2", "index.css"))


class TemplateRenderer:
    """Renders album pages and the root album list."""

    def __init__(self, config: GalleryConfig, templates_dir: str | Path | None = None) -> None:
        self._config = config
        self._env = Environment(
            loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
            autoescape=select_autoescape(enabled_extensions=("html", "html.j2")),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        self._env.globals["is_same_month"] = is_same_month
        self._env.globals["album_cover"] = album_cover

    def render_album(self, album: Album, output_dir: str | Path) -> list[Path]:
        """Write `index.html` and `index.css` for `album` into `output_dir`."""
        return self._render(ALBUM_PAGES, Path(output_dir), config=self._config, album=album)

    def render_index(self, albums: Sequence[Album], output_dir: str | Path) -> list[Path]:
        """Write the root page listing `albums` into `output_dir`."""
        return self._render(ROOT_PAGES, Path(output_dir), config=self._config, albums=albums)

    def _render(self, pages: Sequence[_Page], output_dir: Path, **context: Any) -> list[Path]:
        written: list[Path] = []
        for page in pages:
            target = output_dir / page.file_name
            try:
                text = self._env.get_template(page.template).render(**context)
            except TemplateError as ex:
                raise RenderError(target, f"cannot render {page.template}: {ex}") from ex
            try:
                write_atomic(target, text.encode("utf-8"))
            except OSError as ex:
                raise GalleryIOError(target, f"cannot write page: {ex}") from ex
            written.append(target)
        logger.debug("Rendered {}", ", ".join(str(p) for p in written))
        return written
