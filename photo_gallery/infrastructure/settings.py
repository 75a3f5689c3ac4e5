"""Settings access helpers for JSON-based configuration."""

from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
from typing import Any

from photo_gallery.core.errors import ConfigError


class JsonSettings:
    """Lightweight JSON settings reader with dotted-key access."""

    def __init__(self, settings_path: str | Path) -> None:
        self._path = Path(settings_path)
        if not self._path.exists():
            raise FileNotFoundError(f"settings file not found: {self._path}")
        with self._path.open("r", encoding="utf-8") as f:
            try:
                self._data = json.load(f)
            except json.JSONDecodeError as ex:
                raise ConfigError(self._path, f"invalid JSON: {ex}") from ex
        if not isinstance(self._data, dict):
            raise ConfigError(self._path, "top-level value must be an object")

    @property
    def path(self) -> Path:
        return self._path

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str | Path = "<memory>") -> JsonSettings:
        """Build settings from an in-memory mapping (tests, defaults)."""
        inst = cls.__new__(cls)
        inst._path = Path(path)
        inst._data = dict(data)
        return inst

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return value for dotted `key`, or `default` if not present."""
        parts = key.split(".")
        node: Any = self._data
        for part in parts:
            if isinstance(node, dict) and part in node:
                node = node[part]
            else:
                return default
        return node


SORT_ASC = "asc"
SORT_DESC = "desc"

# Severity names loguru knows out of the box.
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class GalleryConfig:
    """Validated, immutable configuration handed to every pipeline component."""

    title: str = "Gallery"
    url: str = ""
    cover_url: str = ""
    bg_color: str = "#ffffff"
    font_color: str = "#000000"
    border_size: str = "2px"
    thumbnail_max_size: int = 400
    month_separator: bool = False
    enable_albums: bool = False
    photos_sorting: str = SORT_DESC
    parallel: int = 4
    album_parallel: int = 2
    output_dir: Path | None = None
    send_to_trash: bool = False
    log_dir: Path | None = None
    log_level: str = "INFO"

    @property
    def ascending(self) -> bool:
        return self.photos_sorting == SORT_ASC

    @classmethod
    def from_settings(cls, settings: JsonSettings) -> GalleryConfig:
        """Read and validate all recognized keys from `settings`."""
        source = settings.path
        sorting = str(settings.get("photos_sorting", SORT_DESC) or SORT_DESC).lower()
        if sorting not in (SORT_ASC, SORT_DESC):
            raise ConfigError(source, f"photos_sorting must be 'asc' or 'desc', got {sorting!r}")
        log_level = str(settings.get("logging.level", cls.log_level)).upper()
        if log_level not in LOG_LEVELS:
            raise ConfigError(
                source, f"logging.level must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}"
            )

        output_dir = settings.get("output_dir")
        log_dir = settings.get("logging.dir")
        return cls(
            title=str(settings.get("title", cls.title)),
            url=str(settings.get("url", cls.url)),
            cover_url=str(settings.get("cover_url", cls.cover_url)),
            bg_color=str(settings.get("bg_color", cls.bg_color)),
            font_color=str(settings.get("font_color", cls.font_color)),
            border_size=str(settings.get("border_size", cls.border_size)),
            thumbnail_max_size=_positive_int(
                settings.get("thumbnail_max_size", cls.thumbnail_max_size),
                "thumbnail_max_size",
                source,
            ),
            month_separator=bool(settings.get("month_separator", False)),
            enable_albums=bool(settings.get("enable_albums", False)),
            photos_sorting=sorting,
            parallel=_positive_int(settings.get("parallel", cls.parallel), "parallel", source),
            album_parallel=_positive_int(
                settings.get("album_parallel", cls.album_parallel), "album_parallel", source
            ),
            output_dir=Path(output_dir) if output_dir else None,
            send_to_trash=bool(settings.get("reconcile.send_to_trash", False)),
            log_dir=Path(log_dir) if log_dir else None,
            log_level=log_level,
        )


def _positive_int(value: Any, key: str, source: Path) -> int:
    """Coerce `value` to a positive int or raise `ConfigError` naming `key`."""
    if isinstance(value, bool):
        raise ConfigError(source, f"{key} must be a positive integer, got {value!r}")
    try:
        result = int(value)
    except (ValueError, TypeError) as ex:
        raise ConfigError(source, f"{key} must be a positive integer, got {value!r}") from ex
    if result <= 0:
        raise ConfigError(source, f"{key} must be a positive integer, got {value!r}")
    return result
