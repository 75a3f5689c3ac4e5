"""Error types raised by the gallery pipeline.

Every error carries the path of the offending file or directory so the
message shown to the operator always names it.
"""

from __future__ import annotations

from pathlib import Path


class GalleryError(Exception):
    """Base class for all pipeline failures."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class DecodeError(GalleryError):
    """The file is not a decodable JPEG image."""


class MetadataError(GalleryError):
    """Embedded metadata is missing or malformed. Always recovered locally."""


class GalleryIOError(GalleryError):
    """Reading or writing a file failed."""


class CacheCorruptionError(GalleryError):
    """A persisted album index exists but cannot be parsed."""


class ConfigError(GalleryError):
    """A settings value is missing or invalid."""


class RenderError(GalleryError):
    """A page template failed to render."""
