from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path

from loguru import logger

from photo_gallery.app.gallery import GalleryGenerator
from photo_gallery.core.errors import GalleryError
from photo_gallery.infrastructure.logging import find_latest_log_file, init_logging
from photo_gallery.infrastructure.settings import GalleryConfig, JsonSettings

__version__ = "0.1.0"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="photo-gallery",
        description="Generate a static photo gallery, reusing work from previous runs.",
    )
    parser.add_argument("photos_dir", type=Path, help="Folder holding the photos (or albums).")
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("settings.json"),
        help="Path to the JSON settings file.",
    )
    parser.add_argument(
        "--parallel",
        type=int,
        default=None,
        help="Number of parallel workers when generating photos.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Write the gallery here instead of into the photos folder.",
    )
    parser.add_argument("--log-dir", type=Path, default=None, help="Also log to files here.")
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> GalleryConfig:
    """Build the configuration from the settings file and CLI overrides."""
    config = GalleryConfig.from_settings(JsonSettings(args.config))
    overrides: dict[str, object] = {}
    if args.parallel is not None:
        if args.parallel <= 0:
            raise ValueError("--parallel must be a positive integer")
        overrides["parallel"] = args.parallel
    if args.output_dir is not None:
        overrides["output_dir"] = args.output_dir
    if args.log_dir is not None:
        overrides["log_dir"] = args.log_dir
    return replace(config, **overrides) if overrides else config


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    init_logging(args.log_dir)
    logger.info("running photo-gallery {}", __version__)

    try:
        config = load_config(args)
    except (FileNotFoundError, ValueError, GalleryError) as ex:
        logger.error("error while reading config: {}", ex)
        return 2
    init_logging(config.log_dir, level=config.log_level)

    try:
        result = GalleryGenerator(config).generate(args.photos_dir)
    except GalleryError as ex:
        logger.error("error while generating gallery: {}", ex)
        return 1

    for name, ex in result.failures:
        logger.error("album '{}' not generated: {}", name, ex)
    if config.log_dir is not None:
        logger.info("log file: {}", find_latest_log_file(config.log_dir))
    if not result.ok:
        return 1
    logger.info("successfully generated {} album(s)", len(result.albums))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
