"""Tests for single-album and multi-album gallery generation."""

from __future__ import annotations

from dataclasses import replace

import pytest

from conftest import make_jpeg

from photo_gallery.app.gallery import GalleryGenerator
from photo_gallery.core.errors import CacheCorruptionError, GalleryIOError
from photo_gallery.infrastructure.index_repository import INDEX_FILE_NAME


@pytest.fixture
def albums_root(tmp_path):
    root = tmp_path / "photos"
    make_jpeg(root / "2022-spain" / "beach.jpg", shooting_date="2022:07:01 09:00:00")
    make_jpeg(root / "2022-spain" / "cover.jpg", shooting_date="2022:07:02 09:00:00")
    make_jpeg(root / "2023-alps" / "peak.jpg")
    (root / "empty").mkdir()
    (root / ".hidden").mkdir()
    make_jpeg(root / "loose.jpg")
    return root


def test_single_album_mode_generates_in_place(config, photos_dir):
    result = GalleryGenerator(config).generate(photos_dir)

    assert result.ok
    [album] = result.albums
    assert album.name == "Holidays"
    assert (photos_dir / "index.html").exists()
    assert (photos_dir / INDEX_FILE_NAME).exists()
    assert (photos_dir / "thumbnails" / "a.jpg").exists()


def test_album_mode_builds_one_album_per_folder(config, albums_root):
    config = replace(config, enable_albums=True)

    result = GalleryGenerator(config).generate(albums_root)

    assert result.ok
    assert [a.name for a in result.albums] == ["2022-spain", "2023-alps"]
    spain = result.albums[0]
    assert spain.cover is not None and spain.cover.title == "cover.jpg"
    assert (albums_root / "2022-spain" / "index.html").exists()
    assert not (albums_root / "thumbnails").exists()

    root_html = (albums_root / "index.html").read_text(encoding="utf-8")
    assert "2022-spain/thumbnails/cover.jpg" in root_html
    assert "2023-alps/thumbnails/peak.jpg" in root_html
    assert "empty/index.html" not in root_html


def test_one_bad_album_does_not_block_the_others(config, albums_root):
    config = replace(config, enable_albums=True)
    (albums_root / "2023-alps" / INDEX_FILE_NAME).write_text("oops", encoding="utf-8")

    result = GalleryGenerator(config).generate(albums_root)

    assert not result.ok
    [(name, error)] = result.failures
    assert name == "2023-alps"
    assert isinstance(error, CacheCorruptionError)
    assert [a.name for a in result.albums] == ["2022-spain"]
    assert (albums_root / "index.html").exists()


def test_separate_output_dir_receives_copies(config, albums_root, tmp_path):
    output = tmp_path / "site"
    config = replace(config, enable_albums=True, output_dir=output)

    result = GalleryGenerator(config).generate(albums_root)

    assert result.ok
    assert (output / "2022-spain" / "beach.jpg").read_bytes() == (
        albums_root / "2022-spain" / "beach.jpg"
    ).read_bytes()
    assert (output / "2022-spain" / "thumbnails" / "beach.jpg").exists()
    assert (output / "index.html").exists()
    assert not (albums_root / "2022-spain" / "thumbnails").exists()


def test_missing_photos_dir_is_an_error(config, tmp_path):
    with pytest.raises(GalleryIOError) as exc_info:
        GalleryGenerator(config).generate(tmp_path / "nope")
    assert "nope" in str(exc_info.value)


def test_discover_albums_skips_thumbnails_and_hidden(config, albums_root):
    (albums_root / "thumbnails").mkdir()
    names = [p.name for p in GalleryGenerator(config).discover_albums(albums_root)]
    assert names == ["2022-spain", "2023-alps", "empty"]
