"""Tests for stale artifact removal."""

from __future__ import annotations

from pathlib import Path

import pytest

from photo_gallery.core.models import AlbumIndex, PhotoItem
from photo_gallery.infrastructure import reconcile_service
from photo_gallery.infrastructure.reconcile_service import ReconcileService


def _item(title: str) -> PhotoItem:
    return PhotoItem(
        title=title, photo_path=title, thumbnail_path=f"thumbnails/{title}", checksum="x"
    )


def _artifacts(root: Path, title: str) -> tuple[Path, Path]:
    thumb = root / "thumbnails" / title
    copy = root / title
    thumb.parent.mkdir(parents=True, exist_ok=True)
    thumb.write_bytes(b"thumb")
    copy.write_bytes(b"copy")
    return thumb, copy


def test_plan_lists_only_missing_titles():
    previous = AlbumIndex(photos=[_item("a.jpg"), _item("b.jpg")])
    stale = ReconcileService().plan(previous, [_item("a.jpg"), _item("c.jpg")])
    assert [p.title for p in stale] == ["b.jpg"]


def test_removes_thumbnail_and_copy_of_stale_photo(tmp_path):
    kept_thumb, kept_copy = _artifacts(tmp_path, "a.jpg")
    gone_thumb, gone_copy = _artifacts(tmp_path, "b.jpg")
    previous = AlbumIndex(photos=[_item("a.jpg"), _item("b.jpg")])

    result = ReconcileService().reconcile(previous, [_item("a.jpg")], tmp_path, copies_enabled=True)

    assert result.deleted == ["b.jpg"]
    assert result.failed == []
    assert not gone_thumb.exists() and not gone_copy.exists()
    assert kept_thumb.exists() and kept_copy.exists()


def test_in_place_albums_never_touch_photo_paths(tmp_path):
    thumb, photo = _artifacts(tmp_path, "b.jpg")
    previous = AlbumIndex(photos=[_item("b.jpg")])

    result = ReconcileService().reconcile(previous, [], tmp_path, copies_enabled=False)

    assert result.deleted == ["b.jpg"]
    assert not thumb.exists()
    assert photo.exists()


def test_already_missing_artifacts_are_fine(tmp_path):
    previous = AlbumIndex(photos=[_item("b.jpg")])
    result = ReconcileService().reconcile(previous, [], tmp_path, copies_enabled=True)
    assert result.deleted == ["b.jpg"]
    assert result.failed == []


def test_delete_failures_are_reported_not_raised(tmp_path, monkeypatch):
    thumb, _ = _artifacts(tmp_path, "b.jpg")

    def broken_unlink(self, missing_ok=False):
        raise PermissionError("read-only")

    monkeypatch.setattr(Path, "unlink", broken_unlink)
    result = ReconcileService().reconcile(
        AlbumIndex(photos=[_item("b.jpg")]), [], tmp_path, copies_enabled=True
    )

    assert result.deleted == []
    assert [path for path, _ in result.failed] == [str(thumb), str(tmp_path / "b.jpg")]
    assert thumb.exists()


def test_send_to_trash_uses_recycle_bin(tmp_path, monkeypatch):
    thumb, copy = _artifacts(tmp_path, "b.jpg")
    trashed: list[str] = []
    monkeypatch.setattr(reconcile_service, "send2trash", trashed.append)

    result = ReconcileService(send_to_trash=True).reconcile(
        AlbumIndex(photos=[_item("b.jpg")]), [], tmp_path, copies_enabled=True
    )

    assert result.deleted == ["b.jpg"]
    assert [Path(p) for p in trashed] == [thumb, copy]


def test_in_place_thumbnail_path_pointing_at_a_source_is_kept(tmp_path):
    live = tmp_path / "keep.jpg"
    live.write_bytes(b"photo")
    entry = PhotoItem(
        title="gone.jpg", photo_path="gone.jpg", thumbnail_path="keep.jpg", checksum="x"
    )

    result = ReconcileService().reconcile(
        AlbumIndex(photos=[entry]), [], tmp_path, copies_enabled=False, source_dir=tmp_path
    )

    assert live.read_bytes() == b"photo"
    assert result.deleted == []
    assert [path for path, _ in result.failed] == [str(tmp_path / "keep.jpg")]


@pytest.mark.parametrize("rel", ["../outside.jpg", "thumbnails/../../outside.jpg", "thumbnails"])
def test_paths_escaping_the_output_folder_are_kept(tmp_path, rel):
    output = tmp_path / "out"
    (output / "thumbnails").mkdir(parents=True)
    outside = tmp_path / "outside.jpg"
    outside.write_bytes(b"photo")
    entry = PhotoItem(title="gone.jpg", photo_path=rel, thumbnail_path=rel, checksum="x")

    result = ReconcileService().reconcile(
        AlbumIndex(photos=[entry]), [], output, copies_enabled=True
    )

    assert outside.exists()
    assert (output / "thumbnails").is_dir()
    assert result.deleted == []
    assert len(result.failed) == 2


def test_absolute_index_paths_are_kept(tmp_path):
    output = tmp_path / "out"
    output.mkdir()
    victim = tmp_path / "victim.jpg"
    victim.write_bytes(b"photo")
    entry = PhotoItem(
        title="gone.jpg", photo_path=str(victim), thumbnail_path=str(victim), checksum="x"
    )

    result = ReconcileService().reconcile(
        AlbumIndex(photos=[entry]), [], output, copies_enabled=True
    )

    assert victim.exists()
    assert result.deleted == []


def test_copy_inside_photos_folder_is_kept(tmp_path):
    source = tmp_path / "photos"
    output = tmp_path
    source.mkdir()
    original = source / "b.jpg"
    original.write_bytes(b"photo")
    entry = PhotoItem(
        title="b.jpg", photo_path="photos/b.jpg", thumbnail_path="thumbnails/b.jpg", checksum="x"
    )

    result = ReconcileService().reconcile(
        AlbumIndex(photos=[entry]), [], output, copies_enabled=True, source_dir=source
    )

    assert original.exists()
    assert [path for path, _ in result.failed] == [str(output / "photos" / "b.jpg")]
