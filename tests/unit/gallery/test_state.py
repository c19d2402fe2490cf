"""Unit tests for gallery/state.py — manifest loading, filtering and previews."""

import json
from pathlib import Path

import pytest

from drive_gallery.drive.models import FolderRef, MediaItem
from drive_gallery.gallery.state import (
    STATUS_EMPTY_FOLDER,
    STATUS_LOAD_FAILED,
    STATUS_NO_MEDIA,
    GalleryState,
    RenderLoadError,
    load_gallery,
    preview_for,
    read_manifest,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _entry(id: str, folder_id: str, mime: str = "image/jpeg") -> dict[str, str]:
    return {
        "id": id,
        "name": f"{id}.bin",
        "mimeType": mime,
        "folderId": folder_id,
        "thumb": f"https://thumb/{id}",
        "url_view": f"https://view/{id}",
        "url_dl": f"https://dl/{id}",
    }


def _write(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# load_gallery tests
# ---------------------------------------------------------------------------


class TestLoadGallery:
    def test_missing_manifest_sets_failure_status(self, tmp_path: Path) -> None:
        state = load_gallery(tmp_path / "media.json")
        assert state.status == STATUS_LOAD_FAILED
        assert state.media == []

    def test_invalid_json_sets_failure_status(self, tmp_path: Path) -> None:
        media = tmp_path / "media.json"
        media.write_text("<html>404</html>")
        assert load_gallery(media).status == STATUS_LOAD_FAILED

    def test_unreadable_folder_list_sets_failure_status(self, tmp_path: Path) -> None:
        media = _write(tmp_path / "media.json", [_entry("a", "F1")])
        state = load_gallery(media, tmp_path / "folders.json")
        assert state.status == STATUS_LOAD_FAILED

    def test_empty_manifest_sets_no_media_status(self, tmp_path: Path) -> None:
        media = _write(tmp_path / "media.json", [])
        assert load_gallery(media).status == STATUS_NO_MEDIA

    def test_without_folder_list_shows_everything(self, tmp_path: Path) -> None:
        media = _write(tmp_path / "media.json", [_entry("a", "F1"), _entry("b", "F2")])

        state = load_gallery(media)

        assert state.current_folder_id is None
        assert [i.id for i in state.visible_items()] == ["a", "b"]
        assert state.status == ""

    def test_first_folder_is_selected_initially(self, tmp_path: Path) -> None:
        media = _write(tmp_path / "media.json", [_entry("a", "F1"), _entry("b", "F2")])
        folders = _write(tmp_path / "folders.json", [{"id": "F2", "name": "Two"}, {"id": "F1"}])

        state = load_gallery(media, folders)

        assert state.current_folder_id == "F2"
        assert [i.id for i in state.visible_items()] == ["b"]
        assert state.folders == [FolderRef(id="F2", name="Two"), FolderRef(id="F1")]


# ---------------------------------------------------------------------------
# GalleryState tests
# ---------------------------------------------------------------------------


class TestGalleryState:
    def _state(self) -> GalleryState:
        media = [MediaItem.from_dict(_entry("a", "F1")), MediaItem.from_dict(_entry("b", "F2"))]
        return GalleryState(media=media, folders=[FolderRef(id="F1"), FolderRef(id="F3")])

    def test_select_folder_filters_items(self) -> None:
        state = self._state()
        state.select_folder("F1")
        assert [i.id for i in state.visible_items()] == ["a"]
        assert state.status == ""

    def test_empty_folder_sets_status(self) -> None:
        state = self._state()
        state.select_folder("F3")
        assert state.visible_items() == []
        assert state.status == STATUS_EMPTY_FOLDER

    def test_clearing_selection_shows_all(self) -> None:
        state = self._state()
        state.select_folder("F3")
        state.select_folder(None)
        assert len(state.visible_items()) == 2
        assert state.status == ""


# ---------------------------------------------------------------------------
# Previews and parsing
# ---------------------------------------------------------------------------


class TestPreview:
    def test_video_preview_uses_view_url(self) -> None:
        item = MediaItem.from_dict(_entry("v", "F1", mime="video/mp4"))
        preview = preview_for(item)
        assert item.is_video
        assert preview.kind == "video"
        assert preview.src == "https://view/v"
        assert preview.download == "https://dl/v"

    def test_image_preview_uses_thumbnail(self) -> None:
        item = MediaItem.from_dict(_entry("i", "F1"))
        preview = preview_for(item)
        assert not item.is_video
        assert preview.kind == "image"
        assert preview.src == "https://thumb/i"


class TestReadManifest:
    def test_rejects_non_array(self, tmp_path: Path) -> None:
        with pytest.raises(RenderLoadError, match="not a JSON array"):
            read_manifest(_write(tmp_path / "media.json", {"files": []}))

    def test_rejects_entry_without_mime_type(self, tmp_path: Path) -> None:
        with pytest.raises(RenderLoadError, match="invalid entry"):
            read_manifest(_write(tmp_path / "media.json", [{"id": "x"}]))
