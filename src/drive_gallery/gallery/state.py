"""Gallery view state derived from the media and folder manifests.

The browser front-end renders from this same data; this module holds the
non-DOM rules (loading, folder filtering, status messages, previews) as
an explicit state object instead of module-level globals.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from drive_gallery.drive.models import FIELD_ID, FIELD_NAME, FolderRef, MediaItem

logger = logging.getLogger(__name__)

STATUS_LOAD_FAILED = "Failed to load media.json"
STATUS_NO_MEDIA = "No media found. Ensure the Drive folder is public."
STATUS_EMPTY_FOLDER = "No media in this folder."


class RenderLoadError(Exception):
    """Raised when a manifest cannot be read or is not a JSON array."""


@dataclass(frozen=True)
class Preview:
    """What the lightbox shows for one item."""

    kind: str
    src: str
    download: str
    title: str


@dataclass
class GalleryState:
    """Loaded manifests plus the current folder selection."""

    media: list[MediaItem] = field(default_factory=list)
    folders: list[FolderRef] = field(default_factory=list)
    current_folder_id: str | None = None
    status: str = ""

    def select_folder(self, folder_id: str | None) -> None:
        self.current_folder_id = folder_id
        self.refresh_status()

    def visible_items(self) -> list[MediaItem]:
        if self.current_folder_id is None:
            return list(self.media)
        return [item for item in self.media if item.folder_id == self.current_folder_id]

    def refresh_status(self) -> None:
        if not self.media:
            self.status = STATUS_NO_MEDIA
        elif not self.visible_items():
            self.status = STATUS_EMPTY_FOLDER
        else:
            self.status = ""


def preview_for(item: MediaItem) -> Preview:
    """Videos play their embeddable ``url_view``; images show the large thumbnail."""
    if item.is_video:
        return Preview(kind="video", src=item.url_view, download=item.url_dl, title=item.name)
    return Preview(kind="image", src=item.thumb, download=item.url_dl, title=item.name)


def _read_json_array(path: Path) -> list[Any]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise RenderLoadError(f"Could not load {path}: {exc}") from exc
    if not isinstance(raw, list):
        raise RenderLoadError(f"{path} is not a JSON array")
    return raw


def read_manifest(path: str | Path) -> list[MediaItem]:
    """Parse a media manifest.

    Raises:
        RenderLoadError: If the file is unreadable, not a JSON array, or an
            entry lacks ``id`` or ``mimeType``.
    """
    entries = _read_json_array(Path(path))
    try:
        return [MediaItem.from_dict(entry) for entry in entries]
    except (KeyError, TypeError, AttributeError) as exc:
        raise RenderLoadError(f"{path} has an invalid entry: {exc}") from exc


def read_folders(path: str | Path) -> list[FolderRef]:
    """Parse a folder list; entries without an id are skipped."""
    refs: list[FolderRef] = []
    for entry in _read_json_array(Path(path)):
        if isinstance(entry, dict) and entry.get(FIELD_ID):
            refs.append(FolderRef(id=str(entry[FIELD_ID]), name=entry.get(FIELD_NAME) or None))
    return refs


def load_gallery(media_path: str | Path, folders_path: str | Path | None = None) -> GalleryState:
    """Load the manifests into a GalleryState.

    Load failures never raise; they surface as ``status``. The first folder
    in the folder list, when one is given, becomes the initial selection.

    Args:
        media_path: Path of ``media.json``.
        folders_path: Optional path of ``folders.json``.

    Returns:
        Ready-to-render GalleryState.
    """
    state = GalleryState()
    try:
        state.media = read_manifest(media_path)
        if folders_path is not None:
            state.folders = read_folders(folders_path)
    except RenderLoadError:
        logger.error("[load_gallery] failed to load manifests", exc_info=True)
        state.media = []
        state.folders = []
        state.status = STATUS_LOAD_FAILED
        return state

    if not state.media:
        state.status = STATUS_NO_MEDIA
        return state

    state.select_folder(state.folders[0].id if state.folders else None)
    return state
