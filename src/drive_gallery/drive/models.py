"""Data models for Google Drive file records and manifest items."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Drive API JSON field names
FIELD_ID = "id"
FIELD_NAME = "name"
FIELD_MIME_TYPE = "mimeType"
FIELD_THUMBNAIL_LINK = "thumbnailLink"
FIELD_CREATED_TIME = "createdTime"
FIELD_TRASHED = "trashed"

# Drive list response keys
RESPONSE_FILES = "files"
RESPONSE_NEXT_PAGE_TOKEN = "nextPageToken"

# Manifest-only field names
FIELD_FOLDER_ID = "folderId"
FIELD_THUMB = "thumb"
FIELD_URL_VIEW = "url_view"
FIELD_URL_DL = "url_dl"

IMAGE_PREFIX = "image/"
VIDEO_PREFIX = "video/"


def is_video_mime(mime_type: str) -> bool:
    return mime_type.startswith(VIDEO_PREFIX)


def is_media_mime(mime_type: str) -> bool:
    return mime_type.startswith(IMAGE_PREFIX) or is_video_mime(mime_type)


@dataclass(frozen=True)
class FolderRef:
    """A source folder; ``name`` is looked up from Drive when missing."""

    id: str
    name: str | None = None

    def to_dict(self) -> dict[str, str]:
        data = {FIELD_ID: self.id}
        if self.name:
            data[FIELD_NAME] = self.name
        return data


@dataclass(frozen=True)
class DriveFile:
    """A single file as returned by the Drive ``files.list`` endpoint."""

    id: str
    name: str
    mime_type: str
    thumbnail_link: str | None = None
    created_time: str | None = None

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> DriveFile:
        """Map a raw Drive API file dict to a DriveFile."""
        return cls(
            id=raw.get(FIELD_ID, ""),
            name=raw.get(FIELD_NAME, ""),
            mime_type=raw.get(FIELD_MIME_TYPE, ""),
            thumbnail_link=raw.get(FIELD_THUMBNAIL_LINK) or None,
            created_time=raw.get(FIELD_CREATED_TIME) or None,
        )


@dataclass(frozen=True)
class MediaItem:
    """One display-ready entry of the media manifest.

    Attributes:
        id: Drive file id, unique within a manifest.
        name: File name.
        mime_type: MIME type; ``video/*`` items render as video.
        folder_id: Id of the folder the file was listed from.
        thumb: Preview image URL.
        url_view: Full-size image URL, or an embeddable player for video.
        url_dl: Direct download URL.
        created_time: ISO 8601 creation timestamp, when Drive reported one.
    """

    id: str
    name: str
    mime_type: str
    folder_id: str
    thumb: str
    url_view: str
    url_dl: str
    created_time: str | None = None

    @property
    def is_video(self) -> bool:
        return is_video_mime(self.mime_type)

    def to_dict(self) -> dict[str, str]:
        """Serialize using the manifest's JSON field names."""
        data = {
            FIELD_ID: self.id,
            FIELD_NAME: self.name,
            FIELD_MIME_TYPE: self.mime_type,
        }
        if self.created_time:
            data[FIELD_CREATED_TIME] = self.created_time
        data[FIELD_FOLDER_ID] = self.folder_id
        data[FIELD_THUMB] = self.thumb
        data[FIELD_URL_VIEW] = self.url_view
        data[FIELD_URL_DL] = self.url_dl
        return data

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> MediaItem:
        """Parse a manifest entry; raises KeyError when a required field is absent."""
        return cls(
            id=raw[FIELD_ID],
            name=raw.get(FIELD_NAME, ""),
            mime_type=raw[FIELD_MIME_TYPE],
            folder_id=raw.get(FIELD_FOLDER_ID, ""),
            thumb=raw.get(FIELD_THUMB, ""),
            url_view=raw.get(FIELD_URL_VIEW, ""),
            url_dl=raw.get(FIELD_URL_DL, ""),
            created_time=raw.get(FIELD_CREATED_TIME) or None,
        )


def unique_folders(folders: list[FolderRef]) -> list[FolderRef]:
    """Drop repeated folder ids, keeping the first occurrence and the order."""
    seen: set[str] = set()
    unique: list[FolderRef] = []
    for folder in folders:
        if folder.id not in seen:
            seen.add(folder.id)
            unique.append(folder)
    return unique
