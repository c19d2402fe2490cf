"""Folder-scoped Drive listing with page-token pagination."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from drive_gallery.drive.client import DriveApiError, DriveClient
from drive_gallery.drive.models import (
    FIELD_MIME_TYPE,
    FIELD_NAME,
    FIELD_TRASHED,
    RESPONSE_FILES,
    RESPONSE_NEXT_PAGE_TOKEN,
    DriveFile,
    FolderRef,
    is_media_mime,
)

if TYPE_CHECKING:
    from drive_gallery.config import AppConfig

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 1000
LIST_FIELDS = "files(id,name,mimeType,thumbnailLink,createdTime),nextPageToken"
FOLDER_FIELDS = "id,name"


def media_query(folder_id: str) -> str:
    """Return the ``q`` expression selecting non-trashed images and videos in a folder."""
    return (
        f"'{folder_id}' in parents and trashed=false"
        " and (mimeType contains 'image/' or mimeType contains 'video/')"
    )


class FileLister:
    """Lists media files and resolves folder names through the Drive API."""

    def __init__(self, client: DriveClient, page_size: int = MAX_PAGE_SIZE) -> None:
        self._client = client
        self._page_size = min(page_size, MAX_PAGE_SIZE)

    def list_params(self, folder_id: str, page_token: str | None = None) -> dict[str, str]:
        """Build the ``files.list`` query parameters for one page."""
        params = {
            "q": media_query(folder_id),
            "fields": LIST_FIELDS,
            "pageSize": str(self._page_size),
            "supportsAllDrives": "true",
            "includeItemsFromAllDrives": "true",
        }
        if page_token:
            params["pageToken"] = page_token
        return params

    def list_files(self, folder_id: str) -> list[DriveFile]:
        """Fetch every image and video record in a folder, across all pages.

        Pages are requested sequentially, each with the previous response's
        ``nextPageToken``, until a response carries no token. Records keep
        the order the API returned them in.

        Args:
            folder_id: Drive id of the folder to list.

        Returns:
            All matching DriveFile records.

        Raises:
            DriveApiError: On the first non-2xx response.
        """
        files: list[DriveFile] = []
        page_token: str | None = None
        pages = 0
        while True:
            response = self._client.get("/files", self.list_params(folder_id, page_token))
            pages += 1
            for raw in response.get(RESPONSE_FILES, []):
                if raw.get(FIELD_TRASHED) or not is_media_mime(raw.get(FIELD_MIME_TYPE, "")):
                    logger.debug(
                        "[list_files] skipping non-media record; folder_id:%s;name:%s",
                        folder_id,
                        raw.get(FIELD_NAME, ""),
                    )
                    continue
                files.append(DriveFile.from_api(raw))

            page_token = response.get(RESPONSE_NEXT_PAGE_TOKEN) or None
            if page_token is None:
                break

        logger.info(
            "[list_files] listed folder; folder_id:%s;page_count:%d;file_count:%d",
            folder_id,
            pages,
            len(files),
        )
        return files

    def resolve_folder(self, ref: FolderRef) -> FolderRef:
        """Return ``ref`` with its name populated, fetching it from Drive if missing.

        Raises:
            DriveApiError: If the metadata lookup fails; the error names the folder.
        """
        if ref.name:
            return ref
        params = {"fields": FOLDER_FIELDS, "supportsAllDrives": "true"}
        try:
            response = self._client.get(f"/files/{ref.id}", params)
        except DriveApiError as exc:
            raise DriveApiError(
                exc.status_code, exc.url, exc.body, context=f"folder {ref.id} lookup failed"
            ) from exc
        name = response.get(FIELD_NAME) or ref.id
        logger.info("[resolve_folder] resolved folder name; folder_id:%s;name:%s", ref.id, name)
        return FolderRef(id=ref.id, name=name)


def file_lister_from_config(client: DriveClient, config: AppConfig) -> FileLister:
    """Construct a FileLister from application configuration."""
    return FileLister(client=client, page_size=config.page_size)
