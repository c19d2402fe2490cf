"""Map Drive file records to manifest items.

Everything here is pure: no I/O, and the same record always yields the
same MediaItem.
"""

from __future__ import annotations

import re
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from drive_gallery.drive.models import DriveFile, MediaItem, is_video_mime

DRIVE_WEB_URL = "https://drive.google.com"

THUMBNAIL_WIDTH_TOKEN = "=w1600"
FALLBACK_THUMBNAIL_WIDTH = "w800"
AUTHUSER_PARAM = ("authuser", "0")
VIEW_PARAM = ("export", "view")

# Size options googleusercontent appends to the path, e.g. "=s220" or "=w400-h300-p".
_SIZE_SUFFIX = re.compile(r"=[swh]\d+(?:-[a-z0-9]+)*$")


def upscale_thumbnail(link: str) -> str:
    """Request a larger rendition of a Drive-provided thumbnail link.

    Any trailing size option on the URL path is replaced by
    ``THUMBNAIL_WIDTH_TOKEN``; the query gains ``authuser=0`` if absent and
    always ends with ``export=view``. Applying this to its own output
    returns the same URL.
    """
    parts = urlsplit(link)
    path = _SIZE_SUFFIX.sub("", parts.path) + THUMBNAIL_WIDTH_TOKEN

    query = [
        (k, v)
        for k, v in parse_qsl(parts.query, keep_blank_values=True)
        if k != VIEW_PARAM[0]
    ]
    if not any(k == AUTHUSER_PARAM[0] for k, _ in query):
        query.append(AUTHUSER_PARAM)
    query.append(VIEW_PARAM)

    return urlunsplit((parts.scheme, parts.netloc, path, urlencode(query), parts.fragment))


def fallback_thumbnail(file_id: str) -> str:
    """Public thumbnail endpoint, used when Drive returns no thumbnailLink."""
    return f"{DRIVE_WEB_URL}/thumbnail?id={file_id}&sz={FALLBACK_THUMBNAIL_WIDTH}"


def view_url(file_id: str, mime_type: str) -> str:
    if is_video_mime(mime_type):
        return f"{DRIVE_WEB_URL}/file/d/{file_id}/preview?autoplay=1"
    return f"{DRIVE_WEB_URL}/uc?export=view&id={file_id}"


def download_url(file_id: str) -> str:
    return f"{DRIVE_WEB_URL}/uc?export=download&id={file_id}"


def thumbnail_url(record: DriveFile) -> str:
    if record.thumbnail_link:
        return upscale_thumbnail(record.thumbnail_link)
    return fallback_thumbnail(record.id)


def to_media_item(record: DriveFile, folder_id: str) -> MediaItem:
    """Normalize one Drive record from ``folder_id`` into a MediaItem."""
    return MediaItem(
        id=record.id,
        name=record.name,
        mime_type=record.mime_type,
        folder_id=folder_id,
        thumb=thumbnail_url(record),
        url_view=view_url(record.id, record.mime_type),
        url_dl=download_url(record.id),
        created_time=record.created_time,
    )
