"""Manifest persistence to the local file system or Azure Blob Storage."""

from __future__ import annotations

import contextlib
import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from azure.core.exceptions import ResourceExistsError
from azure.storage.blob import BlobServiceClient, ContentSettings

from drive_gallery.config import ConfigurationError

if TYPE_CHECKING:
    from drive_gallery.config import AppConfig

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json; charset=utf-8"
NO_CACHE = "no-cache"
NEW_FILE_MODE = 0o666


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def _target_mode(path: Path) -> int:
    """Mode for the replacement file: the old manifest's, else 0o666 minus the umask."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        return NEW_FILE_MODE & ~_current_umask()


def serialize(payload: list[dict[str, Any]]) -> bytes:
    """Render a manifest as indented UTF-8 JSON with a trailing newline."""
    return (json.dumps(payload, indent=2, ensure_ascii=False) + "\n").encode("utf-8")


class ManifestWriter(Protocol):
    def write(self, payload: list[dict[str, Any]], destination: str) -> str:
        """Replace ``destination`` with ``payload`` and return where it went."""
        ...


class FileManifestWriter:
    """Writes manifests to disk, replacing the previous file in one step."""

    def write(self, payload: list[dict[str, Any]], destination: str) -> str:
        """Write ``payload`` to ``destination``.

        The JSON is written to a temporary file next to the target and moved
        over it with ``os.replace``, so readers never see a half-written
        manifest. The file keeps the previous manifest's permissions, or gets
        the umask default when it is new, so a web server can read it.

        Args:
            payload: JSON-serializable list of entries.
            destination: File path of the manifest.

        Returns:
            The destination path.
        """
        path = Path(destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        mode = _target_mode(path)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        try:
            with os.fdopen(fd, "wb") as fh:
                os.fchmod(fh.fileno(), mode)
                fh.write(serialize(payload))
            os.replace(tmp_name, path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_name)
            raise
        logger.info("[write] wrote manifest file; path:%s;entry_count:%d", path, len(payload))
        return str(path)


class BlobManifestWriter:
    """Uploads manifests to a blob container, e.g. a static website's ``$web``."""

    def __init__(self, storage_connection_string: str, container: str) -> None:
        """Initialise the blob writer.

        Args:
            storage_connection_string: Azure Storage connection string.
            container: Blob container receiving the manifests.

        Raises:
            ConfigurationError: If the connection string cannot be parsed.
        """
        try:
            self._blob_service = BlobServiceClient.from_connection_string(
                storage_connection_string
            )
        except ValueError as exc:
            raise ConfigurationError(
                f"AzureWebJobsStorage is not a valid connection string: {exc}"
            ) from exc
        self._container = container

    def write(self, payload: list[dict[str, Any]], destination: str) -> str:
        """Upload ``payload`` as the blob ``destination``, overwriting it.

        Creates the container if it does not exist.

        Returns:
            ``<container>/<destination>``.
        """
        container_client = self._blob_service.get_container_client(self._container)
        with contextlib.suppress(ResourceExistsError):
            container_client.create_container()
            logger.info("[write] created blob container; container:%s", self._container)

        blob_client = container_client.get_blob_client(destination)
        blob_client.upload_blob(
            serialize(payload),
            overwrite=True,
            content_settings=ContentSettings(
                content_type=JSON_CONTENT_TYPE, cache_control=NO_CACHE
            ),
        )
        logger.info(
            "[write] uploaded manifest blob; container:%s;blob:%s;entry_count:%d",
            self._container,
            destination,
            len(payload),
        )
        return f"{self._container}/{destination}"


def manifest_writer_from_config(config: AppConfig) -> ManifestWriter:
    """Pick the blob writer when a storage connection string is configured, else the file writer."""
    if config.storage_connection_string:
        return BlobManifestWriter(
            storage_connection_string=config.storage_connection_string,
            container=config.manifest_container,
        )
    return FileManifestWriter()
