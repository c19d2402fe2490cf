"""Application configuration loaded from environment variables."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from drive_gallery.drive.models import FIELD_ID, FIELD_NAME, FolderRef, unique_folders

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when a required setting or the folder source is missing or invalid."""


@dataclass(frozen=True)
class AppConfig:
    """Centralized application configuration.

    ``api_key`` has no default and must be present at startup. Everything
    else has a default that can be overridden via environment variables.
    """

    # Required
    api_key: str

    # Folder source
    folder_id: str | None = None
    folders_file: str = "public/folders.json"

    # Outputs
    media_output: str = "public/media.json"
    folders_output: str | None = None

    # Drive API knobs
    page_size: int = 1000
    max_workers: int = 4
    timeout_seconds: float = 60.0

    # Azure Blob publishing (static website container)
    storage_connection_string: str | None = None
    manifest_container: str = "$web"
    manifest_blob: str = "public/media.json"
    folders_blob: str = "public/folders.json"


def _optional(name: str) -> str | None:
    value = os.environ.get(name, "").strip()
    return value or None


def _number(name: str, default: str, cast: type[int] | type[float]) -> int | float:
    raw = os.environ.get(name, default)
    try:
        value = cast(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value


def load_config() -> AppConfig:
    """Construct an AppConfig from environment variables.

    Required environment variables:
        API_KEY: Google Drive API key.

    Optional environment variables (with defaults):
        FOLDER_ID: Single folder to scan; overrides FOLDERS_FILE.
        FOLDERS_FILE: JSON array of ``{id, name?}`` objects (default: public/folders.json).
        MEDIA_OUTPUT: Manifest path (default: public/media.json).
        FOLDERS_OUTPUT: Where to write the resolved folder list (default: not written).
        DRIVE_PAGE_SIZE: Files requested per page (default: 1000).
        DRIVE_MAX_WORKERS: Threads used for per-folder requests (default: 4).
        DRIVE_TIMEOUT_SECONDS: HTTP timeout per request (default: 60).
        AzureWebJobsStorage: Publish to Azure Blob Storage instead of the local disk.
        MANIFEST_CONTAINER: Blob container (default: $web).
        MANIFEST_BLOB: Blob path for the manifest (default: public/media.json).
        FOLDERS_BLOB: Blob path for the folder list (default: public/folders.json).

    Returns:
        Configured AppConfig instance.

    Raises:
        ConfigurationError: If API_KEY is missing or a numeric setting is invalid.
    """
    api_key = _optional("API_KEY")
    if api_key is None:
        raise ConfigurationError("API_KEY must be set in the environment.")

    return AppConfig(
        api_key=api_key,
        folder_id=_optional("FOLDER_ID"),
        folders_file=os.environ.get("FOLDERS_FILE", "public/folders.json"),
        media_output=os.environ.get("MEDIA_OUTPUT", "public/media.json"),
        folders_output=_optional("FOLDERS_OUTPUT"),
        page_size=int(_number("DRIVE_PAGE_SIZE", "1000", int)),
        max_workers=int(_number("DRIVE_MAX_WORKERS", "4", int)),
        timeout_seconds=float(_number("DRIVE_TIMEOUT_SECONDS", "60", float)),
        storage_connection_string=_optional("AzureWebJobsStorage"),  # noqa: SIM112
        manifest_container=os.environ.get("MANIFEST_CONTAINER", "$web"),
        manifest_blob=os.environ.get("MANIFEST_BLOB", "public/media.json"),
        folders_blob=os.environ.get("FOLDERS_BLOB", "public/folders.json"),
    )


def resolve_folder_refs(config: AppConfig) -> list[FolderRef]:
    """Determine which folders to scan.

    ``folder_id`` wins when set. Otherwise the folder-list file is read; it
    must hold a non-empty JSON array of objects with a string ``id``.

    Args:
        config: Application configuration instance.

    Returns:
        Ordered list of FolderRef, each with at least an id.

    Raises:
        ConfigurationError: If no folder source is available or the list file is invalid.
    """
    if config.folder_id:
        logger.info("[resolve_folder_refs] using single folder; folder_id:%s", config.folder_id)
        return [FolderRef(id=config.folder_id)]

    path = Path(config.folders_file)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigurationError(
            f"FOLDER_ID is not set and the folder list {path} does not exist."
        ) from exc
    except (OSError, ValueError) as exc:
        raise ConfigurationError(f"Could not read folder list {path}: {exc}") from exc

    if not isinstance(raw, list) or not raw:
        raise ConfigurationError(f"Folder list {path} must be a non-empty JSON array.")

    refs: list[FolderRef] = []
    for index, entry in enumerate(raw):
        folder_id = entry.get(FIELD_ID) if isinstance(entry, dict) else None
        if not isinstance(folder_id, str) or not folder_id:
            raise ConfigurationError(f"Folder list {path} entry {index} has no id.")
        name = entry.get(FIELD_NAME)
        refs.append(FolderRef(id=folder_id, name=name if isinstance(name, str) and name else None))

    unique = unique_folders(refs)
    if len(unique) < len(refs):
        logger.warning(
            "[resolve_folder_refs] ignoring repeated folder ids; path:%s;duplicate_count:%d",
            path,
            len(refs) - len(unique),
        )
    logger.info(
        "[resolve_folder_refs] loaded folder list; path:%s;folder_count:%d", path, len(unique)
    )
    return unique
