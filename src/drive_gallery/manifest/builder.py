"""Manifest builder — orchestrates folder resolution, listing and publishing."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from drive_gallery.config import resolve_folder_refs
from drive_gallery.drive.client import drive_client_from_config
from drive_gallery.drive.listing import FileLister, file_lister_from_config
from drive_gallery.drive.models import FolderRef, MediaItem, unique_folders
from drive_gallery.manifest.normalizer import to_media_item
from drive_gallery.manifest.writer import ManifestWriter, manifest_writer_from_config

if TYPE_CHECKING:
    from drive_gallery.config import AppConfig

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4
_OLDEST = datetime.min.replace(tzinfo=UTC)


@dataclass(frozen=True)
class BuildResult:
    """Outcome of a successful build."""

    item_count: int
    folder_count: int
    destination: str
    folders: list[FolderRef]


def parse_created_time(value: str | None) -> datetime | None:
    """Parse a Drive RFC 3339 timestamp; returns None when absent or invalid."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _newest_first_key(item: MediaItem) -> tuple[bool, datetime]:
    parsed = parse_created_time(item.created_time)
    return (parsed is not None, parsed or _OLDEST)


def sort_newest_first(items: list[MediaItem]) -> list[MediaItem]:
    """Order items by ``created_time`` descending.

    Items without a parsable timestamp go after all dated items; ties and
    undated items keep their incoming order.
    """
    return sorted(items, key=_newest_first_key, reverse=True)


class ManifestBuilder:
    """Runs the full folders-to-manifest pipeline."""

    def __init__(
        self,
        folders: list[FolderRef],
        lister: FileLister,
        writer: ManifestWriter,
        media_destination: str,
        folders_destination: str | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        """Initialise the builder.

        Args:
            folders: Folders to scan, in output order; repeated ids are scanned once.
            lister: FileLister used for listing and folder-name lookups.
            writer: Sink receiving the manifest (and optional folder list).
            media_destination: Path or blob name of the media manifest.
            folders_destination: Path or blob name for the resolved folder
                list; not written when None.
            max_workers: Thread pool size for per-folder requests.
        """
        self._folders = unique_folders(folders)
        self._lister = lister
        self._writer = writer
        self._media_destination = media_destination
        self._folders_destination = folders_destination
        self._max_workers = max_workers

    def resolve_names(self, executor: ThreadPoolExecutor) -> list[FolderRef]:
        """Fill in missing folder names concurrently, preserving folder order."""
        return list(executor.map(self._lister.resolve_folder, self._folders))

    def collect(self, executor: ThreadPoolExecutor, folders: list[FolderRef]) -> list[MediaItem]:
        """List every folder concurrently and concatenate the items in folder order.

        A file id already collected from an earlier folder is skipped, so ids
        stay unique within the manifest.

        ``executor.map`` yields results in input order and re-raises the first
        failure, so nothing is returned unless every folder listed cleanly.
        """
        items: list[MediaItem] = []
        seen: set[str] = set()
        listings = executor.map(self._lister.list_files, [f.id for f in folders])
        for folder, files in zip(folders, listings, strict=True):
            for record in files:
                # A file with several listed parents shows up once per folder.
                if record.id in seen:
                    logger.debug(
                        "[collect] skipping duplicate file; file_id:%s;folder_id:%s",
                        record.id,
                        folder.id,
                    )
                    continue
                seen.add(record.id)
                items.append(to_media_item(record, folder.id))
        return items

    def build(self) -> BuildResult:
        """Run the pipeline.

        Steps:
            1. Resolve missing folder names.
            2. List all folders.
            3. Normalize, concatenate and sort newest first.
            4. Write the folder list if configured, then the manifest.

        Any DriveApiError aborts before step 4, leaving the previous
        manifest untouched. The folder list goes first so a failed write
        never leaves a new manifest next to a stale folder list.

        Returns:
            BuildResult with counts and the manifest destination.
        """
        logger.info("[build] starting manifest build; folder_count:%d", len(self._folders))
        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            folders = self.resolve_names(executor)
            items = self.collect(executor, folders)

        manifest = sort_newest_first(items)
        if self._folders_destination:
            self._writer.write([f.to_dict() for f in folders], self._folders_destination)
        destination = self._writer.write(
            [item.to_dict() for item in manifest], self._media_destination
        )

        logger.info(
            "[build] wrote manifest; item_count:%d;folder_count:%d;destination:%s",
            len(manifest),
            len(folders),
            destination,
        )
        return BuildResult(
            item_count=len(manifest),
            folder_count=len(folders),
            destination=destination,
            folders=folders,
        )


def manifest_builder_from_config(config: AppConfig) -> ManifestBuilder:
    """Construct a ManifestBuilder from application configuration.

    Resolves the folder source, creates the Drive client and lister, and
    picks the blob or file writer along with the matching destinations.

    Raises:
        ConfigurationError: If no folder source is available.
    """
    folders = resolve_folder_refs(config)
    lister = file_lister_from_config(drive_client_from_config(config), config)
    writer = manifest_writer_from_config(config)
    if config.storage_connection_string:
        media_destination: str = config.manifest_blob
        folders_destination: str | None = config.folders_blob
    else:
        media_destination = config.media_output
        folders_destination = config.folders_output
    return ManifestBuilder(
        folders=folders,
        lister=lister,
        writer=writer,
        media_destination=media_destination,
        folders_destination=folders_destination,
        max_workers=config.max_workers,
    )
