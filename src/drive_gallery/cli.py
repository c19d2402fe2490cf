"""Command-line entry point: build the media manifest once and exit."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys

from azure.core.exceptions import AzureError

from drive_gallery import __version__
from drive_gallery.config import ConfigurationError, load_config
from drive_gallery.drive.client import DriveApiError
from drive_gallery.manifest.builder import manifest_builder_from_config

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="drive-gallery",
        description="Fetch images and videos from Google Drive folders into a JSON manifest.",
    )
    p.add_argument("--folder-id", help="single folder to scan (overrides FOLDER_ID)")
    p.add_argument(
        "--folders-file", help="JSON list of {id, name?} folders (overrides FOLDERS_FILE)"
    )
    p.add_argument("--output", help="manifest path (overrides MEDIA_OUTPUT)")
    p.add_argument("--folders-output", help="also write the resolved folder list here")
    p.add_argument("-v", "--verbose", action="store_true", help="log every Drive request")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    overrides = {
        "folder_id": args.folder_id,
        "folders_file": args.folders_file,
        "media_output": args.output,
        "folders_output": args.folders_output,
    }
    try:
        config = load_config()
        config = dataclasses.replace(
            config, **{k: v for k, v in overrides.items() if v is not None}
        )
        result = manifest_builder_from_config(config).build()
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return EXIT_CONFIG
    except DriveApiError as exc:
        logger.error("%s", exc)
        return EXIT_FAILURE
    except AzureError as exc:
        logger.error("Could not publish manifest to blob storage: %s", exc)
        return EXIT_FAILURE
    except OSError as exc:
        logger.error("Could not write manifest: %s", exc)
        return EXIT_FAILURE

    print(
        f"Wrote {result.item_count} items from {result.folder_count} folder(s) "
        f"to {result.destination}"
    )
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
