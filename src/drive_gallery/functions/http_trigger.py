"""HTTP trigger blueprint — health check and on-demand rebuild endpoints."""

import json
import logging
from typing import Any

import azure.functions as func

from drive_gallery import __version__
from drive_gallery.config import ConfigurationError, load_config
from drive_gallery.drive.client import DriveApiError
from drive_gallery.manifest.builder import manifest_builder_from_config

logger = logging.getLogger(__name__)

bp = func.Blueprint()


def _json_response(payload: dict[str, Any], status_code: int) -> func.HttpResponse:
    body = json.dumps(payload)
    return func.HttpResponse(body, status_code=status_code, mimetype="application/json")


@bp.route(route="health", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint. Returns service status and version."""
    logger.info("[health_check] health check requested")
    return _json_response({"status": "ok", "version": __version__}, 200)


@bp.route(route="rebuild", methods=["POST"], auth_level=func.AuthLevel.FUNCTION)
def manual_rebuild(req: func.HttpRequest) -> func.HttpResponse:
    """Rebuild the manifest on demand.

    Requires a function key. Runs the same pipeline as the timer trigger and
    reports the counts; configuration and Drive failures map to 500 and 502.
    """
    logger.info("[manual_rebuild] manual rebuild requested")

    try:
        config = load_config()
        result = manifest_builder_from_config(config).build()
    except ConfigurationError as exc:
        logger.error("[manual_rebuild] configuration error; detail:%s", exc)
        return _json_response({"status": "error", "message": "Configuration error"}, 500)
    except DriveApiError as exc:
        logger.error(
            "[manual_rebuild] Drive API failure; status:%d", exc.status_code, exc_info=True
        )
        return _json_response(
            {"status": "error", "message": "Drive API error", "upstream_status": exc.status_code},
            502,
        )
    except Exception:
        logger.error("[manual_rebuild] manual rebuild failed", exc_info=True)
        return _json_response({"status": "error", "message": "Internal server error"}, 500)

    logger.info(
        "[manual_rebuild] rebuild complete; item_count:%d;folder_count:%d",
        result.item_count,
        result.folder_count,
    )
    return _json_response(
        {
            "status": "ok",
            "items_written": result.item_count,
            "folders_processed": result.folder_count,
            "destination": result.destination,
            "folders": [f.to_dict() for f in result.folders],
        },
        200,
    )
