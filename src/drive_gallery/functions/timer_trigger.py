"""Timer trigger blueprint — scheduled manifest rebuild."""

import logging

import azure.functions as func

from drive_gallery.config import load_config
from drive_gallery.manifest.builder import manifest_builder_from_config

logger = logging.getLogger(__name__)

bp = func.Blueprint()


@bp.timer_trigger(
    schedule="0 0 * * * *",
    arg_name="timer",
    run_on_startup=False,
)
def timer_trigger(timer: func.TimerRequest) -> None:
    """Scheduled trigger that rebuilds the media manifest.

    Runs hourly. A failed build leaves the published manifest untouched and
    is re-raised so the run is recorded as failed.
    """
    logger.info("Timer trigger fired")

    try:
        if timer.past_due:
            logger.warning("Timer trigger is past due")

        config = load_config()
        result = manifest_builder_from_config(config).build()
        logger.info(
            "Manifest rebuilt — %d item(s) from %d folder(s) to %s",
            result.item_count,
            result.folder_count,
            result.destination,
        )

    except Exception:
        logger.exception("Timer trigger failed")
        raise
