"""
Background rent-due dispatch, started on app startup when CRON_RENT_DUE_ENABLED is set.
Runs are spaced by CRON_RENT_DUE_INTERVAL_HOURS measured from the start of each run, so a slow
Twilio day does not push the next run later.
"""
import asyncio
import logging
from typing import Awaitable, Callable

from rentdash.core.config import settings
from rentdash.cron.notifications import send_rent_due_notifications

logger = logging.getLogger(__name__)

MIN_INTERVAL_SECONDS = 60.0


async def run_rent_due_cron_loop(
    job: Callable[[], Awaitable[None]] = send_rent_due_notifications,
) -> None:
    interval_seconds = max(MIN_INTERVAL_SECONDS, settings.CRON_RENT_DUE_INTERVAL_HOURS * 3600)
    initial_delay = max(0.0, settings.CRON_RENT_DUE_INITIAL_DELAY_SECONDS)
    logger.info(
        "Rent-due cron started (first run in %.0fs, then every %.2f hours)",
        initial_delay, interval_seconds / 3600,
    )
    loop = asyncio.get_running_loop()
    try:
        await asyncio.sleep(initial_delay)
        while True:
            started = loop.time()
            try:
                await job()
            except Exception:
                logger.exception("Rent-due cron run failed")
            await asyncio.sleep(max(0.0, interval_seconds - (loop.time() - started)))
    except asyncio.CancelledError:
        logger.info("Rent-due cron cancelled")
        raise
