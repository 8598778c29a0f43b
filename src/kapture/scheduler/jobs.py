"""
APScheduler jobs for background dispatch.

Captures trigger a pass immediately when online; the interval job picks up
whatever was queued while offline or left pending by a failed attempt.
The scheduler runs inside the same process as the API or the headless
daemon (wired in api/main.py and __main__.py).
"""
import logging
from datetime import datetime

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from kapture.config import get_settings
from kapture.errors import NotAuthenticated, PersistenceError
from kapture.sync.engine import SyncEngine

logger = logging.getLogger(__name__)


def build_scheduler(sync_engine: SyncEngine) -> AsyncIOScheduler:
    """
    Create and configure the APScheduler.

    Args:
        sync_engine: Engine whose run_pass() the job calls.

    Returns:
        Configured AsyncIOScheduler (not yet started).
    """
    settings = get_settings()
    scheduler = AsyncIOScheduler()

    scheduler.add_job(
        _dispatch_pass,
        trigger="interval",
        minutes=settings.sync_interval_minutes,
        id="dispatch_pass",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        next_run_time=datetime.now(),  # deliver the offline backlog at startup
        kwargs={"sync_engine": sync_engine},
    )

    return scheduler


async def _dispatch_pass(sync_engine: SyncEngine) -> None:
    """Periodic job: deliver everything that is due. Never raises."""
    try:
        result = await sync_engine.run_pass()
    except NotAuthenticated as exc:
        logger.error("Scheduled dispatch pass needs authentication: %s", exc)
        return
    except PersistenceError as exc:
        logger.error("Scheduled dispatch pass could not reach the store: %s", exc)
        return

    if result is None:
        logger.debug("Scheduled dispatch pass dropped; another pass is running")
    elif not result.skipped:
        logger.info(
            "Scheduled dispatch pass: %d synced, %d retried, %d failed",
            result.synced, result.retried, result.failed,
        )
