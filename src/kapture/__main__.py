"""
Main entrypoint.

Usage:
    python -m kapture setup         # one-time Notion token setup
    python -m kapture sync          # run one dispatch pass and exit
    python -m kapture               # headless: dispatch scheduler only
    uvicorn kapture.api.main:app --host 0.0.0.0 --port 8000  # API + scheduler
"""
import asyncio
import logging
import sys

from kapture.config import get_settings

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)


def _run_setup() -> None:
    from kapture.scripts.setup import run_setup
    run_setup()


async def _run_once() -> int:
    from kapture.app import build_services
    from kapture.errors import NotAuthenticated

    services = build_services()
    try:
        result = await services.sync_engine.run_pass()
    except NotAuthenticated as exc:
        logger.error("%s", exc)
        return 1

    if result is None or result.skipped:
        print("Offline: nothing was sent. Entries stay queued.")
        return 0
    counts = services.entries.count_by_status()
    print(
        f"Attempted {result.attempted}: {result.synced} synced, "
        f"{result.retried} will retry, {result.failed} failed permanently."
    )
    print(f"Queue: {counts['pending']} pending, {counts['failed']} failed.")
    return 0


async def _run_daemon() -> None:
    from kapture.app import build_services
    from kapture.notion.auth import TokenAuthenticator
    from kapture.scheduler.jobs import build_scheduler

    settings = get_settings()
    if not TokenAuthenticator(tokens_dir=settings.token_dir).has_token():
        logger.error("No Notion token found. Run `python -m kapture setup` first.")
        sys.exit(1)

    services = build_services(settings)
    scheduler = build_scheduler(services.sync_engine)
    scheduler.start()
    logger.info(
        "Scheduler started (dispatch every %d min)", settings.sync_interval_minutes
    )

    try:
        await asyncio.Event().wait()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Shutting down...")
    finally:
        scheduler.shutdown()
        logger.info("Goodbye.")


if __name__ == "__main__":
    # Dispatch on first argument: `setup`, `sync`, or nothing
    command = sys.argv[1] if len(sys.argv) > 1 else None
    if command == "setup":
        _run_setup()
    elif command == "sync":
        sys.exit(asyncio.run(_run_once()))
    else:
        asyncio.run(_run_daemon())
