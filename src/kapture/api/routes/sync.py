"""Sync trigger and status routes."""
import logging
from datetime import datetime
from typing import Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel

from kapture.api.deps import get_services
from kapture.app import Services
from kapture.errors import NotAuthenticated, PersistenceError
from kapture.sync.engine import SyncEngine

logger = logging.getLogger(__name__)

router = APIRouter()


class SyncStatusResponse(BaseModel):
    status: str
    running: bool
    started_at: Optional[datetime]
    finished_at: Optional[datetime]
    entries_synced: Optional[int]
    entries_failed: Optional[int]
    error_message: Optional[str]
    queue: Dict[str, int]


async def _do_sync(sync_engine: SyncEngine) -> None:
    """Background task: run one dispatch pass."""
    try:
        await sync_engine.run_pass()
    except (NotAuthenticated, PersistenceError) as exc:
        logger.error("Triggered dispatch pass failed: %s", exc)


@router.post("/trigger")
async def trigger_sync(
    background_tasks: BackgroundTasks,
    services: Services = Depends(get_services),
):
    """
    Trigger an on-demand dispatch pass.
    Returns immediately; the pass runs in the background.
    """
    if services.sync_engine.is_running:
        return {"message": "Sync already running"}
    background_tasks.add_task(_do_sync, services.sync_engine)
    return {"message": "Sync started"}


@router.get("/status", response_model=SyncStatusResponse)
def sync_status(services: Services = Depends(get_services)):
    """Return the most recent pass and the queue size per status."""
    log = services.sync_log.latest()
    queue = services.entries.count_by_status()
    running = services.sync_engine.is_running
    if not log:
        return SyncStatusResponse(
            status="never_run",
            running=running,
            started_at=None,
            finished_at=None,
            entries_synced=None,
            entries_failed=None,
            error_message=None,
            queue=queue,
        )
    return SyncStatusResponse(
        status=log.status,
        running=running,
        started_at=log.started_at,
        finished_at=log.finished_at,
        entries_synced=log.entries_synced,
        entries_failed=log.entries_failed,
        error_message=log.error_message,
        queue=queue,
    )
