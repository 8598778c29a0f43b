"""Sync audit log model."""
from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from kapture.models.entry import utc_now


class SyncLog(SQLModel, table=True):
    """Records each executed dispatch pass for audit and debugging."""

    id: Optional[int] = Field(default=None, primary_key=True)
    started_at: datetime = Field(default_factory=utc_now)
    finished_at: Optional[datetime] = None
    status: str = "running"  # "running", "success", "partial", "error"
    entries_attempted: int = 0
    entries_synced: int = 0
    entries_failed: int = 0
    error_message: Optional[str] = None
