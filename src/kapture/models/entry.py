"""Captured entry model: one record queued locally for delivery to a destination."""
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Mapping, Optional

from sqlmodel import Field, SQLModel

from kapture.models.properties import (
    PropertyMap,
    PropertyValue,
    decode_properties,
    encode_properties,
)
from kapture.sync.retry_policy import DEFAULT_MAX_ATTEMPTS


def utc_now() -> datetime:
    """Naive UTC timestamp (SQLite drops tzinfo on round-trip)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_entry_id() -> str:
    return uuid.uuid4().hex


class SyncStatus(str, Enum):
    PENDING = "pending"
    SYNCING = "syncing"  # transient, never persisted
    SYNCED = "synced"
    FAILED = "failed"
    CONFLICT = "conflict"  # reserved


class Entry(SQLModel, table=True):
    """One captured record awaiting or having completed delivery."""

    id: str = Field(default_factory=new_entry_id, primary_key=True)
    destination_id: str = Field(index=True)
    destination_name: str
    properties_json: str = "{}"
    created_at: datetime = Field(default_factory=utc_now, index=True)
    synced_at: Optional[datetime] = None
    status: SyncStatus = Field(default=SyncStatus.PENDING, index=True)
    last_error: Optional[str] = None
    retry_count: int = 0

    @classmethod
    def create(
        cls,
        destination_id: str,
        destination_name: str,
        properties: Mapping[str, PropertyValue],
        created_at: Optional[datetime] = None,
    ) -> "Entry":
        """Build a new pending entry from a typed property map."""
        return cls(
            destination_id=destination_id,
            destination_name=destination_name,
            properties_json=encode_properties(properties),
            created_at=created_at or utc_now(),
        )

    def decode_properties(self) -> PropertyMap:
        """Raises InvalidPropertyData if the stored JSON is corrupt."""
        return decode_properties(self.properties_json)

    def is_terminal(self, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> bool:
        """Synced, or failed with the retry budget used up."""
        if self.status == SyncStatus.SYNCED:
            return True
        return self.status == SyncStatus.FAILED and self.retry_count >= max_attempts
