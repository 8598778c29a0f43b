"""Per-destination usage statistics used to rank capture suggestions."""
from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from kapture.models.entry import utc_now


class DestinationPreference(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    destination_id: str = Field(unique=True, index=True)
    is_favorite: bool = False
    last_used_at: datetime = Field(default_factory=utc_now, index=True)
    usage_count: int = 0
    preferred_time_of_day: Optional[str] = None  # "HH:MM", e.g. "09:00"

    def record_usage(self, now: Optional[datetime] = None) -> None:
        self.last_used_at = now or utc_now()
        self.usage_count += 1
