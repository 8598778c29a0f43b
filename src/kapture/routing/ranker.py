"""
Destination suggestions from usage history.

suggest() picks the destination the user most likely wants right now: the
first of the recently used destinations whose last use fell within a couple
of hours of the requested time of day. The hour difference is a plain
absolute difference on a 24-hour clock, so 23:00 and 00:00 count as 23
hours apart. Without a time match it falls back to the most recently used
destination.

Destinations that no longer resolve (deleted, unshared) are skipped.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from kapture.errors import NotAuthenticated, PersistenceError, RemoteError
from kapture.models.entry import utc_now
from kapture.models.preference import DestinationPreference
from kapture.storage.preference_store import PreferenceStore
from kapture.sync.interfaces import Destination, DestinationLookup

logger = logging.getLogger(__name__)

WINDOW_HOURS_DEFAULT = 2
CANDIDATES_DEFAULT = 20


class SuggestionRanker:
    def __init__(
        self,
        preferences: PreferenceStore,
        lookup: DestinationLookup,
        window_hours: int = WINDOW_HOURS_DEFAULT,
        candidates: int = CANDIDATES_DEFAULT,
    ):
        self.preferences = preferences
        self.lookup = lookup
        self.window_hours = window_hours
        self.candidates = candidates

    async def suggest(self, for_time: Optional[datetime] = None) -> Optional[Destination]:
        """Suggest a destination for a capture at ``for_time`` (default: now).

        Usage timestamps are stored as naive UTC, so ``for_time`` is compared
        in that frame: naive values are taken as UTC and aware values are
        converted.
        """
        for_time = _as_naive_utc(for_time) if for_time else utc_now()
        recent = self.preferences.recent(limit=self.candidates)

        for pref in recent:
            if abs(for_time.hour - pref.last_used_at.hour) <= self.window_hours:
                destination = await self._resolve(pref)
                if destination is not None:
                    return destination

        # Fallback: most recent usage overall
        for pref in recent:
            destination = await self._resolve(pref)
            if destination is not None:
                return destination
        return None

    async def suggestions(self, limit: int = 10) -> List[Destination]:
        """Recently used destinations that still resolve, newest first."""
        found = []
        for pref in self.preferences.recent(limit=limit):
            destination = await self._resolve(pref)
            if destination is not None:
                found.append(destination)
        return found

    async def favorites(self) -> List[Destination]:
        """Favorite destinations that still resolve."""
        found = []
        for pref in self.preferences.favorites():
            destination = await self._resolve(pref)
            if destination is not None:
                found.append(destination)
        return found

    def record_capture(self, destination_id: str, timestamp: Optional[datetime] = None) -> None:
        """Record a capture for future ranking. Storage failures are only logged."""
        try:
            self.preferences.record_usage(
                destination_id, now=_as_naive_utc(timestamp) if timestamp else None
            )
        except PersistenceError as exc:
            logger.warning("Could not record usage of %s: %s", destination_id, exc)

    async def _resolve(self, pref: DestinationPreference) -> Optional[Destination]:
        try:
            return await self.lookup.get_destination(pref.destination_id)
        except (RemoteError, NotAuthenticated) as exc:
            logger.debug("Destination %s did not resolve: %s", pref.destination_id, exc)
            return None


def _as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
