"""
DestinationDirectory: cached view of the Notion databases Kapture can write to.

Listing databases is one search call; resolving a single id checks the
cache first and falls back to GET /databases/{id}. The cached list expires
after ``cache_seconds`` (5 minutes by default).
"""
import time
from typing import Callable, List, Optional

from kapture.errors import NotAuthenticated
from kapture.sync.interfaces import Destination

CACHE_SECONDS_DEFAULT = 300


class DestinationDirectory:
    def __init__(
        self,
        client,
        cache_seconds: int = CACHE_SECONDS_DEFAULT,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            client: NotionClient (or AsyncMock in tests).
            cache_seconds: How long a discover() result stays fresh.
            clock: Monotonic time source, injectable for tests.
        """
        self.client = client
        self.cache_seconds = cache_seconds
        self._clock = clock
        self._cached: List[Destination] = []
        self._fetched_at: Optional[float] = None

    async def discover(self) -> List[Destination]:
        """Fetch all accessible databases and refresh the cache."""
        try:
            destinations = await self.client.search_destinations()
        except NotAuthenticated:
            # Revoked token: nothing cached may still be visible
            self.clear_cache()
            raise
        self._cached = destinations
        self._fetched_at = self._clock()
        return destinations

    async def list_destinations(self, force_refresh: bool = False) -> List[Destination]:
        if (
            not force_refresh
            and self._fetched_at is not None
            and self._clock() - self._fetched_at < self.cache_seconds
        ):
            return self._cached
        return await self.discover()

    async def get_destination(self, destination_id: str) -> Destination:
        """Resolve one destination, cache first. Raises RemoteError if unknown.

        A missing or stale cache is refilled with one search call, so ranking
        several candidates costs one request rather than one per candidate.
        """
        for destination in await self.list_destinations():
            if destination.id == destination_id:
                return destination
        return await self.client.get_destination(destination_id)

    def clear_cache(self) -> None:
        self._cached = []
        self._fetched_at = None
