"""
Capture requests: turn a destination plus property values into a queued entry.

The entry is stored first and delivered later (offline-first). A capture
succeeds as soon as the entry is persisted; delivery failures show up only
on the entry itself.
"""
import logging
from typing import Mapping, Optional

from kapture.errors import CaptureError
from kapture.models.entry import Entry
from kapture.models.properties import PropertyValue, to_notion_properties
from kapture.routing.ranker import SuggestionRanker
from kapture.sync.engine import SyncEngine
from kapture.sync.interfaces import Destination

logger = logging.getLogger(__name__)


class CaptureService:
    def __init__(self, sync_engine: SyncEngine, ranker: Optional[SuggestionRanker] = None):
        self.sync_engine = sync_engine
        self.ranker = ranker

    async def capture(
        self,
        destination: Optional[Destination],
        properties: Mapping[str, PropertyValue],
    ) -> Entry:
        """Queue a new entry for ``destination``.

        Raises:
            CaptureError: if no destination is given or nothing would be written.
            PersistenceError: if the entry could not be stored.
        """
        if destination is None:
            raise CaptureError("Please select a destination first")
        if not to_notion_properties(properties):
            raise CaptureError("Capture has no property values to write")

        entry = Entry.create(
            destination_id=destination.id,
            destination_name=destination.title,
            properties=properties,
        )
        entry = await self.sync_engine.queue_entry_for_sync(entry)
        logger.info("Captured entry %s into %s", entry.id, destination.title)

        if self.ranker is not None:
            self.ranker.record_capture(destination.id)
        return entry
