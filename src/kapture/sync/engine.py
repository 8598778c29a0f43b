"""
SyncEngine: delivers queued entries to the remote record store.

Flow for one dispatch pass:
  1. Ask the connectivity probe; offline → return a skipped result, touch nothing.
  2. Create SyncLog (status="running")
  3. For each pending entry, then each retry-eligible failed entry (oldest first):
       create_record() → mark_synced()
       failure         → retry policy → record_retry_attempt() | mark_failed_terminal()
  4. Update SyncLog ("success" / "partial")

A failure on one entry is recorded on that entry and the pass moves on.
NotAuthenticated is the exception: it stops the pass, leaves the entry's
retry budget untouched, and is re-raised to the caller.

Only one pass runs at a time per engine. A pass requested while another is
in flight is dropped (returns None); whatever it would have picked up is
still queued for the next trigger.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional, Set

from kapture.errors import InvalidPropertyData, NotAuthenticated, RemoteError
from kapture.models.entry import Entry
from kapture.storage.entry_store import EntryStore
from kapture.storage.sync_log import SyncLogStore
from kapture.sync import retry_policy
from kapture.sync.interfaces import ConnectivityProbe, RemoteAPI
from kapture.sync.retry_policy import Retry

logger = logging.getLogger(__name__)


@dataclass
class PassResult:
    """Outcome counters for one dispatch pass."""

    skipped: bool = False
    attempted: int = 0
    synced: int = 0
    retried: int = 0
    failed: int = 0

    @property
    def status(self) -> str:
        if self.skipped:
            return "skipped"
        if self.retried or self.failed:
            return "partial"
        return "success"


class SyncEngine:
    """Single-flight dispatcher from the EntryStore to a RemoteAPI."""

    def __init__(
        self,
        store: EntryStore,
        remote: RemoteAPI,
        probe: ConnectivityProbe,
        *,
        max_attempts: int = retry_policy.DEFAULT_MAX_ATTEMPTS,
        sync_log: Optional[SyncLogStore] = None,
    ):
        """
        Args:
            store: Entry store; the only path for status transitions.
            remote: Remote record API (NotionClient or AsyncMock in tests).
            probe: Connectivity probe gating each pass.
            max_attempts: Retry budget passed to the retry policy.
            sync_log: Optional audit log; one row per executed pass.
        """
        self.store = store
        self.remote = remote
        self.probe = probe
        self.max_attempts = max_attempts
        self.sync_log = sync_log
        self._busy = False
        self._background: Set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return self._busy

    # ─── Public API ───────────────────────────────────────────────────────────

    async def run_pass(self) -> Optional[PassResult]:
        """Run one dispatch pass.

        Returns:
            PassResult, or None when another pass was already in flight.

        Raises:
            NotAuthenticated: if the remote has no usable credential.
            PersistenceError: if the entry store cannot be read or written.
        """
        if self._busy:
            logger.debug("Dispatch pass already running; dropping request")
            return None
        self._busy = True
        try:
            return await self._run_pass()
        finally:
            self._busy = False

    async def queue_entry_for_sync(self, entry: Entry) -> Entry:
        """Persist an entry, then kick off a background pass if online.

        The call is complete once the entry is stored; the delivery outcome
        is never reported back to the caller.

        Raises:
            PersistenceError: if the entry could not be saved.
        """
        saved = self.store.save(entry)
        if await self.probe.is_reachable():
            task = asyncio.create_task(self.run_pass())
            self._background.add(task)
            task.add_done_callback(self._on_background_done)
        else:
            logger.info("Offline: entry %s queued for a later pass", saved.id)
        return saved

    def resolve_conflict(self, local_entry: Entry, remote_record: Any) -> Optional[Entry]:
        """Last-write-wins: the local entry is taken as delivered.

        The remote record is not compared against the local entry.
        """
        logger.info(
            "Resolving conflict for entry %s as last-write-wins", local_entry.id
        )
        return self.store.mark_synced(local_entry.id)

    async def wait_idle(self) -> None:
        """Wait for background passes started by queue_entry_for_sync()."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # ─── Internal helpers ─────────────────────────────────────────────────────

    async def _run_pass(self) -> PassResult:
        if not await self.probe.is_reachable():
            logger.info("Offline; skipping dispatch pass")
            return PassResult(skipped=True)

        result = PassResult()
        log = self.sync_log.start() if self.sync_log else None
        try:
            for entry in self.store.list_pending():
                await self._deliver(entry, result)
            for entry in self.store.list_retry_eligible():
                await self._deliver(entry, result)
        except Exception as exc:
            if log is not None:
                self.sync_log.finish(
                    log,
                    status="error",
                    attempted=result.attempted,
                    synced=result.synced,
                    failed=result.failed,
                    error_message=str(exc),
                )
            raise

        if log is not None:
            self.sync_log.finish(
                log,
                status=result.status,
                attempted=result.attempted,
                synced=result.synced,
                failed=result.failed + result.retried,
            )
        logger.info(
            "Dispatch pass done: attempted=%d synced=%d retried=%d failed=%d",
            result.attempted, result.synced, result.retried, result.failed,
        )
        return result

    async def _deliver(self, entry: Entry, result: PassResult) -> None:
        result.attempted += 1
        try:
            properties = entry.decode_properties()
            remote_id = await self.remote.create_record(entry.destination_id, properties)
        except NotAuthenticated:
            logger.error("Not authenticated; stopping pass at entry %s", entry.id)
            raise
        except (RemoteError, InvalidPropertyData) as exc:
            self._handle_failure(entry, str(exc), result)
            return
        except Exception as exc:
            logger.exception("Unexpected error delivering entry %s", entry.id)
            self._handle_failure(entry, str(exc) or exc.__class__.__name__, result)
            return

        self.store.mark_synced(entry.id)
        result.synced += 1
        logger.info("Entry %s delivered as %s", entry.id, remote_id)

    def _handle_failure(self, entry: Entry, reason: str, result: PassResult) -> None:
        decision = retry_policy.decide(entry.retry_count, self.max_attempts)
        if isinstance(decision, Retry):
            self.store.record_retry_attempt(entry.id, decision.next_retry_count, reason)
            result.retried += 1
            logger.warning(
                "Entry %s failed (attempt %d/%d): %s; advisory backoff %s",
                entry.id, decision.next_retry_count, self.max_attempts,
                reason, decision.backoff,
            )
        else:
            self.store.mark_failed_terminal(entry.id, reason, decision.next_retry_count)
            result.failed += 1

    def _on_background_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background dispatch pass failed: %s", exc)
