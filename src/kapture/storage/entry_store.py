"""
EntryStore: durable queue of captured entries and their sync status.

The store is the only writer of Entry rows. Callers (the sync engine, the
capture service, API routes) request transitions through its methods:

    save()                  new entry → pending
    mark_synced()           → synced, synced_at set, last_error cleared
    record_retry_attempt()  → pending, retry_count bumped, last_error set
    mark_failed_terminal()  → failed (budget exhausted)

Every mutating call commits before returning. Writes are serialized with a
per-instance lock, so one store may be shared by the event loop, scheduler
jobs and FastAPI's thread pool. An entry that reached ``synced`` is never
moved again, and an exhausted ``failed`` entry takes no further retry or
failure records; calls against such entries are ignored.

SQLAlchemy errors surface as PersistenceError.
"""
import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, Iterator, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, func, select

from kapture.errors import PersistenceError
from kapture.models.entry import Entry, SyncStatus, utc_now
from kapture.sync.retry_policy import DEFAULT_MAX_ATTEMPTS

logger = logging.getLogger(__name__)


class EntryStore:
    """SQLModel-backed store for Entry rows."""

    def __init__(self, engine, max_attempts: int = DEFAULT_MAX_ATTEMPTS):
        """
        Args:
            engine: SQLAlchemy engine (see kapture.db.engine.build_engine).
            max_attempts: Retry budget; failed entries below it are retry-eligible.
        """
        self.engine = engine
        self.max_attempts = max_attempts
        self._lock = threading.RLock()

    # ─── Session helpers ──────────────────────────────────────────────────────

    @contextmanager
    def _session(self) -> Iterator[Session]:
        with self._lock:
            try:
                with Session(self.engine, expire_on_commit=False) as s:
                    yield s
            except SQLAlchemyError as exc:
                raise PersistenceError(f"Entry store unavailable: {exc}") from exc

    # ─── Writes ───────────────────────────────────────────────────────────────

    def save(self, entry: Entry) -> Entry:
        """Persist a new entry with status pending.

        Raises:
            PersistenceError: if the entry could not be committed.
        """
        entry.status = SyncStatus.PENDING
        entry.retry_count = 0
        entry.synced_at = None
        entry.last_error = None
        with self._session() as s:
            s.add(entry)
            s.commit()
            s.refresh(entry)
        logger.debug("Saved entry %s for destination %s", entry.id, entry.destination_id)
        return entry

    def mark_synced(self, entry_id: str, now: Optional[datetime] = None) -> Optional[Entry]:
        """Transition to synced. Unknown or already-synced ids are a no-op."""
        with self._session() as s:
            entry = s.get(Entry, entry_id)
            if entry is None:
                logger.debug("mark_synced: entry %s not found", entry_id)
                return None
            if entry.status == SyncStatus.SYNCED:
                return entry
            entry.status = SyncStatus.SYNCED
            entry.synced_at = now or utc_now()
            entry.last_error = None
            s.add(entry)
            s.commit()
            s.refresh(entry)
            return entry

    def record_retry_attempt(
        self, entry_id: str, new_retry_count: int, reason: str
    ) -> Optional[Entry]:
        """Soft failure: keep the entry pending with an updated retry count."""
        with self._session() as s:
            entry = s.get(Entry, entry_id)
            if entry is None or entry.is_terminal(self.max_attempts):
                return entry
            entry.status = SyncStatus.PENDING
            entry.retry_count = new_retry_count
            entry.last_error = reason
            s.add(entry)
            s.commit()
            s.refresh(entry)
            return entry

    def mark_failed_terminal(
        self, entry_id: str, reason: str, retry_count: int
    ) -> Optional[Entry]:
        """Terminal failure.

        ``retry_count`` is the already-incremented value from the retry
        policy; the store records it as given and never increments it.
        """
        with self._session() as s:
            entry = s.get(Entry, entry_id)
            if entry is None or entry.is_terminal(self.max_attempts):
                return entry
            entry.status = SyncStatus.FAILED
            entry.retry_count = retry_count
            entry.last_error = reason
            s.add(entry)
            s.commit()
            s.refresh(entry)
        logger.warning("Entry %s failed permanently: %s", entry_id, reason)
        return entry

    # ─── Reads ────────────────────────────────────────────────────────────────

    def get(self, entry_id: str) -> Optional[Entry]:
        with self._session() as s:
            return s.get(Entry, entry_id)

    def list_pending(self) -> List[Entry]:
        """All pending entries, oldest first."""
        with self._session() as s:
            return list(
                s.exec(
                    select(Entry)
                    .where(Entry.status == SyncStatus.PENDING)
                    .order_by(Entry.created_at.asc())
                ).all()
            )

    def list_retry_eligible(self) -> List[Entry]:
        """Failed entries still under the retry budget, oldest first."""
        with self._session() as s:
            return list(
                s.exec(
                    select(Entry)
                    .where(Entry.status == SyncStatus.FAILED)
                    .where(Entry.retry_count < self.max_attempts)
                    .order_by(Entry.created_at.asc())
                ).all()
            )

    def list_recent(
        self, limit: int = 20, status: Optional[SyncStatus] = None
    ) -> List[Entry]:
        """Newest entries first, optionally filtered by status."""
        query = select(Entry)
        if status is not None:
            query = query.where(Entry.status == status)
        query = query.order_by(Entry.created_at.desc()).limit(limit)
        with self._session() as s:
            return list(s.exec(query).all())

    def count_by_status(self) -> Dict[str, int]:
        with self._session() as s:
            rows = s.exec(
                select(Entry.status, func.count()).group_by(Entry.status)
            ).all()
        counts = {status.value: 0 for status in SyncStatus}
        for status, count in rows:
            counts[SyncStatus(status).value] = count
        return counts
