"""Audit trail of executed dispatch passes."""
import threading
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from kapture.errors import PersistenceError
from kapture.models.entry import utc_now
from kapture.models.sync import SyncLog


class SyncLogStore:
    def __init__(self, engine):
        self.engine = engine
        self._lock = threading.Lock()

    def start(self) -> SyncLog:
        log = SyncLog(started_at=utc_now(), status="running")
        with self._lock:
            try:
                with Session(self.engine) as s:
                    s.add(log)
                    s.commit()
                    s.refresh(log)
            except SQLAlchemyError as exc:
                raise PersistenceError(f"Sync log unavailable: {exc}") from exc
        return log

    def finish(
        self,
        log: SyncLog,
        *,
        status: str,
        attempted: int = 0,
        synced: int = 0,
        failed: int = 0,
        error_message: Optional[str] = None,
    ) -> None:
        with self._lock:
            try:
                with Session(self.engine) as s:
                    db_log = s.get(SyncLog, log.id)
                    db_log.status = status
                    db_log.finished_at = utc_now()
                    db_log.entries_attempted = attempted
                    db_log.entries_synced = synced
                    db_log.entries_failed = failed
                    db_log.error_message = error_message
                    s.add(db_log)
                    s.commit()
            except SQLAlchemyError as exc:
                raise PersistenceError(f"Sync log unavailable: {exc}") from exc

    def latest(self) -> Optional[SyncLog]:
        with Session(self.engine) as s:
            return s.exec(
                select(SyncLog).order_by(SyncLog.started_at.desc(), SyncLog.id.desc())
            ).first()
