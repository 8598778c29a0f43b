"""PreferenceStore: per-destination usage statistics for capture routing."""
import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from kapture.errors import PersistenceError
from kapture.models.preference import DestinationPreference

logger = logging.getLogger(__name__)


class PreferenceStore:
    """SQLModel-backed store for DestinationPreference rows.

    Preferences are created lazily the first time a destination is used and
    are never deleted.
    """

    def __init__(self, engine):
        self.engine = engine
        self._lock = threading.RLock()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        with self._lock:
            try:
                with Session(self.engine, expire_on_commit=False) as s:
                    yield s
            except SQLAlchemyError as exc:
                raise PersistenceError(f"Preference store unavailable: {exc}") from exc

    @staticmethod
    def _find(s: Session, destination_id: str) -> Optional[DestinationPreference]:
        return s.exec(
            select(DestinationPreference).where(
                DestinationPreference.destination_id == destination_id
            )
        ).first()

    def get(self, destination_id: str) -> Optional[DestinationPreference]:
        with self._session() as s:
            return self._find(s, destination_id)

    def get_or_create(self, destination_id: str) -> DestinationPreference:
        with self._session() as s:
            pref = self._find(s, destination_id)
            if pref is None:
                pref = DestinationPreference(destination_id=destination_id)
                s.add(pref)
                s.commit()
                s.refresh(pref)
            return pref

    def record_usage(
        self, destination_id: str, now: Optional[datetime] = None
    ) -> DestinationPreference:
        """Bump usage_count and set last_used_at, creating the row if needed."""
        with self._session() as s:
            pref = self._find(s, destination_id)
            if pref is None:
                pref = DestinationPreference(destination_id=destination_id)
            pref.record_usage(now)
            s.add(pref)
            s.commit()
            s.refresh(pref)
        logger.debug(
            "Recorded usage of %s (count=%d)", destination_id, pref.usage_count
        )
        return pref

    def recent(self, limit: int = 10) -> List[DestinationPreference]:
        """Most recently used destinations first."""
        with self._session() as s:
            return list(
                s.exec(
                    select(DestinationPreference)
                    .order_by(DestinationPreference.last_used_at.desc())
                    .limit(limit)
                ).all()
            )

    def toggle_favorite(self, destination_id: str) -> DestinationPreference:
        """Flip is_favorite, creating the preference if needed."""
        with self._lock:
            pref = self.get_or_create(destination_id)
            pref.is_favorite = not pref.is_favorite
            with self._session() as s:
                s.add(pref)
                s.commit()
                s.refresh(pref)
        return pref

    def favorites(self) -> List[DestinationPreference]:
        with self._session() as s:
            return list(
                s.exec(
                    select(DestinationPreference).where(
                        DestinationPreference.is_favorite == True  # noqa: E712
                    )
                ).all()
            )
