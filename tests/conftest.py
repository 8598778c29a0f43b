"""Shared test fixtures."""
from datetime import datetime, timedelta
from typing import Generator

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# Import all models so SQLModel.metadata knows about them
from kapture.models.entry import Entry  # noqa: F401
from kapture.models.preference import DestinationPreference  # noqa: F401
from kapture.models.sync import SyncLog  # noqa: F401
from kapture.models.properties import CheckboxValue, NumberValue, TitleValue
from kapture.storage.entry_store import EntryStore
from kapture.storage.preference_store import PreferenceStore
from kapture.storage.sync_log import SyncLogStore

BASE_TIME = datetime(2025, 3, 1, 9, 0)


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine. Tables recreated fresh for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="test_session")
def test_session_fixture(engine) -> Generator[Session, None, None]:
    """Provides a DB session connected to in-memory SQLite."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="entry_store")
def entry_store_fixture(engine) -> EntryStore:
    return EntryStore(engine, max_attempts=3)


@pytest.fixture(name="preference_store")
def preference_store_fixture(engine) -> PreferenceStore:
    return PreferenceStore(engine)


@pytest.fixture(name="sync_log_store")
def sync_log_store_fixture(engine) -> SyncLogStore:
    return SyncLogStore(engine)


def make_entry(
    title: str = "Buy milk",
    destination_id: str = "db-inbox",
    destination_name: str = "Inbox",
    minutes: int = 0,
) -> Entry:
    """A new (unsaved) entry created ``minutes`` after BASE_TIME."""
    return Entry.create(
        destination_id=destination_id,
        destination_name=destination_name,
        properties={
            "title": TitleValue(text=title),
            "Estimate": NumberValue(value=2.5),
            "Done": CheckboxValue(checked=False),
        },
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )


@pytest.fixture(name="make_entry")
def make_entry_fixture():
    """Factory fixture: make_entry(title=..., minutes=...) → unsaved Entry."""
    return make_entry
