"""Tests for the Entry and DestinationPreference models."""
from datetime import datetime

import pytest
from sqlmodel import Session, select

from kapture.errors import InvalidPropertyData
from kapture.models.entry import Entry, SyncStatus
from kapture.models.preference import DestinationPreference
from kapture.models.properties import NumberValue, TitleValue


class TestEntry:
    def test_create_defaults(self):
        entry = Entry.create("db-1", "Inbox", {"title": TitleValue(text="Test")})
        assert entry.destination_id == "db-1"
        assert entry.destination_name == "Inbox"
        assert entry.status == SyncStatus.PENDING
        assert entry.retry_count == 0
        assert entry.synced_at is None
        assert entry.last_error is None

    def test_ids_are_unique(self):
        a = Entry.create("db-1", "Inbox", {})
        b = Entry.create("db-1", "Inbox", {})
        assert a.id != b.id

    def test_decode_properties_round_trip(self):
        entry = Entry.create(
            "db-1",
            "Inbox",
            {"title": TitleValue(text="Test Title"), "Count": NumberValue(value=42)},
        )
        decoded = entry.decode_properties()
        assert decoded["title"].text == "Test Title"
        assert decoded["Count"].value == 42

    def test_new_entry_is_not_terminal(self):
        assert not Entry.create("db-1", "Inbox", {}).is_terminal()

    def test_synced_is_terminal(self):
        entry = Entry.create("db-1", "Inbox", {})
        entry.status = SyncStatus.SYNCED
        assert entry.is_terminal()

    def test_failed_is_terminal_only_when_budget_used(self):
        entry = Entry.create("db-1", "Inbox", {})
        entry.status = SyncStatus.FAILED
        entry.retry_count = 2
        assert not entry.is_terminal(max_attempts=3)
        entry.retry_count = 3
        assert entry.is_terminal(max_attempts=3)
        assert not entry.is_terminal(max_attempts=5)

    def test_decode_corrupt_properties_raises(self):
        entry = Entry.create("db-1", "Inbox", {"title": TitleValue(text="x")})
        entry.properties_json = "\xff\xff not json"
        with pytest.raises(InvalidPropertyData):
            entry.decode_properties()

    def test_persists_and_retrieves(self, test_session: Session):
        entry = Entry.create("db-1", "Inbox", {"title": TitleValue(text="x")})
        test_session.add(entry)
        test_session.commit()

        result = test_session.exec(select(Entry).where(Entry.id == entry.id)).first()
        assert result is not None
        assert result.status == SyncStatus.PENDING


class TestDestinationPreference:
    def test_defaults(self):
        pref = DestinationPreference(destination_id="db-1")
        assert pref.is_favorite is False
        assert pref.usage_count == 0
        assert pref.preferred_time_of_day is None

    def test_record_usage_updates_count_and_date(self):
        pref = DestinationPreference(
            destination_id="db-1", last_used_at=datetime(2025, 1, 1, 8, 0)
        )
        pref.record_usage(now=datetime(2025, 1, 2, 9, 30))
        assert pref.usage_count == 1
        assert pref.last_used_at == datetime(2025, 1, 2, 9, 30)

    def test_destination_id_is_unique(self, test_session: Session):
        import sqlalchemy.exc

        test_session.add(DestinationPreference(destination_id="dup"))
        test_session.commit()
        test_session.add(DestinationPreference(destination_id="dup"))
        with pytest.raises(sqlalchemy.exc.IntegrityError):
            test_session.commit()
