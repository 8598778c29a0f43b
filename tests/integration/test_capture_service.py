"""Integration tests for CaptureService: capture → queue → record usage."""
from unittest.mock import AsyncMock, MagicMock

import pytest

from kapture.capture import CaptureService
from kapture.errors import CaptureError, RemoteError
from kapture.models.entry import SyncStatus
from kapture.models.properties import DateValue, TitleValue
from kapture.routing.ranker import SuggestionRanker
from kapture.sync.connectivity import StaticConnectivityProbe
from kapture.sync.engine import SyncEngine
from kapture.sync.interfaces import Destination

INBOX = Destination(id="db-inbox", title="Inbox")


@pytest.fixture(name="remote")
def remote_fixture():
    remote = AsyncMock()
    remote.create_record.return_value = "page-1"
    remote.get_destination.return_value = INBOX
    return remote


@pytest.fixture(name="probe")
def probe_fixture():
    return StaticConnectivityProbe(reachable=False)


@pytest.fixture(name="service")
def service_fixture(entry_store, preference_store, remote, probe):
    sync_engine = SyncEngine(entry_store, remote, probe)
    ranker = SuggestionRanker(preference_store, remote)
    return CaptureService(sync_engine, ranker)


class TestCapture:
    @pytest.mark.asyncio
    async def test_capture_stores_pending_entry(self, service, entry_store):
        entry = await service.capture(INBOX, {"title": TitleValue(text="Call mum")})

        stored = entry_store.get(entry.id)
        assert stored.status == SyncStatus.PENDING
        assert stored.destination_name == "Inbox"
        assert stored.decode_properties()["title"].text == "Call mum"

    @pytest.mark.asyncio
    async def test_capture_records_usage(self, service, preference_store):
        await service.capture(INBOX, {"title": TitleValue(text="one")})
        await service.capture(INBOX, {"title": TitleValue(text="two")})

        pref = preference_store.get("db-inbox")
        assert pref.usage_count == 2

    @pytest.mark.asyncio
    async def test_captured_destination_becomes_suggestion(self, service):
        await service.capture(INBOX, {"title": TitleValue(text="x")})
        suggestion = await service.ranker.suggest()
        assert suggestion == INBOX

    @pytest.mark.asyncio
    async def test_online_capture_delivers(self, service, entry_store, remote, probe):
        probe.reachable = True
        entry = await service.capture(INBOX, {"title": TitleValue(text="x")})
        await service.sync_engine.wait_idle()

        assert entry_store.get(entry.id).status == SyncStatus.SYNCED
        remote.create_record.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delivery_failure_still_returns_entry(self, service, entry_store, remote, probe):
        probe.reachable = True
        remote.create_record.side_effect = RemoteError(500, "down")

        entry = await service.capture(INBOX, {"title": TitleValue(text="x")})
        await service.sync_engine.wait_idle()

        assert entry_store.get(entry.id).last_error == "HTTP 500: down"

    @pytest.mark.asyncio
    async def test_no_destination_rejected(self, service, entry_store):
        with pytest.raises(CaptureError):
            await service.capture(None, {"title": TitleValue(text="x")})
        assert entry_store.list_pending() == []

    @pytest.mark.asyncio
    async def test_empty_properties_rejected(self, service, entry_store):
        with pytest.raises(CaptureError):
            await service.capture(INBOX, {"Due": DateValue()})
        assert entry_store.list_pending() == []

    @pytest.mark.asyncio
    async def test_without_ranker(self, entry_store, remote, probe):
        service = CaptureService(SyncEngine(entry_store, remote, probe))
        entry = await service.capture(INBOX, {"title": TitleValue(text="x")})
        assert entry.status == SyncStatus.PENDING

    @pytest.mark.asyncio
    async def test_custom_ranker_receives_capture(self, entry_store, remote, probe):
        ranker = MagicMock()
        service = CaptureService(SyncEngine(entry_store, remote, probe), ranker)
        entry = await service.capture(INBOX, {"title": TitleValue(text="x")})
        ranker.record_capture.assert_called_once_with("db-inbox")
        assert entry_store.get(entry.id) is not None
