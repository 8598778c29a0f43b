"""Tests for SyncLogStore."""
from kapture.storage.sync_log import SyncLogStore


class TestSyncLogStore:
    def test_latest_empty(self, sync_log_store):
        assert sync_log_store.latest() is None

    def test_start_creates_running_row(self, sync_log_store):
        log = sync_log_store.start()
        assert log.id is not None
        assert sync_log_store.latest().status == "running"

    def test_finish_records_counters(self, sync_log_store):
        log = sync_log_store.start()
        sync_log_store.finish(log, status="partial", attempted=3, synced=2, failed=1)

        latest = sync_log_store.latest()
        assert latest.status == "partial"
        assert latest.entries_attempted == 3
        assert latest.entries_synced == 2
        assert latest.entries_failed == 1
        assert latest.finished_at is not None
        assert latest.error_message is None

    def test_latest_is_most_recent_pass(self, engine):
        store = SyncLogStore(engine)
        first = store.start()
        store.finish(first, status="success")
        second = store.start()
        store.finish(second, status="error", error_message="boom")

        latest = store.latest()
        assert latest.id == second.id
        assert latest.error_message == "boom"
