"""Tests for SyncStatusStore against in-memory SQLite."""
from datetime import datetime, timedelta, timezone

from sqlmodel import Session, select

from p2g.db.status_store import SyncStatusStore
from p2g.models.sync import SyncStatus


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestReadStatus:
    def test_empty_db_returns_default(self, engine):
        status = SyncStatusStore(engine).read_status()
        assert status.last_sync_time is None
        assert status.last_successful_sync_time is None

    def test_default_is_not_persisted(self, engine):
        SyncStatusStore(engine).read_status()
        with Session(engine) as s:
            assert s.exec(select(SyncStatus)).all() == []

    def test_returns_stored_row(self, engine):
        with Session(engine) as s:
            s.add(SyncStatus(last_sync_time=utc(2025, 1, 15, 3, 0)))
            s.commit()

        status = SyncStatusStore(engine).read_status()
        assert status.last_sync_time.tzinfo is not None
        assert status.last_sync_time == utc(2025, 1, 15, 3, 0)


class TestWriteStatus:
    def test_round_trip(self, engine):
        store = SyncStatusStore(engine)
        when = utc(2025, 1, 15, 3, 0, 12)
        store.write_status(SyncStatus(last_sync_time=when, last_successful_sync_time=when))

        status = store.read_status()
        assert status.last_sync_time == when
        assert status.last_successful_sync_time == when

    def test_current_time_round_trip(self, engine):
        store = SyncStatusStore(engine)
        now = datetime.now(timezone.utc)
        store.write_status(SyncStatus(last_sync_time=now, last_successful_sync_time=now))

        assert store.read_status().last_successful_sync_time == now

    def test_other_timezone_stored_as_utc(self, engine):
        store = SyncStatusStore(engine)
        local = datetime(2025, 1, 15, 5, 0, tzinfo=timezone(timedelta(hours=2)))
        store.write_status(SyncStatus(last_sync_time=local))

        assert store.read_status().last_sync_time == utc(2025, 1, 15, 3, 0)

    def test_second_write_updates_same_row(self, engine):
        store = SyncStatusStore(engine)
        store.write_status(SyncStatus(last_sync_time=utc(2025, 1, 15, 3, 0)))

        status = store.read_status()
        status.last_sync_time = utc(2025, 1, 16, 3, 0)
        store.write_status(status)

        with Session(engine) as s:
            rows = s.exec(select(SyncStatus)).all()
        assert len(rows) == 1
        assert store.read_status().last_sync_time == utc(2025, 1, 16, 3, 0)

    def test_write_of_default_status_inserts(self, engine):
        store = SyncStatusStore(engine)
        status = store.read_status()
        status.last_successful_sync_time = utc(2025, 2, 1)
        store.write_status(status)

        assert store.read_status().last_successful_sync_time == utc(2025, 2, 1)
