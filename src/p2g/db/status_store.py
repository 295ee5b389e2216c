"""
Durable storage for the single SyncStatus row.

The row is never created by the pipeline up front: read_status() hands back
an unsaved default on first run, and write_status() upserts it once the run
has fully succeeded.

Timestamps are UTC. SQLite drops tzinfo on the way in, so naive values read
back (or handed in) are taken to be UTC.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Session

from p2g.models.sync import SYNC_STATUS_ID, SyncStatus


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SyncStatusStore:
    """Reads and writes SyncStatus through a SQLModel engine."""

    def __init__(self, engine):
        """
        Args:
            engine: SQLAlchemy engine (SQLModel create_engine result).
        """
        self.engine = engine

    def read_status(self) -> SyncStatus:
        """Return the stored status, or a default one if nothing has been saved yet."""
        with Session(self.engine) as s:
            status = s.get(SyncStatus, SYNC_STATUS_ID)
            if status is None:
                return SyncStatus()
            s.expunge(status)
        status.last_sync_time = _as_utc(status.last_sync_time)
        status.last_successful_sync_time = _as_utc(status.last_successful_sync_time)
        return status

    def write_status(self, status: SyncStatus) -> None:
        """Insert or update the status row."""
        status.id = SYNC_STATUS_ID
        status.last_sync_time = _as_utc(status.last_sync_time)
        status.last_successful_sync_time = _as_utc(status.last_successful_sync_time)
        with Session(self.engine) as s:
            s.merge(status)
            s.commit()
