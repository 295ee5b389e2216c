"""Sync status (persisted) and sync result (per-run) models."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

SYNC_STATUS_ID = 1


class SyncStatus(SQLModel, table=True):
    """Single-row record of when the pipeline last ran to completion. Times are UTC."""

    id: int = Field(default=SYNC_STATUS_ID, primary_key=True)
    last_sync_time: Optional[datetime] = Field(
        default=None, sa_type=DateTime(timezone=True)
    )
    last_successful_sync_time: Optional[datetime] = Field(
        default=None, sa_type=DateTime(timezone=True)
    )


class ErrorResponse(BaseModel):
    message: str


class SyncResult(BaseModel):
    """
    Outcome of one sync run.

    Stage flags are tri-state: True/False once the stage has run, None when
    an earlier stage failed and the stage was never attempted.
    """

    overall_success: bool = False
    download_succeeded: Optional[bool] = None
    convert_succeeded: Optional[bool] = None
    upload_succeeded: Optional[bool] = None
    errors: List[ErrorResponse] = []

    def add_error(self, message: str) -> None:
        self.errors.append(ErrorResponse(message=message))


class SyncStatusResponse(BaseModel):
    last_sync_time: Optional[datetime]
    last_successful_sync_time: Optional[datetime]
