"""Sync trigger and status routes."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from p2g.config import get_settings
from p2g.db.engine import get_engine
from p2g.db.status_store import SyncStatusStore
from p2g.models.sync import SyncResult, SyncStatusResponse
from p2g.sync.factory import build_sync_service, sync_lock
from p2g.sync.service import SyncService

router = APIRouter()


class SyncRequest(BaseModel):
    num_workouts: Optional[int] = Field(default=None, gt=0)  # None → NUM_WORKOUTS setting


def get_sync_service() -> SyncService:
    """FastAPI dependency; overridden in tests."""
    return build_sync_service()


def get_status_store() -> SyncStatusStore:
    return SyncStatusStore(get_engine())


@router.post("", response_model=SyncResult)
async def trigger_sync(
    request: SyncRequest,
    service: SyncService = Depends(get_sync_service),
):
    """
    Run one Peloton → Garmin sync and return its result.

    200 when every stage succeeded, 500 (same body) when a stage failed,
    409 when another sync is already running in this process.
    """
    if sync_lock.locked():
        raise HTTPException(status_code=409, detail="A sync is already in progress.")

    num_workouts = request.num_workouts or get_settings().num_workouts
    async with sync_lock:
        result = await service.sync(num_workouts)

    if not result.overall_success:
        return JSONResponse(status_code=500, content=result.model_dump(mode="json"))
    return result


@router.get("/status", response_model=SyncStatusResponse)
def sync_status(store: SyncStatusStore = Depends(get_status_store)):
    """Return when the pipeline last completed successfully."""
    status = store.read_status()
    return SyncStatusResponse(
        last_sync_time=status.last_sync_time,
        last_successful_sync_time=status.last_successful_sync_time,
    )
