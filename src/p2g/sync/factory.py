"""Wires SyncService to its concrete collaborators."""
import asyncio
from typing import List, Optional

from p2g.config import Settings, get_settings
from p2g.converters.base import Converter
from p2g.converters.json_converter import JsonConverter
from p2g.converters.tcx import TcxConverter
from p2g.db.status_store import SyncStatusStore
from p2g.garmin.uploader import GarminUploader
from p2g.peloton.service import PelotonService
from p2g.sync.service import SyncService

# Held by every in-process caller around SyncService.sync(). The status
# read-modify-write is not safe across overlapping runs.
sync_lock = asyncio.Lock()


def build_converters(settings: Settings) -> List[Converter]:
    """Enabled converters, in the order they run. TCX first: it feeds the upload."""
    converters: List[Converter] = []
    if settings.format_tcx:
        converters.append(TcxConverter(settings))
    if settings.format_json:
        converters.append(JsonConverter(settings))
    return converters


def build_sync_service(settings: Optional[Settings] = None, engine=None) -> SyncService:
    settings = settings or get_settings()
    if engine is None:
        from p2g.db.engine import get_engine
        engine = get_engine()

    return SyncService(
        settings=settings,
        peloton=PelotonService(settings),
        converters=build_converters(settings),
        uploader=GarminUploader(settings),
        store=SyncStatusStore(engine),
    )
