"""
Async wrapper around the garminconnect library.

garminconnect is synchronous; we run it in a thread pool executor so it
doesn't block the asyncio event loop.
"""
import asyncio
from pathlib import Path
from typing import Any, Optional

import garminconnect

from p2g.garmin.auth import GarminAuth


class GarminClient:
    """
    Thin async wrapper over garminconnect.Garmin.

    Call connect() before upload_activity(). connect() restores the saved
    tokens via GarminAuth; no credentials are needed at runtime.
    """

    def __init__(self, auth: Optional[GarminAuth] = None):
        self._auth = auth or GarminAuth()
        self._api: Optional[garminconnect.Garmin] = None

    @property
    def connected(self) -> bool:
        return self._api is not None

    async def connect(self) -> None:
        """
        Raises:
            NoSessionError: if `python -m p2g setup` has not been run.
            SessionExpiredError: if the saved tokens have expired.
        """
        self._api = await self._run(self._auth.build_client)

    async def upload_activity(self, path: Path) -> Any:
        """Upload one .fit/.tcx/.gpx file. Returns Garmin's response."""
        return await self._run(self._api.upload_activity, str(path))

    async def _run(self, fn, *args, **kwargs):
        """Run a sync garminconnect call in the thread pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: fn(*args, **kwargs))
