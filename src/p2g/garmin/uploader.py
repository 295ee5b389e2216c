"""
GarminUploader — the upload stage of the sync pipeline.

Drains the upload staging directory that converters fill: every staged
activity file is pushed to Garmin Connect and removed from staging once
Garmin accepts it. Files that fail stay staged (and the converted copies stay
in the output directory) so the user can upload them by hand. A file Garmin
already holds (409 Conflict) counts as done and is unstaged too, so re-syncing
the same recent workouts is harmless.
"""
import logging
from pathlib import Path
from typing import List, Optional

import garminconnect
from garth.exc import GarthHTTPError

from p2g.config import Settings
from p2g.garmin.auth import GarminAuth
from p2g.garmin.client import GarminClient

logger = logging.getLogger(__name__)

UPLOADABLE_SUFFIXES = (".fit", ".tcx", ".gpx")

_GARMIN_SERVICE_ERRORS = (
    garminconnect.GarminConnectConnectionError,
    garminconnect.GarminConnectAuthenticationError,
    garminconnect.GarminConnectTooManyRequestsError,
    garminconnect.GarminConnectInvalidFileFormatError,
    GarthHTTPError,
)

HTTP_CONFLICT = 409


class GarminUploadError(RuntimeError):
    """Raised when Garmin Connect rejects or fails an upload."""


class GarminUploader:
    """Uploads staged activity files to Garmin Connect."""

    def __init__(self, settings: Settings, client: Optional[GarminClient] = None):
        """
        Args:
            settings: App settings (upload toggle, output directory, token dir).
            client: GarminClient instance (or AsyncMock in tests).
        """
        self.settings = settings
        self.client = client or GarminClient(GarminAuth(settings.garmin_tokens_dir))

    def staged_files(self) -> List[Path]:
        upload_dir = self.settings.upload_directory
        if not upload_dir.exists():
            return []
        return sorted(
            p for p in upload_dir.iterdir()
            if p.is_file() and p.suffix.lower() in UPLOADABLE_SUFFIXES
        )

    async def upload_all(self) -> int:
        """
        Upload every staged file, in name order.

        Returns:
            Number of files uploaded.

        Raises:
            GarminUploadError: if Garmin Connect rejects a file or errors out.
            NoSessionError / SessionExpiredError: if no usable Garmin session exists.
        """
        if not self.settings.garmin_upload:
            logger.info("Garmin upload is disabled; leaving converted files in place.")
            return 0

        files = self.staged_files()
        if not files:
            logger.info("No files staged for upload.")
            return 0

        await self.client.connect()

        uploaded = 0
        for path in files:
            try:
                await self.client.upload_activity(path)
            except _GARMIN_SERVICE_ERRORS as exc:
                if not is_duplicate_activity(exc):
                    raise GarminUploadError(
                        f"Garmin Connect failed to upload {path.name}: {exc}"
                    ) from exc
                logger.info("%s is already on Garmin Connect; skipping", path.name)
                path.unlink()
                continue
            path.unlink()
            uploaded += 1
            logger.info("Uploaded %s to Garmin Connect", path.name)

        return uploaded


def is_duplicate_activity(exc: Exception) -> bool:
    """Garmin answers 409 Conflict when the activity was uploaded before."""
    if not isinstance(exc, GarthHTTPError):
        return False
    response = getattr(exc.error, "response", None)
    return getattr(response, "status_code", None) == HTTP_CONFLICT
