"""
SyncService — runs the Peloton → Garmin pipeline once.

Flow for a single run:
  1. Read SyncStatus from the store
  2. Download the latest N workouts from Peloton
  3. Run every converter, in order
  4. Upload the converted files to Garmin Connect
  5. Stamp last_sync_time / last_successful_sync_time and write SyncStatus

Each stage runs only if the previous one succeeded. The first failure is
logged, recorded on the SyncResult and ends the run; nothing is retried here
(the next scheduled run is the retry). sync() never raises: callers always get
a SyncResult back.

SyncStatus is written only when all three stages succeed, so a failed run
leaves last_sync_time untouched.
"""
import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from p2g.converters.base import Converter
from p2g.garmin.uploader import GarminUploadError
from p2g.models.sync import SyncResult

DOWNLOAD_ERROR = "Failed to download workouts from Peloton. Check logs for more details."
CONVERT_ERROR = "Failed to convert workouts. Check logs for more details."
UPLOAD_ERROR = "Failed to upload to Garmin Connect. Check logs for more details."
STATUS_ERROR = "Failed to read or save sync status. Check logs for more details."


class SyncService:
    """Orchestrates download → convert → upload for one sync run."""

    def __init__(
        self,
        settings,
        peloton,
        converters: Sequence[Converter],
        uploader,
        store,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            settings: Settings instance (only output_directory is read, for the
                      manual-upload hint).
            peloton: Download stage; exposes async download_latest_workouts(n).
            converters: Convert stage; each exposes convert().
            uploader: Upload stage; exposes async upload_all().
            store: SyncStatus store; exposes read_status() / write_status(status).
            logger: Logger for stage progress and failures. Defaults to this
                    module's logger.
        """
        self.settings = settings
        self.peloton = peloton
        self.converters = list(converters)
        self.uploader = uploader
        self.store = store
        self.logger = logger or logging.getLogger(__name__)

    async def sync(self, num_workouts: int) -> SyncResult:
        """
        Run the pipeline once.

        Args:
            num_workouts: How many recent Peloton workouts to fetch.

        Returns:
            SyncResult describing which stages ran and whether they succeeded.
        """
        result = SyncResult()
        try:
            status = self.store.read_status()
        except Exception:
            self.logger.exception("Failed to read sync status.")
            result.add_error(STATUS_ERROR)
            return result

        self.logger.info("Downloading %d most recent workouts from Peloton.", num_workouts)
        try:
            await self.peloton.download_latest_workouts(num_workouts)
            result.download_succeeded = True
        except Exception:
            self.logger.exception("Failed to download workouts from Peloton.")
            result.download_succeeded = False
            result.add_error(DOWNLOAD_ERROR)
            return result

        self.logger.info("Converting workouts with %d converter(s).", len(self.converters))
        try:
            for converter in self.converters:
                converter.convert()
            result.convert_succeeded = True
        except Exception:
            self.logger.exception("Failed to convert workouts.")
            result.convert_succeeded = False
            result.add_error(CONVERT_ERROR)
            return result

        self.logger.info("Uploading workouts to Garmin Connect.")
        try:
            await self.uploader.upload_all()
            result.upload_succeeded = True
        except GarminUploadError:
            self.logger.exception("Garmin Connect returned an error. Failed to upload workouts.")
            self._warn_manual_upload()
            result.upload_succeeded = False
            result.add_error(UPLOAD_ERROR)
            return result
        except Exception:
            self.logger.exception("Unexpected error while uploading workouts to Garmin Connect.")
            result.upload_succeeded = False
            result.add_error(UPLOAD_ERROR)
            return result

        now = datetime.now(timezone.utc)
        status.last_sync_time = now
        status.last_successful_sync_time = now
        try:
            self.store.write_status(status)
        except Exception:
            # Workouts are already on Garmin; only the bookkeeping failed.
            self.logger.exception("Failed to save sync status.")
            result.add_error(STATUS_ERROR)

        result.overall_success = True
        self.logger.info("Sync complete.")
        return result

    def _warn_manual_upload(self) -> None:
        self.logger.warning(
            "Upload to Garmin Connect failed. You can find the converted files at %s. "
            "Upload them manually to Garmin Connect, or wait for the next sync to try again.",
            self.settings.output_directory,
        )
