"""
PelotonService — the download stage of the sync pipeline.

Materializes the most recent completed Peloton workouts as JSON files in the
working directory, one file per workout:

    {working_directory}/{workout_id}.json
    {"workout": <GET /api/workout/{id}>, "workout_samples": <performance_graph>}

The working directory is wiped first so converters only ever see this run's
downloads.
"""
import json
import logging
import shutil
from pathlib import Path
from typing import List, Optional

from p2g.config import Settings
from p2g.peloton.client import PelotonClient

logger = logging.getLogger(__name__)

COMPLETE_STATUS = "COMPLETE"


class PelotonService:
    """Downloads recent Peloton workouts to disk."""

    def __init__(self, settings: Settings, client: Optional[PelotonClient] = None):
        """
        Args:
            settings: App settings (credentials, working directory).
            client: PelotonClient instance (or AsyncMock in tests). When omitted,
                    a fresh client is opened and closed around each download.
        """
        self.settings = settings
        self.client = client

    async def download_latest_workouts(self, num_workouts: int) -> List[Path]:
        """
        Fetch the `num_workouts` most recent workouts and save the completed ones.

        Returns:
            Paths of the JSON files written.

        Raises:
            ValueError: if num_workouts is not positive.
            PelotonApiError: on any Peloton API failure.
        """
        if num_workouts <= 0:
            raise ValueError(f"num_workouts must be positive, got {num_workouts}")

        working_dir = self.settings.working_directory
        _reset_directory(working_dir)

        if self.client is not None:
            return await self._download(self.client, working_dir, num_workouts)

        async with PelotonClient(
            self.settings.peloton_email,
            self.settings.peloton_password,
            base_url=self.settings.peloton_api_url,
        ) as client:
            return await self._download(client, working_dir, num_workouts)

    async def _download(
        self, client: PelotonClient, working_dir: Path, num_workouts: int
    ) -> List[Path]:
        await client.login()
        recent = await client.get_recent_workouts(limit=num_workouts)
        logger.info("Peloton returned %d recent workouts", len(recent))

        written: List[Path] = []
        for summary in recent:
            workout_id = summary.get("id")
            if not workout_id:
                continue
            if summary.get("status") != COMPLETE_STATUS:
                logger.info(
                    "Skipping workout %s: status is %s, not %s",
                    workout_id, summary.get("status"), COMPLETE_STATUS,
                )
                continue

            workout = await client.get_workout(workout_id)
            samples = await client.get_workout_samples(workout_id)

            path = working_dir / f"{workout_id}.json"
            path.write_text(json.dumps({"workout": workout, "workout_samples": samples}))
            written.append(path)
            logger.debug("Downloaded workout %s to %s", workout_id, path)

        return written


def _reset_directory(path: Path) -> None:
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True, exist_ok=True)
