"""JSON converter: a normalized per-workout summary, for archiving and debugging."""
import json
import logging
from pathlib import Path
from typing import Any, Dict

from p2g.config import Settings
from p2g.converters.base import (
    distance_meters,
    get_summary,
    load_downloaded_workouts,
    workout_filename,
    workout_start_time,
    workout_title,
)

logger = logging.getLogger(__name__)


class JsonConverter:
    """Writes {output_directory}/json/<workout>.json. Nothing is staged for upload."""

    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def format_directory(self) -> Path:
        return self.settings.output_directory / "json"

    def convert(self) -> None:
        workouts = load_downloaded_workouts(self.settings.working_directory)
        if not workouts:
            logger.info("No downloaded workouts to convert to JSON.")
            return

        self.format_directory.mkdir(parents=True, exist_ok=True)
        for data in workouts:
            workout = data["workout"]
            path = self.format_directory / f"{workout_filename(workout)}.json"
            path.write_text(
                json.dumps(normalize_workout(workout, data["workout_samples"]), indent=2)
            )
        logger.info("Wrote %d JSON workout summaries", len(workouts))


def normalize_workout(workout: Dict[str, Any], samples: Dict[str, Any]) -> Dict[str, Any]:
    calories = get_summary(samples, "calories")
    start = workout_start_time(workout)
    end = workout.get("end_time")
    return {
        "id": workout.get("id"),
        "title": workout_title(workout),
        "fitness_discipline": workout.get("fitness_discipline"),
        "start_time_utc": start.isoformat(),
        "duration_seconds": (int(end) - int(workout["start_time"])) if end else None,
        "distance_meters": round(distance_meters(samples), 2),
        "calories": (calories or {}).get("value"),
        "sample_count": len(samples.get("seconds_since_pedaling_start") or []),
    }
