"""
Shared pieces for the convert stage.

A converter is anything with a `convert()` method that reads the workouts
the download stage left in the working directory and writes output files.
Converters are run one after another by the sync pipeline; a failure in one
stops the rest.
"""
import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

METERS_PER_MILE = 1609.344
METERS_PER_KM = 1000.0


class ConversionError(RuntimeError):
    """Raised when a downloaded workout cannot be converted."""


class Converter(Protocol):
    def convert(self) -> None:
        ...


def load_downloaded_workouts(working_directory: Path) -> List[Dict[str, Any]]:
    """
    Load every downloaded workout JSON from the working directory.

    Returns:
        List of {"workout": ..., "workout_samples": ...} dicts, sorted by file name.

    Raises:
        ConversionError: if a file is not valid JSON or lacks the "workout" key.
    """
    if not working_directory.exists():
        return []

    loaded: List[Dict[str, Any]] = []
    for path in sorted(working_directory.glob("*.json")):
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as exc:
            raise ConversionError(f"Downloaded workout {path.name} is not valid JSON") from exc
        if not isinstance(data, dict) or "workout" not in data:
            raise ConversionError(f"Downloaded workout {path.name} has no workout data")
        data.setdefault("workout_samples", {})
        loaded.append(data)
    return loaded


def workout_start_time(workout: Dict[str, Any]) -> datetime:
    """Peloton start_time is epoch seconds (UTC)."""
    raw = workout.get("start_time")
    if raw is None:
        raise ConversionError(f"Workout {workout.get('id')} has no start_time")
    return datetime.fromtimestamp(int(raw), tz=timezone.utc)


def workout_title(workout: Dict[str, Any]) -> str:
    ride = workout.get("ride") or {}
    return ride.get("title") or workout.get("name") or "Peloton Workout"


def workout_filename(workout: Dict[str, Any]) -> str:
    """File stem like '2025-01-15_07-30-20_min_HIIT_Ride-abc123'."""
    workout_id = workout.get("id")
    if not workout_id:
        raise ConversionError("Workout has no id")
    start = workout_start_time(workout)
    title = re.sub(r"[^A-Za-z0-9]+", "_", workout_title(workout)).strip("_")
    return f"{start:%Y-%m-%d_%H-%M}-{title}-{workout_id}"


def get_summary(samples: Dict[str, Any], slug: str) -> Optional[Dict[str, Any]]:
    """Find a performance-graph summary entry (e.g. 'distance', 'calories')."""
    for summary in samples.get("summaries") or []:
        if summary.get("slug") == slug:
            return summary
    return None


def get_metric(samples: Dict[str, Any], slug: str) -> Optional[Dict[str, Any]]:
    """Find a performance-graph metric series (e.g. 'heart_rate', 'cadence')."""
    for metric in samples.get("metrics") or []:
        if metric.get("slug") == slug:
            return metric
    return None


def distance_meters(samples: Dict[str, Any]) -> float:
    summary = get_summary(samples, "distance")
    if not summary or summary.get("value") is None:
        return 0.0
    return _to_meters(float(summary["value"]), summary.get("display_unit"))


def speed_to_ms(value: float, unit: Optional[str]) -> float:
    """Convert a mph/kph speed sample to metres per second."""
    return _to_meters(value, "km" if unit == "kph" else "mi") / 3600.0


def _to_meters(value: float, unit: Optional[str]) -> float:
    if unit == "km":
        return value * METERS_PER_KM
    return value * METERS_PER_MILE
