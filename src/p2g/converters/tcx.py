"""
TCX converter: turns downloaded Peloton workouts into Garmin Training Center
XML files that Garmin Connect accepts as uploads.

Each workout becomes one Activity with a single Lap. The performance graph
(one sample per `every_n` seconds) becomes the Lap's Track:

  Peloton metric slug   → TCX element
  heart_rate            → Trackpoint/HeartRateBpm/Value
  cadence               → Trackpoint/Cadence (cycling only)
  speed (mph or kph)    → Extensions/TPX/Speed (m/s) and cumulative DistanceMeters
  output (watts)        → Extensions/TPX/Watts

Files are written to {output_directory}/tcx/. When Garmin upload is enabled a
copy is also staged in the upload directory for the upload stage.
"""
import logging
import shutil
import xml.etree.ElementTree as ET
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

from p2g.config import Settings
from p2g.converters.base import (
    distance_meters,
    get_metric,
    get_summary,
    load_downloaded_workouts,
    speed_to_ms,
    workout_filename,
    workout_start_time,
    workout_title,
)

logger = logging.getLogger(__name__)

TCX_NS = "http://www.garmin.com/xmlschemas/TrainingCenterDatabase/v2"
EXT_NS = "http://www.garmin.com/xmlschemas/ActivityExtension/v2"

ET.register_namespace("", TCX_NS)
ET.register_namespace("ax", EXT_NS)

_SPORTS = {
    "cycling": "Biking",
    "running": "Running",
    "walking": "Running",
}


def tcx_sport(fitness_discipline: Optional[str]) -> str:
    """Map a Peloton fitness_discipline onto one of TCX's three sports."""
    return _SPORTS.get(fitness_discipline or "", "Other")


class TcxConverter:
    """Writes one .tcx file per downloaded workout."""

    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def format_directory(self) -> Path:
        return self.settings.output_directory / "tcx"

    def convert(self) -> None:
        """
        Convert every workout in the working directory.

        Raises:
            ConversionError: if a workout is missing its id or start time.
        """
        workouts = load_downloaded_workouts(self.settings.working_directory)
        if not workouts:
            logger.info("No downloaded workouts to convert to TCX.")
            return

        stage = self.settings.garmin_upload
        self.format_directory.mkdir(parents=True, exist_ok=True)
        if stage:
            self.settings.upload_directory.mkdir(parents=True, exist_ok=True)

        for data in workouts:
            workout = data["workout"]
            tree = build_tcx(workout, data["workout_samples"])
            path = self.format_directory / f"{workout_filename(workout)}.tcx"
            tree.write(str(path), encoding="UTF-8", xml_declaration=True)
            if stage:
                shutil.copy2(path, self.settings.upload_directory / path.name)
            logger.info("Converted workout %s to %s", workout.get("id"), path.name)


def build_tcx(workout: Dict[str, Any], samples: Dict[str, Any]) -> ET.ElementTree:
    """Build the TCX document for one workout."""
    start = workout_start_time(workout)
    sport = tcx_sport(workout.get("fitness_discipline"))

    root = ET.Element(f"{{{TCX_NS}}}TrainingCenterDatabase")
    activities = ET.SubElement(root, _tag("Activities"))
    activity = ET.SubElement(activities, _tag("Activity"), Sport=sport)
    _text(activity, "Id", _iso(start))

    lap = ET.SubElement(activity, _tag("Lap"), StartTime=_iso(start))
    _text(lap, "TotalTimeSeconds", str(_total_seconds(workout, samples)))
    _text(lap, "DistanceMeters", f"{distance_meters(samples):.2f}")
    calories = get_summary(samples, "calories")
    _text(lap, "Calories", str(int(round((calories or {}).get("value") or 0))))
    _text(lap, "Intensity", "Active")
    _text(lap, "TriggerMethod", "Manual")

    offsets = samples.get("seconds_since_pedaling_start") or []
    if offsets:
        _append_track(lap, start, offsets, samples, sport)

    _text(activity, "Notes", workout_title(workout))
    return ET.ElementTree(root)


def _append_track(lap, start, offsets, samples, sport) -> None:
    heart_rate = _values(samples, "heart_rate")
    cadence = _values(samples, "cadence")
    output = _values(samples, "output")
    speed_metric = get_metric(samples, "speed")
    speed = (speed_metric or {}).get("values") or []
    speed_unit = (speed_metric or {}).get("display_unit")

    track = ET.SubElement(lap, _tag("Track"))
    distance = 0.0
    previous_offset = 0
    for i, offset in enumerate(offsets):
        point = ET.SubElement(track, _tag("Trackpoint"))
        _text(point, "Time", _iso(start + timedelta(seconds=offset)))

        speed_ms = None
        if i < len(speed) and speed[i] is not None:
            speed_ms = speed_to_ms(float(speed[i]), speed_unit)
            distance += speed_ms * max(0, offset - previous_offset)
            _text(point, "DistanceMeters", f"{distance:.2f}")
        previous_offset = offset

        hr = _at(heart_rate, i)
        if hr is not None:
            hr_el = ET.SubElement(point, _tag("HeartRateBpm"))
            _text(hr_el, "Value", str(int(hr)))

        cad = _at(cadence, i)
        if cad is not None and sport == "Biking":
            _text(point, "Cadence", str(int(cad)))

        watts = _at(output, i)
        if speed_ms is not None or watts is not None:
            ext = ET.SubElement(point, _tag("Extensions"))
            tpx = ET.SubElement(ext, f"{{{EXT_NS}}}TPX")
            if speed_ms is not None:
                ET.SubElement(tpx, f"{{{EXT_NS}}}Speed").text = f"{speed_ms:.3f}"
            if watts is not None:
                ET.SubElement(tpx, f"{{{EXT_NS}}}Watts").text = str(int(watts))


def _total_seconds(workout: Dict[str, Any], samples: Dict[str, Any]) -> int:
    if samples.get("duration"):
        return int(samples["duration"])
    start, end = workout.get("start_time"), workout.get("end_time")
    if start and end:
        return max(0, int(end) - int(start))
    return 0


def _values(samples: Dict[str, Any], slug: str) -> List[Any]:
    metric = get_metric(samples, slug)
    return (metric or {}).get("values") or []


def _at(values: List[Any], i: int) -> Optional[Any]:
    return values[i] if i < len(values) else None


def _tag(name: str) -> str:
    return f"{{{TCX_NS}}}{name}"


def _text(parent, name: str, value: str):
    el = ET.SubElement(parent, _tag(name))
    el.text = value
    return el


def _iso(dt) -> str:
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ")
