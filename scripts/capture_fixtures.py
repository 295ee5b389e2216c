"""
Capture real Peloton API responses and save them as test fixtures.

Run with PELOTON_EMAIL / PELOTON_PASSWORD set (or in .env):

    python scripts/capture_fixtures.py [--workout-id WORKOUT_ID]

If no workout ID is given, the most recent completed workout is used.

Outputs (overwrite tests/fixtures/):
    peloton_workout.json              — from GET /api/workout/{id}
    peloton_performance_graph.json    — from GET /api/workout/{id}/performance_graph

These fixtures are used by the converter tests so they exercise real
response schemas, not hand-crafted guesses.
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path

# Allow running from repo root without installing the package
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from p2g.config import get_settings
from p2g.peloton.client import PelotonClient

FIXTURES_DIR = Path(__file__).parent.parent / "tests" / "fixtures"


def _save(name: str, data: object) -> None:
    path = FIXTURES_DIR / name
    path.write_text(json.dumps(data, indent=2, default=str))
    print(f"  Saved {path} ({path.stat().st_size} bytes)")


async def _capture(workout_id):
    settings = get_settings()
    async with PelotonClient(
        settings.peloton_email, settings.peloton_password, base_url=settings.peloton_api_url
    ) as client:
        print("Logging in to Peloton...")
        await client.login()

        if not workout_id:
            recent = await client.get_recent_workouts(limit=10)
            complete = [w for w in recent if w.get("status") == "COMPLETE"]
            if not complete:
                print("No completed workouts found in the last 10.")
                sys.exit(1)
            workout_id = complete[0]["id"]
        print(f"Using workout {workout_id}\n")

        workout = await client.get_workout(workout_id)
        _save("peloton_workout.json", workout)
        samples = await client.get_workout_samples(workout_id)
        _save("peloton_performance_graph.json", samples)

    print("\nCheck the saved files for any PII before committing.")
    print(f"  Discipline: {workout.get('fitness_discipline', 'N/A')}")
    print(f"  Title:      {(workout.get('ride') or {}).get('title', 'N/A')}")
    print(f"  Samples:    {len(samples.get('seconds_since_pedaling_start') or [])}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Capture real Peloton API fixtures")
    parser.add_argument("--workout-id", help="Peloton workout ID (default: most recent completed)")
    args = parser.parse_args()
    asyncio.run(_capture(args.workout_id))


if __name__ == "__main__":
    main()
