"""
Main entrypoint: one-off sync, Garmin setup, or the scheduler daemon.

FastAPI runs separately under uvicorn.

Usage:
    python -m p2g setup                       # one-time Garmin auth setup
    python -m p2g sync [--num-workouts N]     # run one sync now
    python -m p2g                             # start the scheduler
    uvicorn p2g.api.main:app --host 0.0.0.0 --port 8000  # starts API
"""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from p2g.config import get_settings

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def _run_setup() -> None:
    from p2g.scripts.setup import run_setup
    run_setup()


async def _run_once(num_workouts: Optional[int]) -> int:
    from p2g.sync.factory import build_sync_service, sync_lock

    settings = get_settings()
    service = build_sync_service(settings)
    async with sync_lock:
        result = await service.sync(num_workouts or settings.num_workouts)
    print(result.model_dump_json(indent=2))
    return 0 if result.overall_success else 1


async def _run_scheduler() -> None:
    from p2g.db.engine import get_engine
    from p2g.scheduler.jobs import build_scheduler

    settings = get_settings()
    scheduler = build_scheduler(get_engine())
    scheduler.start()
    logger.info(
        "Scheduler started (daily sync at %02d:%02d, %d workouts)",
        settings.sync_hour, settings.sync_minute, settings.num_workouts,
    )

    try:
        await asyncio.Event().wait()
    except (KeyboardInterrupt, SystemExit, asyncio.CancelledError):
        logger.info("Shutting down...")
    finally:
        scheduler.shutdown()
        logger.info("Goodbye.")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="p2g", description="Sync Peloton workouts to Garmin Connect.")
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("setup", help="Log in to Garmin Connect and save the session tokens.")
    sync_parser = sub.add_parser("sync", help="Run one sync now.")
    sync_parser.add_argument("--num-workouts", type=int, default=None)
    args = parser.parse_args(argv)

    if args.command == "setup":
        _run_setup()
        return 0

    _configure_logging()
    if args.command == "sync":
        if args.num_workouts is not None and args.num_workouts <= 0:
            parser.error("--num-workouts must be positive")
        return asyncio.run(_run_once(args.num_workouts))

    asyncio.run(_run_scheduler())
    return 0


if __name__ == "__main__":
    sys.exit(main())
