"""
APScheduler job for the recurring Peloton → Garmin sync.

The pipeline never retries within a run; this job is the retry. A run that
fails today is simply attempted again at the next scheduled time.

The scheduler runs inside the `python -m p2g` process (wired in __main__.py).
"""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from p2g.config import get_settings

logger = logging.getLogger(__name__)


def build_scheduler(engine) -> AsyncIOScheduler:
    """
    Create and configure the APScheduler.

    Args:
        engine: SQLAlchemy engine for the sync status store.

    Returns:
        Configured AsyncIOScheduler (not yet started).
    """
    settings = get_settings()
    scheduler = AsyncIOScheduler()

    scheduler.add_job(
        _scheduled_sync,
        trigger="cron",
        hour=settings.sync_hour,
        minute=settings.sync_minute,
        id="scheduled_sync",
        replace_existing=True,
        kwargs={"engine": engine},
    )

    return scheduler


async def _scheduled_sync(engine) -> None:
    """Scheduled job: run one sync. Never raises, so the scheduler stays alive."""
    from p2g.sync.factory import build_sync_service, sync_lock

    settings = get_settings()
    if sync_lock.locked():
        logger.warning("Skipping scheduled sync: a sync is already in progress.")
        return

    try:
        service = build_sync_service(settings, engine=engine)
        async with sync_lock:
            result = await service.sync(settings.num_workouts)
    except Exception as exc:
        logger.error("Scheduled sync failed: %s", exc)
        return

    if result.overall_success:
        logger.info("Scheduled sync succeeded.")
    else:
        logger.error(
            "Scheduled sync failed: %s",
            "; ".join(e.message for e in result.errors),
        )
