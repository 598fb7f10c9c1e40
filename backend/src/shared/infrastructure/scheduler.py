import datetime as dt

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from locks.application.services import sweep_expired_locks
from shared.config import settings
from shared.infrastructure.database import async_session
from shared.infrastructure.unit_of_work import DbUnitOfWork
from shared.logging import get_logger

logger = get_logger(__name__)

scheduler = AsyncIOScheduler(timezone=dt.timezone.utc)


async def run_lock_sweep() -> int:
    async with async_session() as session:
        return await sweep_expired_locks(DbUnitOfWork(session))


def start_scheduler() -> None:
    scheduler.add_job(
        run_lock_sweep,
        IntervalTrigger(seconds=settings.LOCK_SWEEP_INTERVAL_SECONDS),
        id="lock_expiry_sweep",
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    scheduler.start()
    logger.info("Scheduler started", sweep_interval_seconds=settings.LOCK_SWEEP_INTERVAL_SECONDS)


def shutdown_scheduler() -> None:
    if scheduler.running:
        scheduler.shutdown(wait=False)
