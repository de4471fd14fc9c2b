"""
APScheduler setup.

Recurring report jobs run on an ``AsyncIOScheduler`` sharing the
application's event loop, so a firing waiting on the database or SMTP does
not hold up other jobs or in-flight requests.
"""

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from app.core.config import SchedulerSettings
from app.core.logging import logger


def create_scheduler(scheduler_settings: SchedulerSettings) -> AsyncIOScheduler:
    """
    Build the scheduler without starting it.

    Args:
        scheduler_settings: Timezone and misfire policy

    Returns:
        AsyncIOScheduler instance
    """
    return AsyncIOScheduler(
        timezone=scheduler_settings.timezone,
        job_defaults={
            "coalesce": True,
            "max_instances": 1,
            "misfire_grace_time": scheduler_settings.misfire_grace_time,
        },
    )


def start_scheduler(scheduler: AsyncIOScheduler, enabled: bool = True) -> None:
    """
    Start the scheduler on the running event loop.

    Jobs added while the scheduler is stopped stay pending and are armed on
    start.
    """
    if not enabled:
        logger.info("Scheduler disabled by configuration; jobs will not fire")
        return
    if scheduler.running:
        return

    scheduler.start()
    logger.info(f"Scheduler started with {len(scheduler.get_jobs())} job(s)")


def stop_scheduler(scheduler: AsyncIOScheduler) -> None:
    """
    Stop the scheduler without waiting for running jobs.
    """
    if scheduler and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
