# growwsim/scheduler.py
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from pytz import timezone

from growwsim.config import settings
from growwsim.database import get_db
from growwsim.services.market_data import simulate_market_tick
from growwsim.utils.decorators import job_runner
from growwsim.utils.logger import logger

scheduler: Optional[AsyncIOScheduler] = None


@job_runner("Market Price Tick")
async def run_market_tick():
    return await simulate_market_tick(get_db())


JOBS = [
    {
        "id": "market_tick",
        "func": run_market_tick,
        "cron": settings.PRICE_TICK_CRON,
    },
]


def build_trigger(cron: str, tz) -> CronTrigger:
    """Cron strings are "hour minute day_of_week"; "*" as day_of_week means weekdays."""
    hour, minute, day_of_week = cron.split()
    return CronTrigger(
        hour=hour,
        minute=minute,
        day_of_week=day_of_week if day_of_week != "*" else "mon-fri",
        timezone=tz,
    )


def start_scheduler() -> AsyncIOScheduler:
    global scheduler

    market_tz = timezone(settings.MARKET_TIMEZONE)
    scheduler = AsyncIOScheduler(timezone=market_tz)

    for job in JOBS:
        scheduler.add_job(
            job["func"],
            build_trigger(job["cron"], market_tz),
            id=job["id"],
            name=job["id"],
            replace_existing=True,
        )
        logger.info(f"Scheduled job '{job['id']}' with trigger: {job['cron']}")

    scheduler.start()
    logger.info("Scheduler started")
    return scheduler


def shutdown_scheduler():
    global scheduler
    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
    scheduler = None
