"""
Daily purge of stale job postings.

Runs on an APScheduler background thread, independent of request handling.
A failed run is logged and the next scheduled run tries again.
"""
from __future__ import annotations
import atexit
import logging
from datetime import datetime, timedelta
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy import delete
from sqlalchemy.orm import Session

from jobboard.db import SessionLocal, utcnow
from jobboard.models.job import Job

logger = logging.getLogger(__name__)

CLEANUP_JOB_ID = "job_cleanup"

def purge_stale_jobs(s: Session, now: Optional[datetime] = None, days: int = 10) -> int:
    """Delete postings whose postedDate is strictly before now - ``days``."""
    threshold = (now or utcnow()) - timedelta(days=days)
    result = s.execute(delete(Job).where(Job.posted_date < threshold))
    s.commit()
    deleted = result.rowcount or 0
    logger.info("Deleted %s jobs older than %s days", deleted, days)
    if deleted:
        logger.info("Deleted jobs posted before %s", threshold.isoformat())
    return deleted

def run_cleanup(days: int = 10) -> Optional[int]:
    """Scheduled entry point; never raises."""
    logger.info("Running job cleanup")
    try:
        with SessionLocal() as s:
            return purge_stale_jobs(s, days=days)
    except Exception:
        logger.exception("Job cleanup failed, will retry on the next run")
        return None

def start_cleanup_scheduler(hour: int = 0, minute: int = 0, timezone: str = "Asia/Kolkata",
                            days: int = 10) -> BackgroundScheduler:
    scheduler = BackgroundScheduler(timezone=timezone)
    scheduler.add_job(
        run_cleanup,
        trigger=CronTrigger(hour=hour, minute=minute, timezone=timezone),
        kwargs={"days": days},
        id=CLEANUP_JOB_ID,
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    scheduler.start()
    atexit.register(_shutdown, scheduler)
    logger.info("Job cleanup scheduled daily at %02d:%02d %s", hour, minute, timezone)
    return scheduler

def _shutdown(scheduler: BackgroundScheduler) -> None:
    if scheduler.running:
        scheduler.shutdown(wait=False)
