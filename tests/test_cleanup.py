"""
Tests for the retention cleanup job and its scheduler.
"""
import logging
from datetime import timedelta

from apscheduler.triggers.cron import CronTrigger
from sqlalchemy import select

from jobboard.db import utcnow
from jobboard.models.job import Job
from jobboard.services import cleanup
from jobboard.services.cleanup import CLEANUP_JOB_ID, purge_stale_jobs, run_cleanup, start_cleanup_scheduler
from jobboard.services.ingestion import build_job

BASE = {
    "company": "Acme",
    "location": "Pune",
    "description": "Work",
    "applyLink": "https://acme.example/apply",
}


def _add(session, title, posted_date):
    job = build_job({**BASE, "title": title})
    job.posted_date = posted_date
    session.add(job)
    session.commit()


class TestPurgeStaleJobs:

    def test_only_strictly_older_than_threshold_is_deleted(self, session):
        now = utcnow()
        _add(session, "eleven", now - timedelta(days=11))
        _add(session, "ten", now - timedelta(days=10))
        _add(session, "nine", now - timedelta(days=9))

        assert purge_stale_jobs(session, now=now) == 1
        remaining = sorted(session.scalars(select(Job.title)).all())
        assert remaining == ["nine", "ten"]

    def test_nothing_to_delete(self, session):
        _add(session, "fresh", utcnow())
        assert purge_stale_jobs(session) == 0


class TestRunCleanup:

    def test_uses_its_own_session(self, session):
        _add(session, "ancient", utcnow() - timedelta(days=30))
        assert run_cleanup() == 1

    def test_failure_is_logged_not_raised(self, app, monkeypatch, caplog):
        def broken(*args, **kwargs):
            raise RuntimeError("store unavailable")

        monkeypatch.setattr(cleanup, "purge_stale_jobs", broken)
        with caplog.at_level(logging.ERROR, logger="jobboard"):
            assert run_cleanup() is None
        assert "Job cleanup failed" in caplog.text


class TestScheduler:

    def test_registers_daily_cron_job(self, app):
        scheduler = start_cleanup_scheduler(hour=2, minute=30, timezone="Asia/Kolkata")
        try:
            job = scheduler.get_job(CLEANUP_JOB_ID)
            assert job is not None
            assert isinstance(job.trigger, CronTrigger)
            assert str(job.trigger.timezone) == "Asia/Kolkata"
        finally:
            scheduler.shutdown(wait=False)

    def test_disabled_in_tests(self, app):
        assert "cleanup_scheduler" not in app.extensions
