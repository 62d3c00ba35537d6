"""Periodic jobs for the long-running ``watch`` mode."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

if TYPE_CHECKING:
    from .app import FoodKeeper

logger = logging.getLogger(__name__)


class SyncScheduler:
    """Runs grocery sync and reminder re-arming on a timer.

    Shares the reminder service's APScheduler instance, so armed reminders
    fire while this is running.
    """

    def __init__(self, app: FoodKeeper) -> None:
        self._app = app
        self._scheduler = app.reminders.scheduler
        self._running = False

    def setup_jobs(self) -> None:
        """Register scheduled jobs based on config."""
        sync_cfg = self._app.config.sync

        # Job 1: regular foreground-style refresh
        self._scheduler.add_job(
            self._job_refresh,
            trigger=IntervalTrigger(minutes=sync_cfg.interval_minutes),
            id="refresh",
            name="Grocery sync and reminder refresh",
            replace_existing=True,
        )
        logger.info("Registered refresh job: every %d min", sync_cfg.interval_minutes)

        # Job 2: day rollover, when warning/expired status changes
        self._scheduler.add_job(
            self._job_refresh,
            trigger=self._parse_cron(sync_cfg.daily_cron),
            id="daily_refresh",
            name="Day rollover refresh",
            replace_existing=True,
        )
        logger.info("Registered daily refresh job: %s", sync_cfg.daily_cron)

    def start(self) -> None:
        """Start the scheduler. Must be called from a running event loop."""
        self.setup_jobs()
        self._scheduler.start()
        self._running = True
        logger.info("Scheduler started")

    def stop(self) -> None:
        if self._running:
            self._scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Scheduler stopped")

    @property
    def running(self) -> bool:
        return self._running

    def get_jobs(self) -> list[dict]:
        """Return info about scheduled sync jobs (reminders excluded)."""
        jobs = []
        for job in self._scheduler.get_jobs(jobstore="default"):
            next_run = getattr(job, "next_run_time", None)
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run": str(next_run) if next_run else None,
            })
        return jobs

    async def run_forever(self) -> None:
        self.start()
        try:
            await asyncio.Event().wait()
        finally:
            self.stop()

    def _parse_cron(self, expr: str) -> CronTrigger:
        """Parse a cron expression into a CronTrigger."""
        parts = expr.split()
        if len(parts) == 5:
            return CronTrigger(
                minute=parts[0],
                hour=parts[1],
                day=parts[2],
                month=parts[3],
                day_of_week=parts[4],
            )
        raise ValueError(f"Invalid cron expression: {expr}")

    async def _job_refresh(self) -> None:
        logger.info("Running scheduled refresh...")
        try:
            result = self._app.refresh()
            if result.changed:
                logger.info(
                    "Grocery list updated: %d added, %d removed",
                    len(result.added),
                    len(result.removed),
                )
        except Exception:
            logger.exception("Scheduled refresh failed")
