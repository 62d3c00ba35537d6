"""One-shot local reminders backed by APScheduler."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Iterable

from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler

if TYPE_CHECKING:
    from .notify import Notifier
    from .preferences import Preferences

logger = logging.getLogger(__name__)

JOBSTORE = "reminders"


@dataclass(frozen=True)
class Reminder:
    id: str
    fire_at: datetime
    title: str
    body: str


class ReminderService(ABC):
    """Platform reminder facility: a permission gate plus arm/disarm by id."""

    @abstractmethod
    def is_authorized(self) -> bool:
        """Cached authorization state."""

    @abstractmethod
    def refresh_authorization(self) -> bool:
        """Re-read the authorization state and update the cache."""

    @abstractmethod
    async def request_authorization(self) -> bool:
        """Ask the user for permission to show reminders."""

    @abstractmethod
    def arm(self, reminder_id: str, fire_at: datetime, title: str, body: str) -> None:
        """Schedule a one-shot reminder, replacing any with the same id."""

    @abstractmethod
    def disarm(self, reminder_ids: Iterable[str]) -> None:
        """Remove reminders. Unknown ids are ignored."""

    @abstractmethod
    def pending(self) -> list[Reminder]:
        """Reminders armed and not yet fired, soonest first."""


class SchedulerReminderService(ReminderService):
    """Arms each reminder as a ``date`` job on an APScheduler scheduler.

    Jobs live in a dedicated in-memory job store so periodic sync jobs on
    the same scheduler are not affected by ``disarm``. Jobs added before
    the scheduler starts are held as pending and fire once it runs.
    """

    def __init__(
        self,
        notifier: Notifier,
        preferences: Preferences,
        *,
        scheduler: AsyncIOScheduler | None = None,
        enabled: bool = True,
        prompt: Callable[[], bool] | None = None,
    ) -> None:
        self._notifier = notifier
        self._preferences = preferences
        self._scheduler = scheduler or AsyncIOScheduler()
        self._scheduler.add_jobstore(MemoryJobStore(), JOBSTORE)
        self._enabled = enabled
        self._prompt = prompt
        self._authorized = False
        self.refresh_authorization()

    @property
    def scheduler(self) -> AsyncIOScheduler:
        return self._scheduler

    def is_authorized(self) -> bool:
        return self._authorized

    def refresh_authorization(self) -> bool:
        self._authorized = self._enabled and self._preferences.notifications_authorized
        return self._authorized

    async def request_authorization(self) -> bool:
        if not self._enabled:
            logger.info("Reminders are disabled in the configuration")
            return False
        if self._prompt is None:
            return self.refresh_authorization()

        try:
            granted = bool(await asyncio.to_thread(self._prompt))
        except Exception:
            logger.exception("Error requesting reminder permission")
            return False

        self._preferences.notifications_authorized = granted
        self.refresh_authorization()
        return granted

    def arm(self, reminder_id: str, fire_at: datetime, title: str, body: str) -> None:
        # Drop any earlier job first; replace_existing only applies once started.
        self.disarm([reminder_id])
        self._scheduler.add_job(
            self._deliver,
            trigger="date",
            run_date=fire_at,
            args=[reminder_id, title, body],
            id=reminder_id,
            name=title,
            jobstore=JOBSTORE,
            replace_existing=True,
            misfire_grace_time=3600,
        )
        logger.debug("Armed reminder %s at %s", reminder_id, fire_at)

    def disarm(self, reminder_ids: Iterable[str]) -> None:
        for reminder_id in reminder_ids:
            try:
                self._scheduler.remove_job(reminder_id, jobstore=JOBSTORE)
            except JobLookupError:
                continue
            logger.debug("Disarmed reminder %s", reminder_id)

    def pending(self) -> list[Reminder]:
        reminders = [
            Reminder(
                id=job.id,
                fire_at=job.trigger.run_date,
                title=job.args[1],
                body=job.args[2],
            )
            for job in self._scheduler.get_jobs(jobstore=JOBSTORE)
        ]
        return sorted(reminders, key=lambda r: (r.fire_at, r.id))

    def _deliver(self, reminder_id: str, title: str, body: str) -> None:
        try:
            self._notifier.send(title, body)
        except Exception:
            logger.exception("Failed to deliver reminder %s", reminder_id)
