"""Notifier that writes reminders to the log."""

from __future__ import annotations

import logging

from . import Notifier

logger = logging.getLogger(__name__)


class LogNotifier(Notifier):
    def send(self, title: str, body: str) -> None:
        logger.warning("%s: %s", title, body)
