"""Reminder delivery backends and factory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import FoodKeeperConfig


class Notifier(ABC):
    """Shows a fired reminder to the user."""

    @abstractmethod
    def send(self, title: str, body: str) -> None:
        ...


def create_notifier(config: FoodKeeperConfig) -> Notifier:
    """Create a notifier based on configuration."""
    backend_name = config.reminders.backend

    match backend_name:
        case "log":
            from .log import LogNotifier

            return LogNotifier()
        case "desktop":
            from .desktop import DesktopNotifier

            return DesktopNotifier(app_name=config.reminders.app_name)
        case _:
            raise ValueError(
                f"Unknown reminder backend: {backend_name!r}  "
                f"(choose from log / desktop)"
            )
