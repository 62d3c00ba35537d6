"""Desktop notifications using notify-send."""

from __future__ import annotations

import shutil
import subprocess

from . import Notifier


class DesktopNotifier(Notifier):
    """Show reminders through the freedesktop notification daemon."""

    def __init__(self, app_name: str = "foodkeeper", timeout: float = 10) -> None:
        self._app_name = app_name
        self._timeout = timeout

    @staticmethod
    def available() -> bool:
        return shutil.which("notify-send") is not None

    def send(self, title: str, body: str) -> None:
        """Raise a desktop notification.

        Raises:
            RuntimeError: If notify-send is missing or fails.
        """
        if not self.available():
            raise RuntimeError(
                "notify-send not found. Install libnotify:\n"
                "  Ubuntu/Debian: sudo apt install libnotify-bin\n"
                "  Fedora/RHEL:   sudo dnf install libnotify"
            )

        cmd = ["notify-send", "--app-name", self._app_name, title, body]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
            if result.returncode != 0:
                raise RuntimeError(
                    f"notify-send failed: {result.stderr.strip()}"
                )
        except subprocess.TimeoutExpired:
            raise RuntimeError("notify-send timed out.")
