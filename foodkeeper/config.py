"""TOML configuration loader."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]

DEFAULT_CONFIG_PATH = "~/.config/foodkeeper/config.toml"

_BACKENDS = ("log", "desktop")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class DatabaseConfig:
    path: str = "~/.config/foodkeeper/foodkeeper.db"


@dataclass
class RemindersConfig:
    enabled: bool = True
    hour: int = 9
    minute: int = 0
    backend: str = "log"
    app_name: str = "foodkeeper"


@dataclass
class SyncConfig:
    interval_minutes: int = 60
    daily_cron: str = "0 0 * * *"


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class FoodKeeperConfig:
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    reminders: RemindersConfig = field(default_factory=RemindersConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | Path | None = None) -> FoodKeeperConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    The database path and log level can be supplied via environment
    variables when the file leaves them unset.

    Raises:
        ValueError: a value is out of range or not recognised.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path).expanduser()
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    db = raw.get("database", {})
    rem = raw.get("reminders", {})
    syn = raw.get("sync", {})
    log = raw.get("logging", {})

    # Resolve overridable values: config file → environment variable → default
    db_path = (
        db.get("path", "")
        or os.environ.get("FOODKEEPER_DB", "")
        or DatabaseConfig.path
    )
    log_level = (
        log.get("level", "")
        or os.environ.get("FOODKEEPER_LOG_LEVEL", "")
        or LoggingConfig.level
    ).upper()

    config = FoodKeeperConfig(
        database=DatabaseConfig(path=db_path),
        reminders=RemindersConfig(
            enabled=rem.get("enabled", True),
            hour=rem.get("hour", 9),
            minute=rem.get("minute", 0),
            backend=rem.get("backend", "log"),
            app_name=rem.get("app_name", "foodkeeper"),
        ),
        sync=SyncConfig(
            interval_minutes=syn.get("interval_minutes", 60),
            daily_cron=syn.get("daily_cron", "0 0 * * *"),
        ),
        logging=LoggingConfig(level=log_level),
    )
    _validate(config)
    return config


def _validate(config: FoodKeeperConfig) -> None:
    rem = config.reminders
    if not 0 <= rem.hour <= 23:
        raise ValueError(f"reminders.hour must be 0-23, got {rem.hour!r}")
    if not 0 <= rem.minute <= 59:
        raise ValueError(f"reminders.minute must be 0-59, got {rem.minute!r}")
    if rem.backend not in _BACKENDS:
        raise ValueError(
            f"Unknown reminders.backend {rem.backend!r} "
            f"(choose from {' / '.join(_BACKENDS)})"
        )
    if config.sync.interval_minutes <= 0:
        raise ValueError(
            f"sync.interval_minutes must be positive, got {config.sync.interval_minutes!r}"
        )
    if len(config.sync.daily_cron.split()) != 5:
        raise ValueError(f"Invalid cron expression: {config.sync.daily_cron!r}")
    if config.logging.level not in _LOG_LEVELS:
        raise ValueError(f"Unknown logging.level {config.logging.level!r}")
