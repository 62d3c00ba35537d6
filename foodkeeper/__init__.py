"""Personal food inventory tracker with expiry reminders and a derived grocery list."""

from .app import FoodKeeper
from .config import FoodKeeperConfig, load_config
from .errors import FoodKeeperError, ItemNotFoundError, ValidationError
from .expiration import ExpirationStatus, days_until, expiration_status, expiration_text
from .grocery_sync import GroceryReconciler, SyncResult
from .models import FoodItem, GroceryItem, ItemStatus, Location
from .notifications import NotificationScheduler
from .reminders import Reminder, ReminderService, SchedulerReminderService
from .sizes import SizeUnit, format_size, parse_size

__all__ = [
    "FoodKeeper",
    "FoodKeeperConfig",
    "load_config",
    "FoodKeeperError",
    "ItemNotFoundError",
    "ValidationError",
    "ExpirationStatus",
    "days_until",
    "expiration_status",
    "expiration_text",
    "FoodItem",
    "GroceryItem",
    "ItemStatus",
    "Location",
    "GroceryReconciler",
    "SyncResult",
    "NotificationScheduler",
    "Reminder",
    "ReminderService",
    "SchedulerReminderService",
    "SizeUnit",
    "format_size",
    "parse_size",
]
