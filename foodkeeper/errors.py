"""Exception types raised by foodkeeper."""


class FoodKeeperError(Exception):
    """Base class for all foodkeeper errors."""


class ValidationError(FoodKeeperError, ValueError):
    """Input rejected before it reaches the store (empty name, bad enum value, ...)."""


class ItemNotFoundError(FoodKeeperError, LookupError):
    """No item with the requested id exists in the store."""

    def __init__(self, kind: str, item_id: str) -> None:
        super().__init__(f"{kind} not found: {item_id}")
        self.kind = kind
        self.item_id = item_id
