"""Exception hierarchy for the rentals service."""
from typing import Optional


class RentalsError(Exception):
    """Base exception for all rentals errors."""


class ConfigurationError(RentalsError):
    """Raised when the store connection parameters are missing or invalid."""


class StoreError(RentalsError):
    """A call against the remote store failed.

    ``operation`` names the repository call that failed, ``store_message``
    holds the message reported by the store (if any).
    """

    def __init__(self, operation: str, store_message: Optional[str] = None):
        self.operation = operation
        self.store_message = store_message
        message = f"Failed to {operation}"
        if store_message:
            message = f"{message}: {store_message}"
        super().__init__(message)


class StoreReadError(StoreError):
    """Raised when reading from the store fails."""


class StoreWriteError(StoreError):
    """Raised when an insert, update or delete fails."""


class NotFoundError(RentalsError):
    """Raised when a property expected in the store is not there."""

    def __init__(self, property_id: Optional[str], message: Optional[str] = None):
        self.property_id = property_id
        super().__init__(message or f"Property {property_id} not found")
