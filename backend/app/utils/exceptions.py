"""Error taxonomy for the listing store and query service."""

from __future__ import annotations


class ConfigurationError(Exception):
    """The service cannot start with the current settings."""


class ListingError(Exception):
    """Base class for listing operation failures."""

    message = "Internal Server Error. Please try again later."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message


class ValidationConflictError(ListingError):
    """A unique listing field is already taken."""


class DuplicateUnitNameError(ValidationConflictError):
    message = "Unit Name already exists. Please choose a unique Unit Name."


class DuplicateUnitNumberError(ValidationConflictError):
    message = "Unit Number already exists. Please choose a unique Unit Number."


class ListingNotFoundError(ListingError):
    message = "Listing not found"


class InternalError(ListingError):
    """The persistence layer failed. The session has been rolled back."""
