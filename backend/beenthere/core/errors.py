"""
Domain errors raised by the stores and mapped to HTTP statuses by the routers.

Validation and conflict failures are client-class. StoreFailure wraps any
backend error; its message is meant for operators and is logged, not returned.
"""


class BeenThereError(Exception):
    """Base class for all service errors."""


class ValidationFailure(BeenThereError):
    """Missing or malformed client input."""


class MissingField(ValidationFailure):
    """A required field of an entity is empty."""


class NoSuchState(ValidationFailure):
    """A state code is not a known US state."""

    def __init__(self, message: str = "no such state"):
        super().__init__(message)


class ConflictFailure(BeenThereError):
    """An insert collided with an existing record."""


class CityAlreadyExists(ConflictFailure):
    def __init__(self, message: str = "city already exists"):
        super().__init__(message)


class StoreFailure(BeenThereError):
    """The backend could not complete an operation."""
