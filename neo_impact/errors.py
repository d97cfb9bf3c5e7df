"""Error types raised by the engine and the catalog client."""
from __future__ import annotations


class InvalidInput(ValueError):
    """Negative, non-finite or non-numeric value handed to the engine."""


class DataUnavailable(RuntimeError):
    """Catalog could not be reached or returned something unusable."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ObjectNotFound(LookupError):
    """Catalog has no object with the requested id."""
