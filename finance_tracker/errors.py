"""Exception types raised by the finance tracker."""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class FinanceTrackerError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(FinanceTrackerError, ValueError):
    """Input was rejected at the boundary before any record was written.

    ``errors`` holds one dictionary per offending field with at least a
    ``field`` and a ``message`` key.
    """

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.errors = list(errors or [])

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "errors": self.errors}


class StorageError(FinanceTrackerError, OSError):
    """The backing record store failed or is unavailable."""


class DataIntegrityError(FinanceTrackerError, ValueError):
    """A stored value could not be interpreted, e.g. a non-numeric amount."""
