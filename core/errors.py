"""Exception types raised by the spend pipeline and their API error bodies."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional


ErrorDetails = Optional[Mapping[str, Any]]


class SpendViewerError(Exception):
    """Base exception carrying optional structured details."""

    def __init__(self, message: str, *, details: ErrorDetails = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})

    def __str__(self) -> str:  # pragma: no cover - mirrors ``Exception.__str__``
        return self.message


class ValidationError(SpendViewerError):
    """Raised when a query parameter is malformed or out of range."""

    def __init__(self, param: str, message: str) -> None:
        super().__init__(message, details={"param": param})
        self.param = param


class DataLoadError(SpendViewerError):
    """Raised when a dataset file is missing, unreadable or not a JSON array."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(message, details={"path": str(path)})
        self.path = path


def error_response(error: Exception) -> Dict[str, Any]:
    if isinstance(error, ValidationError):
        return {"error": "Bad Request", "message": error.message}
    return {"error": "Internal Server Error", "message": str(error)}


__all__ = [
    "SpendViewerError",
    "ValidationError",
    "DataLoadError",
    "error_response",
]
