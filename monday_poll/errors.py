from __future__ import annotations

"""Centralised error types for monday-poll.

Each custom error is JSON-serialisable via ``to_dict`` so the HTTP layer and
logs can expose machine-readable diagnostics instead of free-form strings.
"""

from typing import Any, Dict, Optional


class PollError(Exception):
    """Base class for all structured monday-poll exceptions."""

    code: str = "POLL_ERROR"
    status: str = "error"

    def __init__(self, message: str, *, data: Optional[Dict[str, Any]] = None) -> None:  # noqa: D401 – simple init
        super().__init__(message)
        self.message = message
        self.data = data or {}

    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:  # noqa: D401 – utility
        return {
            "status": self.status,
            "code": self.code,
            "message": self.message,
            "data": self.data,
        }

    def __str__(self) -> str:  # noqa: D401 – friendly repr
        return f"{self.code}: {self.message}"


class StorageFailure(PollError):
    """An insert, delete or query against the record store failed."""

    code = "STORAGE_FAILURE"


class StateUnavailable(PollError):
    """The guard over the cleaner's last-sweep timestamp cannot be used."""

    code = "STATE_UNAVAILABLE"


class AppError(PollError):
    """Error surfaced by :class:`monday_poll.app.App`, tagged with its component.

    The wrapped component error is kept as ``__cause__`` (raise ... from ...)
    and echoed in :pyattr:`data` for structured logging.
    """

    code = "APP_ERROR"

    def __init__(self, component: str, cause: PollError) -> None:
        super().__init__(str(cause), data={"component": component, "cause": cause.to_dict()})
        self.component = component
        self.cause = cause

    def __str__(self) -> str:
        return f"{self.component}: {self.cause}"
