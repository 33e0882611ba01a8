"""Exception types shared by the monitor transports and check engine."""

from __future__ import annotations


class MonitorError(Exception):
    """Base class for monitor failures surfaced to a check cycle."""


class TransportError(MonitorError):
    """Raised when a chain node or indexer cannot be reached or answers badly."""

    def __init__(self, message: str, *, endpoint: str | None = None) -> None:
        super().__init__(message)
        self.endpoint = endpoint


class CheckCancelledError(MonitorError):
    """Raised when a running check is cancelled or its deadline expires."""


__all__ = [
    "CheckCancelledError",
    "MonitorError",
    "TransportError",
]
