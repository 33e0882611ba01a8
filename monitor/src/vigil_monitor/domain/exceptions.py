"""Domain-specific exception types."""

from __future__ import annotations

from vigil_commons.errors import CheckCancelledError, MonitorError, TransportError


class DecodeError(MonitorError):
    """Raised when a payload that matched an expected message tag is malformed."""


__all__ = ["CheckCancelledError", "DecodeError", "MonitorError", "TransportError"]
