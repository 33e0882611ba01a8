"""Port for exporting check results as metrics."""

from __future__ import annotations

from typing import Protocol


class MetricsPort(Protocol):
    def record_heartbeats(self, *, missed: int, succeeded: int) -> None:
        """Add one cycle's missed and successful heartbeat windows to the counters."""

    def set_maintainer_membership(self, chain: str, present: bool) -> None:
        """Set the membership gauge of ``chain`` to 1 or 0."""


__all__ = ["MetricsPort"]
