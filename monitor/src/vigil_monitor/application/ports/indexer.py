"""Port for the heartbeat indexer used by the age-threshold liveness check."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from vigil_commons.runtime.cancellation import CancellationToken
from vigil_monitor.domain.heartbeat import HeartbeatRecord


class HeartbeatIndexerPort(Protocol):
    def recent_heartbeats(
        self,
        address: str,
        limit: int,
        token: CancellationToken,
    ) -> Sequence[HeartbeatRecord]:
        """Return up to ``limit`` most recent heartbeats sent by ``address``."""

    def close(self) -> None:
        ...


__all__ = ["HeartbeatIndexerPort"]
