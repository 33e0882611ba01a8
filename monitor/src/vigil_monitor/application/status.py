"""Status snapshot shared between the check cycle and the HTTP surface."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import TypedDict


@dataclass
class HeartbeatStatus:
    status: bool = False
    missed: str = ""
    source: str | None = None
    checked_at: datetime | None = None
    last_error: str | None = None


@dataclass
class MaintainersStatus:
    status: bool = False
    maintainer: dict[str, bool] = field(default_factory=dict)
    checked_at: datetime | None = None
    last_error: str | None = None


class HeartbeatSnapshot(TypedDict):
    status: bool
    missed: str
    source: str | None
    checked_at: str | None
    last_error: str | None


class MaintainersSnapshot(TypedDict):
    status: bool
    maintainer: dict[str, bool]
    checked_at: str | None
    last_error: str | None


class StatusSnapshot(TypedDict):
    status: str
    heartbeat: HeartbeatSnapshot
    maintainers: MaintainersSnapshot


@dataclass
class MonitorStatus:
    """Latest verdicts; overwritten once per cycle under ``lock``."""

    heartbeat: HeartbeatStatus = field(default_factory=HeartbeatStatus)
    maintainers: MaintainersStatus = field(default_factory=MaintainersStatus)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)


@dataclass(slots=True)
class StatusProvider:
    """Renders :class:`MonitorStatus` for RPC inspection.

    A check whose last run failed makes the whole snapshot ``degraded``, even
    while its previous verdict is still shown.
    """

    state: MonitorStatus = field(default_factory=MonitorStatus)

    def snapshot(self) -> StatusSnapshot:
        with self.state.lock:
            heartbeat = self.state.heartbeat
            maintainers = self.state.maintainers
            if heartbeat.last_error or maintainers.last_error:
                status_value = "degraded"
            elif heartbeat.checked_at is None and maintainers.checked_at is None:
                status_value = "pending"
            elif heartbeat.status and maintainers.status:
                status_value = "healthy"
            else:
                status_value = "degraded"
            return {
                "status": status_value,
                "heartbeat": {
                    "status": heartbeat.status,
                    "missed": heartbeat.missed,
                    "source": heartbeat.source,
                    "checked_at": self._iso(heartbeat.checked_at),
                    "last_error": heartbeat.last_error,
                },
                "maintainers": {
                    "status": maintainers.status,
                    "maintainer": dict(maintainers.maintainer),
                    "checked_at": self._iso(maintainers.checked_at),
                    "last_error": maintainers.last_error,
                },
            }

    @staticmethod
    def _iso(value: datetime | None) -> str | None:
        return value.isoformat() if value else None


__all__ = [
    "HeartbeatStatus",
    "MaintainersStatus",
    "MonitorStatus",
    "StatusProvider",
    "StatusSnapshot",
]
