"""Dataclass schemas for the monitor HTTP API."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class HeartbeatStatusModel:
    status: bool
    missed: str
    source: str | None = None
    checked_at: str | None = None
    last_error: str | None = None


@dataclass(frozen=True, slots=True)
class MaintainersStatusModel:
    status: bool
    maintainer: dict[str, bool]
    checked_at: str | None = None
    last_error: str | None = None


@dataclass(frozen=True, slots=True)
class MonitorStatusResponse:
    status: str
    heartbeat: HeartbeatStatusModel
    maintainers: MaintainersStatusModel


@dataclass(frozen=True, slots=True)
class HealthResponse:
    status: str


__all__ = [
    "HealthResponse",
    "HeartbeatStatusModel",
    "MaintainersStatusModel",
    "MonitorStatusResponse",
]
