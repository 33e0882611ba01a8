"""HTTP route definitions for the monitor API."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from fastapi import Depends, FastAPI, Response

from vigil_monitor.application.status import StatusSnapshot
from vigil_monitor.infrastructure.http.schemas import (
    HealthResponse,
    HeartbeatStatusModel,
    MaintainersStatusModel,
    MonitorStatusResponse,
)


class StatusSource(Protocol):
    def snapshot(self) -> StatusSnapshot:
        ...


class MetricsSource(Protocol):
    def render(self) -> tuple[bytes, str]:
        ...


@dataclass(frozen=True)
class MonitorRouteDeps:
    status_provider: StatusSource
    metrics: MetricsSource


def add_status_routes(app: FastAPI, deps_provider: Callable[[], MonitorRouteDeps]) -> None:
    def get_deps() -> MonitorRouteDeps:
        return deps_provider()

    @app.get(
        "/status",
        response_model=MonitorStatusResponse,
        description="Return the latest heartbeat and maintainer verdicts.",
    )
    def status(
        deps: MonitorRouteDeps = Depends(get_deps),  # noqa: B008
    ) -> MonitorStatusResponse:
        snapshot = deps.status_provider.snapshot()
        return MonitorStatusResponse(
            status=snapshot["status"],
            heartbeat=HeartbeatStatusModel(**snapshot["heartbeat"]),
            maintainers=MaintainersStatusModel(**snapshot["maintainers"]),
        )

    @app.get("/healthz", response_model=HealthResponse, description="Liveness probe for the monitor process.")
    def healthz() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/metrics", description="Prometheus exposition of the check metrics.")
    def metrics(
        deps: MonitorRouteDeps = Depends(get_deps),  # noqa: B008
    ) -> Response:
        body, content_type = deps.metrics.render()
        return Response(content=body, media_type=content_type)


__all__ = ["MonitorRouteDeps", "add_status_routes"]
