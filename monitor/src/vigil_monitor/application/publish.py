"""Publish check verdicts to the status object, metrics and alert channels."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from vigil_monitor.application.ports.alerts import Alert, AlertSinkPort
from vigil_monitor.application.ports.metrics import MetricsPort
from vigil_monitor.application.status import MonitorStatus
from vigil_monitor.domain.heartbeat import LivenessVerdict
from vigil_monitor.domain.maintainers import MaintainerVerdict

Clock = Callable[[], datetime]

logger = logging.getLogger("vigil_monitor.publish")

HEARTBEAT_ALERT_TITLE = "Heartbeat status"
MAINTAINERS_ALERT_TITLE = "Maintainers status"


class ResultPublisher:
    """Single writer of :class:`MonitorStatus` for one check cycle."""

    def __init__(
        self,
        *,
        status: MonitorStatus,
        metrics: MetricsPort,
        alerts: AlertSinkPort,
        clock: Clock,
    ) -> None:
        self._status = status
        self._metrics = metrics
        self._alerts = alerts
        self._clock = clock

    def publish_liveness(self, verdict: LivenessVerdict) -> None:
        with self._status.lock:
            heartbeat = self._status.heartbeat
            heartbeat.status = verdict.status
            heartbeat.missed = f"{verdict.missed} / {verdict.windows_checked}"
            heartbeat.source = verdict.source
            heartbeat.checked_at = self._clock()
            heartbeat.last_error = None
        self._metrics.record_heartbeats(missed=verdict.missed, succeeded=verdict.succeeded)
        self._alerts.send(
            Alert(title=HEARTBEAT_ALERT_TITLE, status=verdict.status, details=(verdict.summary,)),
        )

    def publish_liveness_error(self, error: Exception) -> None:
        with self._status.lock:
            self._status.heartbeat.last_error = str(error)
        self._alerts.send(
            Alert(
                title=HEARTBEAT_ALERT_TITLE,
                status=False,
                details=(f"check failed: {type(error).__name__}: {error}",),
            ),
        )

    def publish_maintainers(self, verdict: MaintainerVerdict) -> None:
        with self._status.lock:
            maintainers = self._status.maintainers
            maintainers.status = verdict.status
            maintainers.maintainer = dict(verdict.per_chain)
            maintainers.checked_at = self._clock()
            maintainers.last_error = None
        for chain_name, present in verdict.per_chain.items():
            self._metrics.set_maintainer_membership(chain_name, present)
        self._alerts.send(
            Alert(
                title=f"{MAINTAINERS_ALERT_TITLE}: {verdict.summary}",
                status=verdict.status,
                details=tuple(f"missing maintainer on {chain}" for chain in verdict.missing_chains),
            ),
        )

    def publish_maintainers_error(self, error: Exception) -> None:
        with self._status.lock:
            self._status.maintainers.last_error = str(error)
        self._alerts.send(
            Alert(
                title=MAINTAINERS_ALERT_TITLE,
                status=False,
                details=(f"check failed: {type(error).__name__}: {error}",),
            ),
        )


__all__ = ["HEARTBEAT_ALERT_TITLE", "MAINTAINERS_ALERT_TITLE", "ResultPublisher"]
