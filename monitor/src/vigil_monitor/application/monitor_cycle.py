"""One monitoring cycle: liveness check, maintainer audit, publication."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from opentelemetry import trace

from vigil_commons.errors import CheckCancelledError, MonitorError
from vigil_commons.runtime.cancellation import CancellationToken
from vigil_monitor.application.audit_maintainers import MaintainerAuditor
from vigil_monitor.application.check_liveness import LivenessSource
from vigil_monitor.application.publish import ResultPublisher
from vigil_monitor.domain.heartbeat import LivenessVerdict
from vigil_monitor.domain.maintainers import MaintainerVerdict

logger = logging.getLogger("vigil_monitor.cycle")
tracer = trace.get_tracer("vigil_monitor.cycle")


@dataclass(frozen=True)
class CycleReport:
    liveness: LivenessVerdict | None = None
    maintainers: MaintainerVerdict | None = None
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def healthy(self) -> bool:
        return (
            not self.errors
            and self.liveness is not None
            and self.liveness.status
            and self.maintainers is not None
            and self.maintainers.status
        )


class MonitorService:
    """Runs both checks and publishes their outcome.

    Each check is isolated: a failed maintainer audit still lets the
    liveness verdict through, and vice versa. Cancellation aborts the cycle.
    Cycles are serialized so only one writer touches the status at a time.
    """

    def __init__(
        self,
        *,
        liveness: LivenessSource,
        auditor: MaintainerAuditor,
        publisher: ResultPublisher,
    ) -> None:
        self._liveness = liveness
        self._auditor = auditor
        self._publisher = publisher
        self._cycle_lock = threading.Lock()

    def run_cycle(self, token: CancellationToken) -> CycleReport:
        with self._cycle_lock:
            errors: dict[str, str] = {}
            liveness = self._run_liveness(token, errors)
            maintainers = self._run_maintainers(token, errors)
            return CycleReport(liveness=liveness, maintainers=maintainers, errors=errors)

    def _run_liveness(self, token: CancellationToken, errors: dict[str, str]) -> LivenessVerdict | None:
        with tracer.start_as_current_span("vigil.check.liveness") as span:
            span.set_attribute("vigil.liveness.source", self._liveness.name)
            try:
                verdict = self._liveness.check(token)
            except CheckCancelledError:
                raise
            except MonitorError as exc:
                logger.exception("liveness check failed", extra={"data": {"source": self._liveness.name}})
                errors["liveness"] = str(exc)
                self._publisher.publish_liveness_error(exc)
                return None
            span.set_attribute("vigil.liveness.missed", verdict.missed)
            self._publisher.publish_liveness(verdict)
            return verdict

    def _run_maintainers(self, token: CancellationToken, errors: dict[str, str]) -> MaintainerVerdict | None:
        with tracer.start_as_current_span("vigil.check.maintainers") as span:
            try:
                verdict = self._auditor.audit(token)
            except CheckCancelledError:
                raise
            except MonitorError as exc:
                logger.exception("maintainer audit failed")
                errors["maintainers"] = str(exc)
                self._publisher.publish_maintainers_error(exc)
                return None
            span.set_attribute("vigil.maintainers.chains", len(verdict.per_chain))
            self._publisher.publish_maintainers(verdict)
            return verdict


__all__ = ["CycleReport", "MonitorService"]
