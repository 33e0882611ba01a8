"""Background worker running a monitor cycle on a fixed interval."""

from __future__ import annotations

from vigil_commons.errors import CheckCancelledError
from vigil_commons.runtime.base_worker import BaseWorker
from vigil_commons.runtime.cancellation import CancellationToken
from vigil_monitor.application.monitor_cycle import MonitorService

DEFAULT_POLL_INTERVAL = 60.0
DEFAULT_CYCLE_TIMEOUT = 300.0


class CheckWorker(BaseWorker):
    """Polls the chain once per interval and publishes both verdicts.

    Each cycle gets a deadline; stopping the worker cancels the running
    cycle through the same token.
    """

    worker_name = "vigil-check-worker"
    logger_name = "vigil_monitor.check_worker"
    default_poll_interval = DEFAULT_POLL_INTERVAL

    def __init__(
        self,
        *,
        service: MonitorService,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL,
        cycle_timeout_seconds: float = DEFAULT_CYCLE_TIMEOUT,
    ) -> None:
        super().__init__(poll_interval=poll_interval_seconds)
        self._service = service
        self._cycle_timeout = cycle_timeout_seconds

    def _tick(self) -> None:
        token = CancellationToken.with_timeout(self._cycle_timeout, event=self._stop)
        try:
            report = self._service.run_cycle(token)
        except CheckCancelledError as exc:
            self._logger.warning("check cycle cancelled", extra={"data": {"reason": str(exc)}})
            return
        self._logger.info(
            "check cycle complete",
            extra={"data": {"healthy": report.healthy, "errors": report.errors}},
        )


def create_check_worker(
    *,
    service: MonitorService,
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL,
    cycle_timeout_seconds: float = DEFAULT_CYCLE_TIMEOUT,
) -> CheckWorker:
    """Factory function to create a CheckWorker with injected dependencies."""
    return CheckWorker(
        service=service,
        poll_interval_seconds=poll_interval_seconds,
        cycle_timeout_seconds=cycle_timeout_seconds,
    )


__all__ = ["CheckWorker", "DEFAULT_CYCLE_TIMEOUT", "DEFAULT_POLL_INTERVAL", "create_check_worker"]
