"""Prometheus metrics for heartbeat and maintainer checks."""

from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Gauge, generate_latest

from vigil_monitor.application.ports.metrics import MetricsPort


class PrometheusMetrics(MetricsPort):
    """Counters and gauges registered on a dedicated registry.

    Each instance owns its registry; nothing is added to the process-wide default.
    """

    def __init__(self, *, namespace: str = "vigil", registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self._heartbeats = Counter(
            "heartbeats",
            "Heartbeat windows checked, by outcome",
            ["status"],
            namespace=namespace,
            registry=self.registry,
        )
        self._maintainers = Gauge(
            "maintainer_membership",
            "1 when the validator is a maintainer of the chain, else 0",
            ["network_name"],
            namespace=namespace,
            registry=self.registry,
        )

    def record_heartbeats(self, *, missed: int, succeeded: int) -> None:
        self._heartbeats.labels(status="missed").inc(missed)
        self._heartbeats.labels(status="success").inc(succeeded)

    def set_maintainer_membership(self, chain: str, present: bool) -> None:
        self._maintainers.labels(network_name=chain).set(1 if present else 0)

    def render(self) -> tuple[bytes, str]:
        return generate_latest(self.registry), CONTENT_TYPE_LATEST


__all__ = ["PrometheusMetrics"]
