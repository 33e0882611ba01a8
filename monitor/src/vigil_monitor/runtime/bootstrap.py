"""Runtime wiring for the monitor service."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from vigil_monitor.application.audit_maintainers import MaintainerAuditor
from vigil_monitor.application.check_liveness import (
    INDEXER_SOURCE,
    ChainScanLivenessSource,
    IndexerLivenessSource,
    LivenessAggregator,
    LivenessPolicy,
    LivenessSource,
)
from vigil_monitor.application.heartbeat_matcher import HeartbeatMatcher
from vigil_monitor.application.monitor_cycle import MonitorService
from vigil_monitor.application.ports.alerts import AlertSinkPort
from vigil_monitor.application.ports.chain import ChainClientPort
from vigil_monitor.application.ports.indexer import HeartbeatIndexerPort
from vigil_monitor.application.publish import ResultPublisher
from vigil_monitor.application.status import MonitorStatus, StatusProvider
from vigil_monitor.application.window_search import BlockScanner, WindowSearcher
from vigil_monitor.domain.address import Address, AddressAllowList
from vigil_monitor.infrastructure.alerts.webhook import build_alert_sink
from vigil_monitor.infrastructure.chain.client import RuntimeChainClient
from vigil_monitor.infrastructure.chain.codec import decode_refund
from vigil_monitor.infrastructure.http.routes import MonitorRouteDeps
from vigil_monitor.infrastructure.indexer.axelarscan import AxelarscanHeartbeatClient
from vigil_monitor.infrastructure.metrics.prometheus import PrometheusMetrics
from vigil_monitor.runtime.settings import Settings

logger = logging.getLogger("vigil_monitor.runtime")

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class RuntimeContext:
    """Aggregated runtime components for the monitor service."""

    settings: Settings
    chain_client: ChainClientPort
    indexer: HeartbeatIndexerPort | None
    status_provider: StatusProvider
    metrics: PrometheusMetrics
    alerts: AlertSinkPort
    service: MonitorService

    def route_deps(self) -> MonitorRouteDeps:
        return MonitorRouteDeps(status_provider=self.status_provider, metrics=self.metrics)


def build_runtime(
    settings: Settings | None = None,
    *,
    chain_client: ChainClientPort | None = None,
    indexer: HeartbeatIndexerPort | None = None,
    alerts: AlertSinkPort | None = None,
    clock: Clock = _utc_now,
) -> RuntimeContext:
    """Construct the runtime context shared by the server and the CLI."""
    resolved = settings or Settings.load()
    broadcaster, validator = _identities(resolved)
    retry_policy = resolved.retry.retry_policy

    chain = chain_client or RuntimeChainClient(resolved.chain, retry_policy=retry_policy)
    policy = LivenessPolicy(
        check_n=resolved.heartbeat.check_n,
        try_count=resolved.heartbeat.try_count,
        miss_threshold=resolved.heartbeat.miss_threshold,
        window_length=resolved.heartbeat.window_length,
    )

    if resolved.heartbeat.source == INDEXER_SOURCE:
        indexer = indexer or AxelarscanHeartbeatClient(
            base_url=resolved.heartbeat.indexer_url,
            timeout_seconds=resolved.chain.timeout_seconds,
            retry_policy=retry_policy,
        )
        liveness: LivenessSource = IndexerLivenessSource(
            indexer=indexer,
            broadcaster=broadcaster.to_bech32(),
            policy=policy,
            clock=clock,
            max_age=timedelta(seconds=resolved.heartbeat.max_age_seconds),
        )
    else:
        matcher = HeartbeatMatcher(
            broadcaster=broadcaster,
            decode_refund=decode_refund,
            fallback=AddressAllowList.from_bech32(resolved.identity.fallback_address_list),
        )
        searcher = WindowSearcher(scanner=BlockScanner(chain), matcher=matcher)
        liveness = ChainScanLivenessSource(
            chain=chain,
            aggregator=LivenessAggregator(searcher=searcher, policy=policy),
            window_length=policy.window_length,
        )

    auditor = MaintainerAuditor(
        chain=chain,
        validator=validator,
        except_chains=resolved.identity.except_chain_names,
    )

    status_provider = StatusProvider(MonitorStatus())
    metrics = PrometheusMetrics(namespace=resolved.observability.metrics_namespace)
    alert_sink = alerts or build_alert_sink(resolved.alerts)
    publisher = ResultPublisher(
        status=status_provider.state,
        metrics=metrics,
        alerts=alert_sink,
        clock=clock,
    )

    logger.info(
        "monitor runtime built",
        extra={
            "data": {
                "broadcaster": broadcaster.to_bech32(),
                "validator": validator.to_bech32(),
                "heartbeat_source": liveness.name,
                "except_chains": list(resolved.identity.except_chain_names),
            }
        },
    )
    return RuntimeContext(
        settings=resolved,
        chain_client=chain,
        indexer=indexer,
        status_provider=status_provider,
        metrics=metrics,
        alerts=alert_sink,
        service=MonitorService(liveness=liveness, auditor=auditor, publisher=publisher),
    )


def _identities(settings: Settings) -> tuple[Address, Address]:
    identity = settings.identity
    if not identity.broadcaster_address:
        raise RuntimeError("VIGIL_BROADCASTER_ADDRESS must be set")
    if not identity.validator_address:
        raise RuntimeError("VIGIL_VALIDATOR_ADDRESS must be set")
    try:
        broadcaster = Address.from_bech32(identity.broadcaster_address)
        validator = Address.from_bech32(identity.validator_address)
    except ValueError as exc:
        raise RuntimeError(f"invalid monitor identity: {exc}") from exc
    return broadcaster, validator


def close_runtime_resources(runtime: RuntimeContext) -> None:
    runtime.chain_client.close()
    if runtime.indexer is not None:
        runtime.indexer.close()


__all__ = ["RuntimeContext", "build_runtime", "close_runtime_resources"]
