"""Broadcaster liveness: aggregate heartbeat evidence into a verdict.

Two interchangeable sources produce a :class:`LivenessVerdict`:

* :class:`ChainScanLivenessSource` scans blocks after each expected window
  boundary and decodes the heartbeat transactions itself.
* :class:`IndexerLivenessSource` trusts an indexer's list of recent
  heartbeats and only checks their age. It is cheaper but weaker evidence.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol

from vigil_commons.runtime.cancellation import CancellationToken
from vigil_monitor.application.ports.chain import ChainClientPort
from vigil_monitor.application.ports.indexer import HeartbeatIndexerPort
from vigil_monitor.application.window_search import WindowSearcher
from vigil_monitor.domain.heartbeat import (
    DEFAULT_WINDOW_LENGTH,
    HeartbeatRecord,
    HeartbeatWindow,
    LivenessVerdict,
)

Clock = Callable[[], datetime]

logger = logging.getLogger("vigil_monitor.liveness")

CHAIN_SCAN_SOURCE = "chain-scan"
INDEXER_SOURCE = "indexer"
DEFAULT_MAX_HEARTBEAT_AGE = timedelta(minutes=5)


@dataclass(frozen=True)
class LivenessPolicy:
    """How many windows to check and how many misses are tolerated."""

    check_n: int = 5
    try_count: int = 5
    miss_threshold: int = 3
    window_length: int = DEFAULT_WINDOW_LENGTH

    def __post_init__(self) -> None:
        if self.check_n <= 0:
            raise ValueError("check_n must be positive")
        if self.try_count <= 0:
            raise ValueError("try_count must be positive")
        if self.miss_threshold <= 0:
            raise ValueError("miss_threshold must be positive")
        if self.window_length <= 0:
            raise ValueError("window_length must be positive")


class LivenessSource(Protocol):
    name: str

    def check(self, token: CancellationToken) -> LivenessVerdict:
        """Collect heartbeat evidence and return the verdict for this cycle."""


class LivenessAggregator:
    """Runs the window search over ``check_n`` windows, newest first.

    Windows that would start below height zero do not exist and are not
    counted, so a young chain yields fewer ``windows_checked``.
    """

    def __init__(self, *, searcher: WindowSearcher, policy: LivenessPolicy) -> None:
        self._searcher = searcher
        self._policy = policy

    def run(self, start_height: int, token: CancellationToken) -> LivenessVerdict:
        policy = self._policy
        missed = 0
        checked = 0
        window = HeartbeatWindow(start_height=start_height, length=policy.window_length)
        for index in range(policy.check_n):
            if window.start_height < 0:
                logger.info(
                    "reached chain origin, fewer windows checked",
                    extra={"data": {"checked": checked, "requested": policy.check_n}},
                )
                break
            checked += 1
            outcome = self._searcher.search(window.start_height, policy.try_count, token)
            if outcome.transport_error is not None:
                # Counted as missed; the remaining windows are still scanned.
                logger.error(
                    "window search incomplete, counting as missed",
                    extra={
                        "data": {
                            "window": index + 1,
                            "window_start": window.start_height,
                            "error": str(outcome.transport_error),
                        }
                    },
                )
                missed += 1
            elif not outcome.found:
                missed += 1
            window = window.previous()

        verdict = LivenessVerdict.from_counts(
            windows_checked=checked,
            missed=missed,
            miss_threshold=policy.miss_threshold,
            source=CHAIN_SCAN_SOURCE,
        )
        logger.info(
            "heartbeat windows checked",
            extra={"data": {"missed": verdict.missed, "checked": verdict.windows_checked, "status": verdict.status}},
        )
        return verdict


class ChainScanLivenessSource:
    """Finds the last complete window from the chain head and aggregates backwards."""

    name = CHAIN_SCAN_SOURCE

    def __init__(
        self,
        *,
        chain: ChainClientPort,
        aggregator: LivenessAggregator,
        window_length: int = DEFAULT_WINDOW_LENGTH,
    ) -> None:
        self._chain = chain
        self._aggregator = aggregator
        self._window_length = window_length

    def check(self, token: CancellationToken) -> LivenessVerdict:
        token.raise_if_cancelled()
        latest = self._chain.latest_height(token)
        window = HeartbeatWindow.preceding(latest, self._window_length)
        logger.info(
            "resolved heartbeat window",
            extra={"data": {"latest_height": latest, "window_start": window.start_height}},
        )
        return self._aggregator.run(window.start_height, token)


class IndexerLivenessSource:
    """Counts indexer-reported heartbeats that are too old (or undatable) as missed."""

    name = INDEXER_SOURCE

    def __init__(
        self,
        *,
        indexer: HeartbeatIndexerPort,
        broadcaster: str,
        policy: LivenessPolicy,
        clock: Clock,
        max_age: timedelta = DEFAULT_MAX_HEARTBEAT_AGE,
    ) -> None:
        self._indexer = indexer
        self._broadcaster = broadcaster
        self._policy = policy
        self._clock = clock
        self._max_age = max_age

    def check(self, token: CancellationToken) -> LivenessVerdict:
        token.raise_if_cancelled()
        records = self._indexer.recent_heartbeats(self._broadcaster, self._policy.check_n, token)
        now = self._clock()
        missed = sum(1 for record in records if self._is_stale(record, now))
        verdict = LivenessVerdict.from_counts(
            windows_checked=len(records),
            missed=missed,
            miss_threshold=self._policy.miss_threshold,
            source=INDEXER_SOURCE,
        )
        logger.info(
            "indexer heartbeats checked",
            extra={"data": {"missed": verdict.missed, "checked": verdict.windows_checked, "status": verdict.status}},
        )
        return verdict

    def _is_stale(self, record: HeartbeatRecord, now: datetime) -> bool:
        sent_at = parse_rfc3339(record.timestamp)
        if sent_at is None:
            logger.warning(
                "unparsable heartbeat timestamp",
                extra={"data": {"height": record.height, "timestamp": record.timestamp}},
            )
            return True
        if now - sent_at > self._max_age:
            logger.info(
                "heartbeat too old",
                extra={"data": {"height": record.height, "timestamp": record.timestamp}},
            )
            return True
        return False


def parse_rfc3339(value: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    return parsed


__all__ = [
    "CHAIN_SCAN_SOURCE",
    "ChainScanLivenessSource",
    "INDEXER_SOURCE",
    "IndexerLivenessSource",
    "LivenessAggregator",
    "LivenessPolicy",
    "LivenessSource",
    "parse_rfc3339",
]
