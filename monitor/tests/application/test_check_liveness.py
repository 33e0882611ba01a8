from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import httpx
import pytest

from monitor.tests.fixtures.chain import FakeChainClient
from monitor.tests.fixtures.wire import heartbeat_envelope, make_address
from vigil_commons.errors import CheckCancelledError, TransportError
from vigil_commons.runtime.cancellation import CancellationToken
from vigil_monitor.application.check_liveness import (
    ChainScanLivenessSource,
    IndexerLivenessSource,
    LivenessAggregator,
    LivenessPolicy,
    parse_rfc3339,
)
from vigil_monitor.application.heartbeat_matcher import HeartbeatMatcher
from vigil_monitor.application.window_search import BlockScanner, WindowSearcher
from vigil_monitor.domain.envelope import REFUND_MSG_TYPE_URL, Envelope, TxMessage
from vigil_monitor.domain.exceptions import DecodeError
from vigil_monitor.domain.heartbeat import HeartbeatRecord
from vigil_monitor.infrastructure.chain.codec import decode_refund
from vigil_monitor.infrastructure.chain.http_client import HttpChainClient

BROADCASTER = make_address(1)
NOW = datetime(2025, 10, 17, 12, tzinfo=UTC)


def _chain_with_heartbeats(*heights: int, latest: int = 1234) -> FakeChainClient:
    return FakeChainClient(
        height=latest,
        blocks={height: [heartbeat_envelope(BROADCASTER)] for height in heights},
    )


def _source(chain: FakeChainClient, policy: LivenessPolicy) -> ChainScanLivenessSource:
    matcher = HeartbeatMatcher(broadcaster=BROADCASTER, decode_refund=decode_refund)
    searcher = WindowSearcher(scanner=BlockScanner(chain), matcher=matcher)
    aggregator = LivenessAggregator(searcher=searcher, policy=policy)
    return ChainScanLivenessSource(chain=chain, aggregator=aggregator, window_length=policy.window_length)


def test_two_missed_windows_pass_with_threshold_three(token: CancellationToken) -> None:
    # windows 1200, 1150, 1100, 1050, 1000; heartbeats in three of them
    chain = _chain_with_heartbeats(1201, 1100, 1004)

    verdict = _source(chain, LivenessPolicy(miss_threshold=3)).check(token)

    assert verdict.missed == 2
    assert verdict.windows_checked == 5
    assert verdict.status is True
    assert verdict.source == "chain-scan"


def test_two_missed_windows_fail_with_threshold_two(token: CancellationToken) -> None:
    chain = _chain_with_heartbeats(1201, 1100, 1004)

    verdict = _source(chain, LivenessPolicy(miss_threshold=2)).check(token)

    assert verdict.missed == 2
    assert verdict.status is False


def test_scan_visits_expected_windows(token: CancellationToken) -> None:
    chain = _chain_with_heartbeats(1200, 1150, 1100, 1050, 1000)

    verdict = _source(chain, LivenessPolicy()).check(token)

    assert verdict.missed == 0
    assert chain.fetched_heights == [1200, 1150, 1100, 1050, 1000]


def test_aligned_head_skips_forming_window(token: CancellationToken) -> None:
    chain = _chain_with_heartbeats(1200, latest=1250)

    _source(chain, LivenessPolicy(check_n=1)).check(token)

    assert chain.fetched_heights == [1200]


def test_young_chain_stops_at_origin(token: CancellationToken) -> None:
    chain = _chain_with_heartbeats(50, 1, latest=60)

    verdict = _source(chain, LivenessPolicy()).check(token)

    assert chain.fetched_heights == [50, 0, 1]
    assert verdict.windows_checked == 2
    assert verdict.missed == 0
    assert verdict.status is True


def test_head_at_genesis_checks_no_windows(token: CancellationToken) -> None:
    chain = FakeChainClient(height=0)

    verdict = _source(chain, LivenessPolicy()).check(token)

    assert chain.fetched_heights == []
    assert verdict.windows_checked == 0
    assert verdict.status is True


def test_transport_error_counts_as_missed_and_scan_continues(token: CancellationToken) -> None:
    chain = _chain_with_heartbeats(1150, 1100, 1050, 1000)
    chain.failing_heights = {1200}

    verdict = _source(chain, LivenessPolicy()).check(token)

    assert verdict.missed == 1
    assert chain.fetched_heights == [1200, 1150, 1100, 1050, 1000]


def test_malformed_refund_aborts_the_scan(token: CancellationToken) -> None:
    chain = _chain_with_heartbeats(1200, 1100, 1050, 1000)
    chain.blocks[1150] = [Envelope(messages=(TxMessage(type_url=REFUND_MSG_TYPE_URL, value=b"\x0a\x05ab"),))]

    with pytest.raises(DecodeError):
        _source(chain, LivenessPolicy()).check(token)
    assert chain.fetched_heights == [1200, 1150]


def test_deadline_during_block_fetch_cancels_instead_of_missing() -> None:
    now = [0.0]
    token = CancellationToken.with_timeout(30.0, monotonic=lambda: now[0])

    def handler(request: httpx.Request) -> httpx.Response:
        now[0] += 60.0
        raise httpx.ReadTimeout("no answer before the deadline", request=request)

    chain = HttpChainClient(
        rpc_url="http://rpc.test",
        lcd_url="http://lcd.test",
        transport=httpx.MockTransport(handler),
    )
    matcher = HeartbeatMatcher(broadcaster=BROADCASTER, decode_refund=decode_refund)
    searcher = WindowSearcher(scanner=BlockScanner(chain), matcher=matcher)
    aggregator = LivenessAggregator(searcher=searcher, policy=LivenessPolicy(check_n=1))

    with pytest.raises(CheckCancelledError):
        aggregator.run(1200, token)


def test_latest_height_failure_propagates(token: CancellationToken) -> None:
    chain = FakeChainClient(height_error=TransportError("node down"))

    with pytest.raises(TransportError):
        _source(chain, LivenessPolicy()).check(token)


def test_policy_rejects_non_positive_values() -> None:
    with pytest.raises(ValueError):
        LivenessPolicy(check_n=0)
    with pytest.raises(ValueError):
        LivenessPolicy(miss_threshold=0)


@dataclass
class FakeIndexer:
    records: Sequence[HeartbeatRecord] = ()
    calls: list[tuple[str, int]] = field(default_factory=list)

    def recent_heartbeats(self, address: str, limit: int, token: CancellationToken) -> Sequence[HeartbeatRecord]:
        self.calls.append((address, limit))
        return list(self.records)

    def close(self) -> None:
        return None


def _record(height: int, age: timedelta) -> HeartbeatRecord:
    return HeartbeatRecord(height=height, tx_hash=f"HASH{height}", timestamp=(NOW - age).isoformat())


def test_indexer_source_counts_stale_heartbeats(token: CancellationToken) -> None:
    indexer = FakeIndexer(
        records=[
            _record(1200, timedelta(minutes=1)),
            _record(1150, timedelta(minutes=4)),
            _record(1100, timedelta(minutes=6)),
            HeartbeatRecord(height=1050, tx_hash="HASH1050", timestamp="yesterday"),
        ],
    )
    source = IndexerLivenessSource(
        indexer=indexer,
        broadcaster=BROADCASTER.to_bech32(),
        policy=LivenessPolicy(check_n=4, miss_threshold=3),
        clock=lambda: NOW,
    )

    verdict = source.check(token)

    assert indexer.calls == [(BROADCASTER.to_bech32(), 4)]
    assert verdict.windows_checked == 4
    assert verdict.missed == 2
    assert verdict.status is True
    assert verdict.source == "indexer"


def test_indexer_source_with_no_records_is_healthy(token: CancellationToken) -> None:
    source = IndexerLivenessSource(
        indexer=FakeIndexer(),
        broadcaster=BROADCASTER.to_bech32(),
        policy=LivenessPolicy(),
        clock=lambda: NOW,
    )

    verdict = source.check(token)

    assert verdict.windows_checked == 0
    assert verdict.status is True


def test_parse_rfc3339_requires_timezone() -> None:
    assert parse_rfc3339("2025-10-17T12:00:00Z") == NOW
    assert parse_rfc3339("2025-10-17T12:00:00") is None
    assert parse_rfc3339("garbage") is None
