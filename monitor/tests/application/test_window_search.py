from __future__ import annotations

import pytest

from monitor.tests.fixtures.chain import FakeChainClient
from monitor.tests.fixtures.wire import heartbeat_envelope, make_address, unrelated_envelope
from vigil_commons.errors import CheckCancelledError
from vigil_commons.runtime.cancellation import CancellationToken
from vigil_monitor.application.heartbeat_matcher import HeartbeatMatcher
from vigil_monitor.application.window_search import BlockScanner, WindowSearcher
from vigil_monitor.infrastructure.chain.codec import decode_refund

BROADCASTER = make_address(1)


def _searcher(chain: FakeChainClient) -> WindowSearcher:
    matcher = HeartbeatMatcher(broadcaster=BROADCASTER, decode_refund=decode_refund)
    return WindowSearcher(scanner=BlockScanner(chain), matcher=matcher)


@pytest.mark.parametrize("offset", [0, 1, 2, 3, 4])
def test_search_stops_at_first_heartbeat(offset: int, token: CancellationToken) -> None:
    chain = FakeChainClient(blocks={1200 + offset: [unrelated_envelope(), heartbeat_envelope(BROADCASTER)]})

    outcome = _searcher(chain).search(1200, 5, token)

    assert outcome.found is True
    assert outcome.height == 1200 + offset
    assert outcome.scanned == offset + 1
    assert chain.fetched_heights == list(range(1200, 1200 + offset + 1))


def test_search_fetches_exactly_try_count_blocks_without_match(token: CancellationToken) -> None:
    chain = FakeChainClient(blocks={1205: [heartbeat_envelope(BROADCASTER)]})

    outcome = _searcher(chain).search(1200, 5, token)

    assert outcome.found is False
    assert outcome.transport_error is None
    assert outcome.scanned == 5
    assert chain.fetched_heights == [1200, 1201, 1202, 1203, 1204]


def test_search_aborts_on_transport_error(token: CancellationToken) -> None:
    chain = FakeChainClient(
        blocks={1203: [heartbeat_envelope(BROADCASTER)]},
        failing_heights={1201},
    )

    outcome = _searcher(chain).search(1200, 5, token)

    assert outcome.found is False
    assert outcome.transport_error is not None
    assert outcome.height == 1201
    assert chain.fetched_heights == [1200, 1201]


def test_search_rejects_non_positive_try_count(token: CancellationToken) -> None:
    with pytest.raises(ValueError):
        _searcher(FakeChainClient()).search(1200, 0, token)


def test_search_honours_cancellation() -> None:
    chain = FakeChainClient()
    token = CancellationToken()
    token.cancel()

    with pytest.raises(CheckCancelledError):
        _searcher(chain).search(1200, 5, token)
    assert chain.fetched_heights == []
