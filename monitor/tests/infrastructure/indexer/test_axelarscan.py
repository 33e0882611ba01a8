from __future__ import annotations

import httpx
import pytest

from vigil_commons.errors import TransportError
from vigil_commons.runtime.cancellation import CancellationToken
from vigil_monitor.domain.heartbeat import HeartbeatRecord
from vigil_monitor.infrastructure.indexer.axelarscan import AxelarscanHeartbeatClient

ADDRESS = "axelar17xpfvakm2amg962yls6f84z3kell8c5l5h4gqu"


def test_recent_heartbeats_parses_entries(token: CancellationToken) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/validator/heartbeat"
        assert request.url.params["address"] == ADDRESS
        assert request.url.params["limit"] == "2"
        return httpx.Response(
            200,
            json={
                "status": "success",
                "data": [
                    {"height": 1201, "tx_hash": "AA", "timestamp": "2025-10-17T11:59:00Z"},
                    {"height": 1150, "tx_hash": "BB", "timestamp": "2025-10-17T11:54:00Z"},
                    {"height": 1100, "tx_hash": "CC", "timestamp": "2025-10-17T11:49:00Z"},
                ],
            },
        )

    client = AxelarscanHeartbeatClient(base_url="http://indexer.test/", transport=httpx.MockTransport(handler))

    records = client.recent_heartbeats(ADDRESS, 2, token)

    assert records == (
        HeartbeatRecord(height=1201, tx_hash="AA", timestamp="2025-10-17T11:59:00Z"),
        HeartbeatRecord(height=1150, tx_hash="BB", timestamp="2025-10-17T11:54:00Z"),
    )


def test_recent_heartbeats_rejects_unexpected_shape(token: CancellationToken) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": [{"height": "not-a-number"}]})

    client = AxelarscanHeartbeatClient(base_url="http://indexer.test", transport=httpx.MockTransport(handler))

    with pytest.raises(TransportError):
        client.recent_heartbeats(ADDRESS, 5, token)


def test_recent_heartbeats_surfaces_http_failure(token: CancellationToken) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502)

    client = AxelarscanHeartbeatClient(base_url="http://indexer.test", transport=httpx.MockTransport(handler))

    with pytest.raises(TransportError):
        client.recent_heartbeats(ADDRESS, 5, token)
