"""Heartbeat indexer client for the Axelarscan API."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import httpx
from pydantic import BaseModel, ValidationError

from vigil_commons.errors import TransportError
from vigil_commons.http import JsonHttpClient
from vigil_commons.retry import NO_RETRY, RetryPolicy
from vigil_commons.runtime.cancellation import CancellationToken
from vigil_monitor.application.ports.indexer import HeartbeatIndexerPort
from vigil_monitor.domain.heartbeat import HeartbeatRecord

DEFAULT_AXELARSCAN_URL = "https://api.axelarscan.io"


class _HeartbeatEntry(BaseModel):
    height: int
    tx_hash: str
    timestamp: str


class _HeartbeatResponse(BaseModel):
    status: str | None = None
    data: list[_HeartbeatEntry] = []


@dataclass
class AxelarscanHeartbeatClient(HeartbeatIndexerPort):
    base_url: str = DEFAULT_AXELARSCAN_URL
    timeout_seconds: float = 10.0
    retry_policy: RetryPolicy = NO_RETRY
    transport: httpx.BaseTransport | None = None

    def __post_init__(self) -> None:
        self._http = JsonHttpClient(
            base_url=self.base_url.rstrip("/"),
            timeout_seconds=self.timeout_seconds,
            retry_policy=self.retry_policy,
            transport=self.transport,
        )

    def recent_heartbeats(
        self,
        address: str,
        limit: int,
        token: CancellationToken,
    ) -> Sequence[HeartbeatRecord]:
        payload = self._http.get_json(
            "/validator/heartbeat",
            token=token,
            params={"address": address, "limit": limit},
        )
        try:
            response = _HeartbeatResponse.model_validate(payload)
        except ValidationError as exc:
            raise TransportError(f"unexpected heartbeat response: {exc}", endpoint=self.base_url) from exc
        return tuple(
            HeartbeatRecord(height=entry.height, tx_hash=entry.tx_hash, timestamp=entry.timestamp)
            for entry in response.data[:limit]
        )

    def close(self) -> None:
        self._http.close()


__all__ = ["AxelarscanHeartbeatClient", "DEFAULT_AXELARSCAN_URL"]
