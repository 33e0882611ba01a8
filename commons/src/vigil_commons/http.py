"""JSON GET helper shared by the node and indexer HTTP clients."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from vigil_commons.errors import CheckCancelledError, TransportError
from vigil_commons.retry import NO_RETRY, RetryPolicy, call_with_retry
from vigil_commons.runtime.cancellation import CancellationToken

logger = logging.getLogger("vigil_commons.http")


class _ServerError(TransportError):
    """5xx answer; retried like a connection failure."""


def _retryable(exc: Exception) -> bool:
    return isinstance(exc, (httpx.TransportError, _ServerError))


@dataclass
class JsonHttpClient:
    """Issues GET requests and returns decoded JSON objects.

    Connection failures, timeouts and 5xx answers are retried per
    ``retry_policy``; anything left over surfaces as ``TransportError``.
    """

    base_url: str
    timeout_seconds: float = 10.0
    retry_policy: RetryPolicy = NO_RETRY
    transport: httpx.BaseTransport | None = None

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ValueError("base_url must not be empty")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout_seconds,
            transport=self.transport,
            headers={"Accept": "application/json"},
        )

    def close(self) -> None:
        self._client.close()

    def get_json(
        self,
        path: str,
        *,
        token: CancellationToken,
        params: Mapping[str, str | int] | None = None,
    ) -> dict[str, Any]:
        def _request() -> httpx.Response:
            remaining = token.remaining()
            timeout = self.timeout_seconds if remaining is None else max(0.001, min(self.timeout_seconds, remaining))
            response = self._client.get(path, params=params, timeout=timeout)
            if response.status_code >= httpx.codes.INTERNAL_SERVER_ERROR:
                raise _ServerError(
                    f"{self.base_url} returned {response.status_code} for GET {path}",
                    endpoint=self.base_url,
                )
            return response

        start = time.monotonic()
        try:
            response = call_with_retry(
                _request,
                policy=self.retry_policy,
                retryable=_retryable,
                token=token,
                description=f"GET {path}",
            )
        except httpx.HTTPError as exc:
            if token.cancelled:
                raise CheckCancelledError(f"GET {path} interrupted: check cancelled or deadline exceeded") from exc
            raise TransportError(
                f"GET {self.base_url}{path} failed: {type(exc).__name__}: {exc}",
                endpoint=self.base_url,
            ) from exc

        logger.debug(
            "http request complete",
            extra={
                "data": {
                    "path": path,
                    "status_code": response.status_code,
                    "elapsed_ms": round((time.monotonic() - start) * 1000, 2),
                }
            },
        )
        if response.status_code != httpx.codes.OK:
            raise TransportError(
                f"{self.base_url} returned {response.status_code} for GET {path}",
                endpoint=self.base_url,
            )
        try:
            payload = response.json()
        except json.JSONDecodeError as exc:
            raise TransportError(
                f"{self.base_url} returned invalid JSON for GET {path}",
                endpoint=self.base_url,
            ) from exc
        if not isinstance(payload, dict):
            raise TransportError(f"{self.base_url} returned a non-object body for GET {path}", endpoint=self.base_url)
        return payload


__all__ = ["JsonHttpClient"]
