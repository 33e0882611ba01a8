"""Runtime chain client that defers to the configured provider."""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence

from vigil_commons.config.chain import ChainSettings
from vigil_commons.retry import NO_RETRY, RetryPolicy
from vigil_commons.runtime.cancellation import CancellationToken
from vigil_monitor.application.ports.chain import ChainClientPort
from vigil_monitor.domain.address import Address
from vigil_monitor.domain.envelope import Envelope

from .http_client import HttpChainClient


class RuntimeChainClient(ChainClientPort):
    """Concrete client used by the runtime, pluggable for tests.

    The delegate is built on first use so a node that is down at start-up
    only fails the cycle that needs it.
    """

    def __init__(
        self,
        settings: ChainSettings,
        *,
        retry_policy: RetryPolicy = NO_RETRY,
        client_factory: Callable[[ChainSettings], ChainClientPort] | None = None,
    ) -> None:
        self._settings = settings
        self._factory = client_factory or (
            lambda cfg: HttpChainClient.from_settings(cfg, retry_policy=retry_policy)
        )
        self._client: ChainClientPort | None = None
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # helpers

    def _delegate(self) -> ChainClientPort:
        if self._client is None:
            self._client = self._factory(self._settings)
        return self._client

    # ------------------------------------------------------------------
    # port implementation

    def latest_height(self, token: CancellationToken) -> int:
        with self._lock:
            return self._delegate().latest_height(token)

    def transactions(self, height: int, token: CancellationToken) -> Sequence[Envelope]:
        with self._lock:
            return self._delegate().transactions(height, token)

    def chains(self, token: CancellationToken) -> Sequence[str]:
        with self._lock:
            return self._delegate().chains(token)

    def chain_maintainers(self, chain: str, token: CancellationToken) -> Sequence[Address]:
        with self._lock:
            return self._delegate().chain_maintainers(chain, token)

    def close(self) -> None:
        with self._lock:
            if self._client is None:
                return
            self._client.close()
            self._client = None


__all__ = ["RuntimeChainClient"]
