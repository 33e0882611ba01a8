"""Chain client over the CometBFT RPC and the Axelar LCD REST gateway."""

from __future__ import annotations

import base64
import binascii
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from vigil_commons.config.chain import ChainSettings
from vigil_commons.errors import TransportError
from vigil_commons.http import JsonHttpClient
from vigil_commons.retry import NO_RETRY, RetryPolicy
from vigil_commons.runtime.cancellation import CancellationToken
from vigil_monitor.application.ports.chain import ChainClientPort
from vigil_monitor.domain.address import Address
from vigil_monitor.domain.envelope import Envelope
from vigil_monitor.domain.exceptions import DecodeError

from .codec import decode_tx

logger = logging.getLogger("vigil_monitor.infrastructure.chain")

ACTIVATED_CHAIN_STATUS = "CHAIN_STATUS_ACTIVATED"


@dataclass
class HttpChainClient(ChainClientPort):
    """Implementation of ChainClientPort backed by HTTPX.

    Heights and blocks come from the CometBFT RPC; chain lists and maintainer
    sets from the LCD gateway of the nexus module.
    """

    rpc_url: str
    lcd_url: str
    timeout_seconds: float = 10.0
    retry_policy: RetryPolicy = NO_RETRY
    transport: httpx.BaseTransport | None = None

    def __post_init__(self) -> None:
        self._rpc = JsonHttpClient(
            base_url=self.rpc_url,
            timeout_seconds=self.timeout_seconds,
            retry_policy=self.retry_policy,
            transport=self.transport,
        )
        self._lcd = JsonHttpClient(
            base_url=self.lcd_url,
            timeout_seconds=self.timeout_seconds,
            retry_policy=self.retry_policy,
            transport=self.transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: ChainSettings,
        *,
        retry_policy: RetryPolicy = NO_RETRY,
    ) -> HttpChainClient:
        return cls(
            rpc_url=settings.rpc_url,
            lcd_url=settings.lcd_url,
            timeout_seconds=settings.timeout_seconds,
            retry_policy=retry_policy,
        )

    def latest_height(self, token: CancellationToken) -> int:
        result = self._rpc_result("/status", token=token)
        raw_height = _dig(result, "sync_info", "latest_block_height")
        try:
            return int(raw_height)
        except (TypeError, ValueError) as exc:
            raise TransportError(f"node reported invalid height {raw_height!r}", endpoint=self.rpc_url) from exc

    def transactions(self, height: int, token: CancellationToken) -> Sequence[Envelope]:
        result = self._rpc_result("/block", token=token, params={"height": height})
        encoded_txs = _dig(result, "block", "data", "txs") or []
        if not isinstance(encoded_txs, list):
            raise TransportError(f"block {height} has a malformed transaction list", endpoint=self.rpc_url)
        envelopes: list[Envelope] = []
        for position, encoded in enumerate(encoded_txs):
            try:
                raw_tx = base64.b64decode(encoded, validate=True)
            except (binascii.Error, TypeError, ValueError) as exc:
                raise TransportError(
                    f"block {height} transaction {position} is not valid base64",
                    endpoint=self.rpc_url,
                ) from exc
            try:
                envelopes.append(decode_tx(raw_tx))
            except DecodeError as exc:
                # Not a TxRaw at all, so it cannot hold a heartbeat either.
                logger.warning(
                    "skipping undecodable transaction",
                    extra={"data": {"height": height, "position": position, "error": str(exc)}},
                )
        return envelopes

    def chains(self, token: CancellationToken) -> Sequence[str]:
        payload = self._lcd.get_json(
            "/axelar/nexus/v1beta1/chains",
            token=token,
            params={"status": ACTIVATED_CHAIN_STATUS},
        )
        chains = payload.get("chains")
        if not isinstance(chains, list) or not all(isinstance(name, str) for name in chains):
            raise TransportError("chains response is missing a list of names", endpoint=self.lcd_url)
        return tuple(chains)

    def chain_maintainers(self, chain: str, token: CancellationToken) -> Sequence[Address]:
        path = f"/axelar/nexus/v1beta1/chain_maintainers/{quote(chain, safe='')}"
        payload = self._lcd.get_json(path, token=token)
        maintainers = payload.get("maintainers") or []
        if not isinstance(maintainers, list):
            raise TransportError(f"maintainers response for {chain} is malformed", endpoint=self.lcd_url)
        addresses: list[Address] = []
        for value in maintainers:
            try:
                addresses.append(Address.from_bech32(str(value)))
            except ValueError as exc:
                raise DecodeError(f"maintainer of {chain} is not a bech32 address: {value!r}") from exc
        return tuple(addresses)

    def close(self) -> None:
        self._rpc.close()
        self._lcd.close()

    def _rpc_result(
        self,
        path: str,
        *,
        token: CancellationToken,
        params: dict[str, str | int] | None = None,
    ) -> dict[str, Any]:
        payload = self._rpc.get_json(path, token=token, params=params)
        if payload.get("error"):
            raise TransportError(f"rpc error for {path}: {payload['error']}", endpoint=self.rpc_url)
        result = payload.get("result")
        if not isinstance(result, dict):
            raise TransportError(f"rpc response for {path} has no result", endpoint=self.rpc_url)
        return result


def _dig(payload: dict[str, Any], *keys: str) -> Any:
    current: Any = payload
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


__all__ = ["ACTIVATED_CHAIN_STATUS", "HttpChainClient"]
