"""Recognise broadcaster heartbeats inside transaction envelopes."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from vigil_monitor.domain.address import Address, AddressAllowList
from vigil_monitor.domain.envelope import (
    HEARTBEAT_TYPE_URL,
    REFUND_MSG_TYPE_URL,
    Envelope,
    RefundClaim,
    TxMessage,
)

RefundDecoder = Callable[[bytes], RefundClaim]
"""Decodes a refund wrapper payload; raises ``DecodeError`` on malformed bytes."""

logger = logging.getLogger("vigil_monitor.liveness.matcher")


class HeartbeatMatcher:
    """Decides whether an envelope carries a heartbeat from the broadcaster.

    Heartbeats travel as the inner message of a refund wrapper, so both tags
    are checked: a refund wrapping something else is not a heartbeat.
    A malformed refund payload raises ``DecodeError`` instead of being
    treated as a non-match.
    """

    def __init__(
        self,
        *,
        broadcaster: Address,
        decode_refund: RefundDecoder,
        fallback: AddressAllowList | None = None,
    ) -> None:
        self._broadcaster = broadcaster
        self._decode_refund = decode_refund
        self._fallback = fallback or AddressAllowList()

    def matches(self, envelope: Envelope) -> bool:
        return any(self._is_heartbeat(message) for message in envelope.messages)

    def first_match(self, envelopes: Sequence[Envelope]) -> int | None:
        for index, envelope in enumerate(envelopes):
            if self.matches(envelope):
                return index
        return None

    def _is_heartbeat(self, message: TxMessage) -> bool:
        if message.type_url != REFUND_MSG_TYPE_URL:
            return False
        claim = self._decode_refund(message.value)
        if not self._is_accepted_sender(claim.sender):
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "refund from another sender",
                    extra={"data": {"sender": Address.from_bytes(claim.sender).to_bech32()}},
                )
            return False
        return claim.inner_type_url == HEARTBEAT_TYPE_URL

    def _is_accepted_sender(self, sender: bytes) -> bool:
        candidate = Address.from_bytes(sender)
        return candidate == self._broadcaster or candidate in self._fallback


__all__ = ["HeartbeatMatcher", "RefundDecoder"]
