"""Transaction envelopes as seen by the heartbeat matcher."""

from __future__ import annotations

from dataclasses import dataclass

REFUND_MSG_TYPE_URL = "/axelar.reward.v1beta1.RefundMsgRequest"
HEARTBEAT_TYPE_URL = "/axelar.tss.v1beta1.HeartBeatRequest"


@dataclass(frozen=True, slots=True)
class TxMessage:
    """One message of a transaction: a type tag plus its still-encoded payload."""

    type_url: str
    value: bytes


@dataclass(frozen=True, slots=True)
class Envelope:
    """Ordered messages of one transaction."""

    messages: tuple[TxMessage, ...]
    tx_hash: str | None = None


@dataclass(frozen=True, slots=True)
class RefundClaim:
    """Decoded refund wrapper: who sent it and what it wraps."""

    sender: bytes
    inner_type_url: str


__all__ = [
    "Envelope",
    "HEARTBEAT_TYPE_URL",
    "REFUND_MSG_TYPE_URL",
    "RefundClaim",
    "TxMessage",
]
