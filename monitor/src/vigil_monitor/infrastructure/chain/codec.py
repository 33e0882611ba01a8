"""Protobuf codec for the Cosmos SDK transaction layers the monitor reads.

Only the fields the checks need are described: ``TxRaw.body_bytes``,
``TxBody.messages`` and the Axelar ``RefundMsgRequest`` wrapper. Other fields
survive parsing as unknown fields. Message classes are built at import time
from descriptors registered in a private pool, so no generated ``_pb2``
modules are required.
"""

from __future__ import annotations

import hashlib
from collections.abc import Sequence

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import DecodeError as ProtobufDecodeError
from google.protobuf.message import Message

from vigil_monitor.domain.envelope import Envelope, RefundClaim, TxMessage
from vigil_monitor.domain.exceptions import DecodeError

_PACKAGE = "vigil.wire"

_Field = descriptor_pb2.FieldDescriptorProto


def _add_message(
    file_proto: descriptor_pb2.FileDescriptorProto,
    name: str,
    fields: Sequence[tuple[str, int, int, int, str | None]],
) -> None:
    message = file_proto.message_type.add(name=name)
    for field_name, number, field_type, label, type_name in fields:
        field = message.field.add(name=field_name, number=number, type=field_type, label=label)
        if type_name:
            field.type_name = type_name


def _build_pool() -> descriptor_pool.DescriptorPool:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="vigil/wire.proto",
        package=_PACKAGE,
        syntax="proto3",
    )
    any_type = f".{_PACKAGE}.Any"
    _add_message(
        file_proto,
        "Any",
        [
            ("type_url", 1, _Field.TYPE_STRING, _Field.LABEL_OPTIONAL, None),
            ("value", 2, _Field.TYPE_BYTES, _Field.LABEL_OPTIONAL, None),
        ],
    )
    _add_message(
        file_proto,
        "TxRaw",
        [
            ("body_bytes", 1, _Field.TYPE_BYTES, _Field.LABEL_OPTIONAL, None),
            ("auth_info_bytes", 2, _Field.TYPE_BYTES, _Field.LABEL_OPTIONAL, None),
            ("signatures", 3, _Field.TYPE_BYTES, _Field.LABEL_REPEATED, None),
        ],
    )
    _add_message(
        file_proto,
        "TxBody",
        [
            ("messages", 1, _Field.TYPE_MESSAGE, _Field.LABEL_REPEATED, any_type),
            ("memo", 2, _Field.TYPE_STRING, _Field.LABEL_OPTIONAL, None),
            ("timeout_height", 3, _Field.TYPE_UINT64, _Field.LABEL_OPTIONAL, None),
        ],
    )
    # axelar.reward.v1beta1.RefundMsgRequest: sender is an sdk.AccAddress (raw bytes).
    _add_message(
        file_proto,
        "RefundMsgRequest",
        [
            ("sender", 1, _Field.TYPE_BYTES, _Field.LABEL_OPTIONAL, None),
            ("inner_message", 2, _Field.TYPE_MESSAGE, _Field.LABEL_OPTIONAL, any_type),
        ],
    )
    pool = descriptor_pool.DescriptorPool()
    pool.Add(file_proto)
    return pool


_POOL = _build_pool()


def _message_class(name: str) -> type[Message]:
    return message_factory.GetMessageClass(_POOL.FindMessageTypeByName(f"{_PACKAGE}.{name}"))


AnyMessage = _message_class("Any")
TxRaw = _message_class("TxRaw")
TxBody = _message_class("TxBody")
RefundMsgRequest = _message_class("RefundMsgRequest")


def _parse(message_cls: type[Message], payload: bytes, *, what: str) -> Message:
    message = message_cls()
    try:
        message.ParseFromString(payload)
    except ProtobufDecodeError as exc:
        raise DecodeError(f"malformed {what} ({len(payload)} bytes): {exc}") from exc
    return message


def tx_hash(raw_tx: bytes) -> str:
    """CometBFT transaction hash: upper-case hex SHA-256 of the raw bytes."""
    return hashlib.sha256(raw_tx).hexdigest().upper()


def decode_tx(raw_tx: bytes) -> Envelope:
    """Decode a ``TxRaw`` into its ordered messages."""
    raw = _parse(TxRaw, raw_tx, what="transaction")
    body = _parse(TxBody, raw.body_bytes, what="transaction body")  # type: ignore[attr-defined]
    messages = tuple(
        TxMessage(type_url=item.type_url, value=bytes(item.value))
        for item in body.messages  # type: ignore[attr-defined]
    )
    return Envelope(messages=messages, tx_hash=tx_hash(raw_tx))


def decode_refund(payload: bytes) -> RefundClaim:
    """Decode a refund wrapper; raises ``DecodeError`` on malformed bytes."""
    request = _parse(RefundMsgRequest, payload, what="refund message")
    inner = request.inner_message  # type: ignore[attr-defined]
    return RefundClaim(sender=bytes(request.sender), inner_type_url=inner.type_url)  # type: ignore[attr-defined]


def encode_refund(sender: bytes, inner_type_url: str, inner_value: bytes = b"") -> bytes:
    request = RefundMsgRequest(
        sender=sender,
        inner_message=AnyMessage(type_url=inner_type_url, value=inner_value),
    )
    return request.SerializeToString()


def encode_tx(messages: Sequence[TxMessage], *, memo: str = "") -> bytes:
    body = TxBody(
        messages=[AnyMessage(type_url=message.type_url, value=message.value) for message in messages],
        memo=memo,
    )
    return TxRaw(body_bytes=body.SerializeToString()).SerializeToString()


__all__ = [
    "AnyMessage",
    "RefundMsgRequest",
    "TxBody",
    "TxRaw",
    "decode_refund",
    "decode_tx",
    "encode_refund",
    "encode_tx",
    "tx_hash",
]
