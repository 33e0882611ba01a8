from __future__ import annotations

import logging

import pytest

from monitor.tests.fixtures.wire import (
    OTHER_INNER_TYPE_URL,
    heartbeat_envelope,
    make_address,
    refund_message,
    unrelated_envelope,
)
from vigil_monitor.application.heartbeat_matcher import HeartbeatMatcher
from vigil_monitor.domain.address import AddressAllowList
from vigil_monitor.domain.envelope import REFUND_MSG_TYPE_URL, Envelope, TxMessage
from vigil_monitor.domain.exceptions import DecodeError
from vigil_monitor.infrastructure.chain.codec import decode_refund

BROADCASTER = make_address(1)
RELAYER = make_address(7)
STRANGER = make_address(9)


def _matcher(*, fallback: AddressAllowList | None = None) -> HeartbeatMatcher:
    return HeartbeatMatcher(broadcaster=BROADCASTER, decode_refund=decode_refund, fallback=fallback)


def test_matches_broadcaster_heartbeat() -> None:
    assert _matcher().matches(heartbeat_envelope(BROADCASTER))


def test_rejects_refund_wrapping_other_message() -> None:
    envelope = Envelope(messages=(refund_message(BROADCASTER, OTHER_INNER_TYPE_URL),))

    assert not _matcher().matches(envelope)


def test_rejects_heartbeat_from_unknown_sender() -> None:
    assert not _matcher().matches(heartbeat_envelope(STRANGER))


def test_accepts_heartbeat_from_allow_listed_relayer() -> None:
    matcher = _matcher(fallback=AddressAllowList(frozenset({RELAYER})))

    assert matcher.matches(heartbeat_envelope(RELAYER))
    assert not matcher.matches(heartbeat_envelope(STRANGER))


def test_ignores_messages_with_other_outer_tag() -> None:
    assert not _matcher().matches(unrelated_envelope())


def test_any_message_in_envelope_can_match() -> None:
    envelope = Envelope(
        messages=(
            refund_message(BROADCASTER, OTHER_INNER_TYPE_URL),
            refund_message(BROADCASTER),
        ),
    )

    assert _matcher().matches(envelope)


def test_first_match_returns_index() -> None:
    envelopes = [unrelated_envelope(), heartbeat_envelope(STRANGER), heartbeat_envelope(BROADCASTER)]

    assert _matcher().first_match(envelopes) == 2
    assert _matcher().first_match(envelopes[:2]) is None
    assert _matcher().first_match([]) is None


def test_truncated_refund_payload_raises_decode_error() -> None:
    envelope = Envelope(messages=(TxMessage(type_url=REFUND_MSG_TYPE_URL, value=b"\x0a\x05ab"),))

    with pytest.raises(DecodeError):
        _matcher().matches(envelope)


def test_foreign_sender_is_logged_only_at_debug(caplog: pytest.LogCaptureFixture) -> None:
    matcher = _matcher()

    with caplog.at_level(logging.INFO, logger="vigil_monitor.liveness.matcher"):
        assert not matcher.matches(heartbeat_envelope(STRANGER))
    assert caplog.records == []

    with caplog.at_level(logging.DEBUG, logger="vigil_monitor.liveness.matcher"):
        assert not matcher.matches(heartbeat_envelope(STRANGER))
    (record,) = caplog.records
    assert record.data == {"sender": STRANGER.to_bech32()}
