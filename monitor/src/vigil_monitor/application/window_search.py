"""Scan the blocks following a window boundary for a heartbeat."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from vigil_commons.errors import TransportError
from vigil_commons.runtime.cancellation import CancellationToken
from vigil_monitor.application.heartbeat_matcher import HeartbeatMatcher
from vigil_monitor.application.ports.chain import ChainClientPort
from vigil_monitor.domain.envelope import Envelope
from vigil_monitor.domain.heartbeat import SearchOutcome

logger = logging.getLogger("vigil_monitor.liveness.search")


class BlockScanner:
    """Fetches the envelopes of one block, honouring cancellation."""

    def __init__(self, chain: ChainClientPort) -> None:
        self._chain = chain

    def scan(self, height: int, token: CancellationToken) -> Sequence[Envelope]:
        token.raise_if_cancelled()
        return self._chain.transactions(height, token)


class WindowSearcher:
    """Looks for a heartbeat in up to ``try_count`` blocks from a window start.

    Heartbeats rarely land exactly on the boundary block, so consecutive
    heights are tried until the first match.
    """

    def __init__(self, *, scanner: BlockScanner, matcher: HeartbeatMatcher) -> None:
        self._scanner = scanner
        self._matcher = matcher

    def search(self, start_height: int, try_count: int, token: CancellationToken) -> SearchOutcome:
        if try_count <= 0:
            raise ValueError("try_count must be positive")
        for attempt in range(try_count):
            height = start_height + attempt
            try:
                envelopes = self._scanner.scan(height, token)
            except TransportError as exc:
                logger.warning(
                    "block fetch failed, aborting window search",
                    extra={"data": {"height": height, "window_start": start_height, "error": str(exc)}},
                )
                return SearchOutcome(found=False, transport_error=exc, scanned=attempt + 1, height=height)

            logger.debug(
                "scanned block",
                extra={"data": {"height": height, "transactions": len(envelopes)}},
            )
            if self._matcher.first_match(envelopes) is not None:
                logger.info("heartbeat found", extra={"data": {"height": height, "window_start": start_height}})
                return SearchOutcome(found=True, scanned=attempt + 1, height=height)

        logger.info(
            "no heartbeat in window",
            extra={"data": {"window_start": start_height, "blocks_scanned": try_count}},
        )
        return SearchOutcome(found=False, scanned=try_count)


__all__ = ["BlockScanner", "WindowSearcher"]
