"""Port definitions for reading Axelar chain state."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from vigil_commons.runtime.cancellation import CancellationToken
from vigil_monitor.domain.address import Address
from vigil_monitor.domain.envelope import Envelope


class ChainClientPort(Protocol):
    """Abstract client for the node queries the checks depend on.

    Every method raises ``TransportError`` when the node cannot answer and
    ``CheckCancelledError`` when ``token`` fires first.
    """

    def latest_height(self, token: CancellationToken) -> int:
        """Return the latest block height known to the node."""

    def transactions(self, height: int, token: CancellationToken) -> Sequence[Envelope]:
        """Return the decoded transaction envelopes included at ``height``."""

    def chains(self, token: CancellationToken) -> Sequence[str]:
        """Return the names of the activated external chains."""

    def chain_maintainers(self, chain: str, token: CancellationToken) -> Sequence[Address]:
        """Return the maintainer set registered for ``chain``."""

    def close(self) -> None:
        """Release any held resources."""


__all__ = ["ChainClientPort"]
