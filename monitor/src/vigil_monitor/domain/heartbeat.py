"""Heartbeat windows, search outcomes and liveness verdicts."""

from __future__ import annotations

from dataclasses import dataclass

from vigil_commons.errors import TransportError

DEFAULT_WINDOW_LENGTH = 50


def preceding_window_start(latest_height: int, length: int = DEFAULT_WINDOW_LENGTH) -> int:
    """Return the start height of the last complete window before ``latest_height``.

    The still-forming window is never returned: an aligned height steps back a
    full window.
    """
    if length <= 0:
        raise ValueError("window length must be positive")
    if latest_height < 0:
        raise ValueError("chain height must be non-negative")
    offset = latest_height % length
    if offset != 0:
        return latest_height - offset
    return latest_height - length


@dataclass(frozen=True, slots=True)
class HeartbeatWindow:
    start_height: int
    length: int = DEFAULT_WINDOW_LENGTH

    def __post_init__(self) -> None:
        if self.length <= 0:
            raise ValueError("window length must be positive")
        if self.start_height % self.length != 0:
            raise ValueError(
                f"window start {self.start_height} is not aligned to length {self.length}",
            )

    @classmethod
    def preceding(cls, latest_height: int, length: int = DEFAULT_WINDOW_LENGTH) -> HeartbeatWindow:
        return cls(start_height=preceding_window_start(latest_height, length), length=length)

    def previous(self) -> HeartbeatWindow:
        return HeartbeatWindow(start_height=self.start_height - self.length, length=self.length)


@dataclass(frozen=True, slots=True)
class SearchOutcome:
    """Result of scanning one window.

    ``transport_error`` means the scan could not finish; it says nothing about
    whether a heartbeat existed.
    """

    found: bool
    transport_error: TransportError | None = None
    scanned: int = 0
    height: int | None = None


@dataclass(frozen=True, slots=True)
class LivenessVerdict:
    windows_checked: int
    missed: int
    status: bool
    source: str = "chain-scan"

    def __post_init__(self) -> None:
        if not 0 <= self.missed <= self.windows_checked:
            raise ValueError("missed must be between 0 and windows_checked")

    @classmethod
    def from_counts(
        cls,
        *,
        windows_checked: int,
        missed: int,
        miss_threshold: int,
        source: str,
    ) -> LivenessVerdict:
        return cls(
            windows_checked=windows_checked,
            missed=missed,
            status=missed < miss_threshold,
            source=source,
        )

    @property
    def succeeded(self) -> int:
        return self.windows_checked - self.missed

    @property
    def summary(self) -> str:
        return f"{self.missed}/{self.windows_checked}"


@dataclass(frozen=True, slots=True)
class HeartbeatRecord:
    """A heartbeat as reported by the indexer."""

    height: int
    tx_hash: str
    timestamp: str


__all__ = [
    "DEFAULT_WINDOW_LENGTH",
    "HeartbeatRecord",
    "HeartbeatWindow",
    "LivenessVerdict",
    "SearchOutcome",
    "preceding_window_start",
]
