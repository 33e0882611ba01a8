"""Cooperative cancellation shared by workers and blocking network calls."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from vigil_commons.errors import CheckCancelledError


class CancellationToken:
    """Event-backed cancellation signal with an optional monotonic deadline.

    Checks call ``raise_if_cancelled()`` before each network round trip and
    use ``wait()`` instead of ``time.sleep()`` so a stop request interrupts
    retry backoff.
    """

    def __init__(
        self,
        *,
        event: threading.Event | None = None,
        deadline: float | None = None,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._event = event or threading.Event()
        self._deadline = deadline
        self._monotonic = monotonic

    @classmethod
    def with_timeout(
        cls,
        seconds: float,
        *,
        event: threading.Event | None = None,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> CancellationToken:
        return cls(event=event, deadline=monotonic() + seconds, monotonic=monotonic)

    def cancel(self) -> None:
        self._event.set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and self._monotonic() >= self._deadline

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.expired

    def remaining(self) -> float | None:
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._monotonic())

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CheckCancelledError("check cancelled")
        if self.expired:
            raise CheckCancelledError("check deadline exceeded")

    def wait(self, seconds: float) -> None:
        """Sleep up to ``seconds``; raise if cancelled before or during the wait."""
        self.raise_if_cancelled()
        remaining = self.remaining()
        timeout = seconds if remaining is None else min(seconds, remaining)
        self._event.wait(timeout)
        self.raise_if_cancelled()


__all__ = ["CancellationToken"]
