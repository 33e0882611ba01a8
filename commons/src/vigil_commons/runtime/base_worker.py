"""Periodic background worker on a daemon thread."""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import ClassVar


class BaseWorker(ABC):
    """Calls ``_tick()`` on a fixed cadence until ``stop()``.

    Ticks are scheduled from the start of the previous tick, so a slow tick
    shortens the following pause instead of drifting the schedule. The pause
    waits on ``self._stop``; subclasses hand that same event to their work so
    a stop request also aborts a tick in progress.
    """

    worker_name: ClassVar[str] = "vigil-worker"
    logger_name: ClassVar[str] = "vigil.worker"
    default_poll_interval: ClassVar[float] = 60.0

    def __init__(
        self,
        *,
        poll_interval: float | None = None,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        interval = poll_interval if poll_interval is not None else self.default_poll_interval
        if interval <= 0:
            raise ValueError("poll_interval must be positive")
        self._poll_interval = interval
        self._monotonic = monotonic
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._logger = logging.getLogger(self.logger_name)
        self.consecutive_failures = 0

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run_loop, name=self.worker_name, daemon=True)
        self._thread.start()
        self._logger.info("worker started", extra={"data": {"worker": self.worker_name}})

    def stop(self, timeout: float = 5.0) -> None:
        """Signal the loop and wait up to ``timeout`` seconds for it to exit."""
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            self._logger.warning("worker did not stop in time", extra={"data": {"timeout": timeout}})
        else:
            self._logger.info("worker stopped", extra={"data": {"worker": self.worker_name}})

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    def _run_loop(self) -> None:
        while not self._stop.is_set():
            started = self._monotonic()
            try:
                self._tick()
            except Exception:
                self.consecutive_failures += 1
                self._logger.exception(
                    "worker tick failed",
                    extra={"data": {"consecutive_failures": self.consecutive_failures}},
                )
            else:
                self.consecutive_failures = 0
            pause = self._poll_interval - (self._monotonic() - started)
            self._stop.wait(max(0.0, pause))

    @abstractmethod
    def _tick(self) -> None:
        """Run one unit of work."""


__all__ = ["BaseWorker"]
