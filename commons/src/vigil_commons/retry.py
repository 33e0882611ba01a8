"""Shared retry helpers for outbound HTTP clients."""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from vigil_commons.runtime.cancellation import CancellationToken

T = TypeVar("T")

logger = logging.getLogger("vigil_commons.retry")


@dataclass(frozen=True)
class RetryPolicy:
    attempts: int
    initial_ms: int
    max_ms: int
    jitter: float  # fraction of backoff to add/subtract


NO_RETRY = RetryPolicy(attempts=1, initial_ms=0, max_ms=0, jitter=0.0)


def backoff_ms(attempt: int, policy: RetryPolicy) -> int:
    """Exponential backoff with jitter (attempt is zero-based)."""
    expo = policy.initial_ms * math.pow(2, attempt)
    capped = min(expo, policy.max_ms)
    jitter_span = capped * policy.jitter
    return int(max(0, capped + random.uniform(-jitter_span, jitter_span)))  # noqa: S311 - non-crypto backoff jitter


def call_with_retry(
    operation: Callable[[], T],
    *,
    policy: RetryPolicy,
    retryable: Callable[[Exception], bool],
    token: CancellationToken,
    description: str,
) -> T:
    """Run ``operation`` until it succeeds, a non-retryable error occurs or attempts run out.

    Backoff waits go through ``token`` so cancellation interrupts them.
    """
    attempts = max(1, policy.attempts)
    for attempt in range(attempts):
        token.raise_if_cancelled()
        try:
            return operation()
        except Exception as exc:
            if attempt + 1 >= attempts or not retryable(exc):
                raise
            delay_ms = backoff_ms(attempt, policy)
            logger.warning(
                "retrying after transient failure",
                extra={
                    "data": {
                        "operation": description,
                        "attempt": attempt + 1,
                        "attempts": attempts,
                        "delay_ms": delay_ms,
                        "error": str(exc),
                    }
                },
            )
            token.wait(delay_ms / 1000)
    raise AssertionError("unreachable")  # pragma: no cover


__all__ = ["NO_RETRY", "RetryPolicy", "backoff_ms", "call_with_retry"]
