"""Retry settings for the node, LCD and indexer HTTP clients."""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vigil_commons.retry import NO_RETRY, RetryPolicy


class ExternalClientRetrySettings(BaseSettings):
    """Backoff applied to transient HTTP failures within one check cycle.

    Waits are bounded by the cycle deadline, so a long ``max_ms`` only matters
    when the cycle timeout leaves room for it. ``VIGIL_RETRY_ATTEMPTS=1``
    disables retries.
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    attempts: int = Field(default=3, alias="VIGIL_RETRY_ATTEMPTS", ge=1)
    initial_ms: int = Field(default=500, alias="VIGIL_RETRY_INITIAL_MS", ge=0)
    max_ms: int = Field(default=5000, alias="VIGIL_RETRY_MAX_MS", ge=0)
    jitter: float = Field(default=0.2, alias="VIGIL_RETRY_JITTER", ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _check_bounds(self) -> ExternalClientRetrySettings:
        if self.max_ms < self.initial_ms:
            raise ValueError("VIGIL_RETRY_MAX_MS must not be below VIGIL_RETRY_INITIAL_MS")
        return self

    @property
    def retry_policy(self) -> RetryPolicy:
        if self.attempts == 1:
            return NO_RETRY
        return RetryPolicy(
            attempts=self.attempts,
            initial_ms=self.initial_ms,
            max_ms=self.max_ms,
            jitter=self.jitter,
        )


__all__ = ["ExternalClientRetrySettings"]
