"""Configuration helpers for monitor runtime wiring."""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vigil_commons.config.alerts import AlertSettings
from vigil_commons.config.chain import ChainSettings
from vigil_commons.config.external_client import ExternalClientRetrySettings
from vigil_commons.config.observability import ObservabilitySettings
from vigil_monitor.domain.address import KNOWN_RELAYER_ADDRESS
from vigil_monitor.domain.heartbeat import DEFAULT_WINDOW_LENGTH
from vigil_monitor.infrastructure.indexer.axelarscan import DEFAULT_AXELARSCAN_URL

HeartbeatSourceName = Literal["chain-scan", "indexer"]


def _split_csv(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


class IdentitySettings(BaseSettings):
    """Who is being monitored."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    broadcaster_address: str = Field(default="", alias="VIGIL_BROADCASTER_ADDRESS")
    validator_address: str = Field(default="", alias="VIGIL_VALIDATOR_ADDRESS")
    fallback_addresses: str = Field(default=KNOWN_RELAYER_ADDRESS, alias="VIGIL_FALLBACK_ADDRESSES")
    except_chains: str = Field(default="", alias="VIGIL_EXCEPT_CHAINS")

    @property
    def fallback_address_list(self) -> tuple[str, ...]:
        return _split_csv(self.fallback_addresses)

    @property
    def except_chain_names(self) -> tuple[str, ...]:
        return tuple(name.lower() for name in _split_csv(self.except_chains))


class HeartbeatSettings(BaseSettings):
    """Window geometry and miss tolerance of the liveness check."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    source: HeartbeatSourceName = Field(default="chain-scan", alias="VIGIL_HEARTBEAT_SOURCE")
    window_length: int = Field(default=DEFAULT_WINDOW_LENGTH, alias="VIGIL_HEARTBEAT_WINDOW", gt=0)
    check_n: int = Field(default=5, alias="VIGIL_HEARTBEAT_CHECK_N", gt=0)
    try_count: int = Field(default=5, alias="VIGIL_HEARTBEAT_TRY_COUNT", gt=0)
    miss_threshold: int = Field(default=3, alias="VIGIL_HEARTBEAT_MISS_THRESHOLD", gt=0)
    max_age_seconds: int = Field(default=300, alias="VIGIL_HEARTBEAT_MAX_AGE_SECONDS", gt=0)
    indexer_url: str = Field(default=DEFAULT_AXELARSCAN_URL, alias="VIGIL_INDEXER_URL")

    @field_validator("source", mode="before")
    @classmethod
    def _normalize_source(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class Settings(BaseSettings):
    """Monitor runtime configuration resolved from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    # --- Server ---
    http_host: str = Field(default="0.0.0.0", alias="VIGIL_HOST")  # noqa: S104
    http_port: int = Field(default=8300, alias="VIGIL_PORT")
    poll_interval_seconds: float = Field(default=60.0, alias="VIGIL_POLL_INTERVAL_SECONDS", gt=0)
    cycle_timeout_seconds: float = Field(default=300.0, alias="VIGIL_CYCLE_TIMEOUT_SECONDS", gt=0)

    # --- Component settings ---
    chain: ChainSettings = Field(default_factory=ChainSettings)
    identity: IdentitySettings = Field(default_factory=IdentitySettings)
    heartbeat: HeartbeatSettings = Field(default_factory=HeartbeatSettings)
    alerts: AlertSettings = Field(default_factory=AlertSettings)
    retry: ExternalClientRetrySettings = Field(default_factory=ExternalClientRetrySettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    # --- Loader ---
    @classmethod
    def load(cls) -> Settings:
        instance = cls()
        logger = logging.getLogger("vigil_monitor.settings")
        logger.info("monitor settings loaded: %r", instance)
        return instance


__all__ = ["HeartbeatSettings", "IdentitySettings", "Settings"]
