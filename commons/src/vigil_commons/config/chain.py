"""Shared Axelar node connectivity settings."""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ChainSettings(BaseSettings):
    """Endpoints of the CometBFT RPC and the Cosmos LCD REST gateway."""

    model_config = SettingsConfigDict(
        frozen=True,
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    rpc_url: str = Field(default="http://127.0.0.1:26657", alias="VIGIL_RPC_URL")
    lcd_url: str = Field(default="http://127.0.0.1:1317", alias="VIGIL_LCD_URL")
    timeout_seconds: float = Field(default=10.0, alias="VIGIL_HTTP_TIMEOUT_SECONDS", gt=0)

    @field_validator("rpc_url", "lcd_url", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        stripped = value.strip().rstrip("/")
        if not stripped:
            raise ValueError("node endpoint must be a non-empty URL")
        return stripped


__all__ = ["ChainSettings"]
