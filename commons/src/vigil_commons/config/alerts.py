"""Alert channel settings (Slack webhook, Telegram bot)."""

from __future__ import annotations

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AlertSettings(BaseSettings):
    """Destinations for per-cycle alert notifications.

    Every channel is optional; with none configured alerts are only logged.
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    slack_webhook_url: SecretStr | None = Field(default=None, alias="VIGIL_SLACK_WEBHOOK_URL")
    telegram_bot_token: SecretStr | None = Field(default=None, alias="VIGIL_TELEGRAM_BOT_TOKEN")
    telegram_chat_id: str | None = Field(default=None, alias="VIGIL_TELEGRAM_CHAT_ID")
    alert_label: str = Field(default="vigil", alias="VIGIL_ALERT_LABEL")
    timeout_seconds: float = Field(default=5.0, alias="VIGIL_ALERT_TIMEOUT_SECONDS", gt=0)

    @field_validator("slack_webhook_url", "telegram_bot_token", mode="before")
    @classmethod
    def _blank_as_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def slack_webhook_url_value(self) -> str | None:
        if self.slack_webhook_url is None:
            return None
        return self.slack_webhook_url.get_secret_value()

    @property
    def telegram_bot_token_value(self) -> str | None:
        if self.telegram_bot_token is None:
            return None
        return self.telegram_bot_token.get_secret_value()

    @property
    def telegram_enabled(self) -> bool:
        return bool(self.telegram_bot_token_value and self.telegram_chat_id)


__all__ = ["AlertSettings"]
