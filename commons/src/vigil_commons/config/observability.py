"""Log export and metrics naming settings."""

from __future__ import annotations

import re

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_METRIC_NAMESPACE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


class ObservabilitySettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    enable_cloud_logging: bool = Field(default=False, alias="ENABLE_CLOUD_LOGGING")
    gcp_project_id: str | None = Field(default=None, alias="GCP_PROJECT_ID")
    metrics_namespace: str = Field(default="vigil", alias="VIGIL_METRICS_NAMESPACE")

    @field_validator("metrics_namespace", mode="after")
    @classmethod
    def _valid_namespace(cls, value: str) -> str:
        if not _METRIC_NAMESPACE.match(value):
            raise ValueError(f"invalid Prometheus metric namespace: {value!r}")
        return value

    @model_validator(mode="after")
    def _cloud_logging_needs_project(self) -> ObservabilitySettings:
        if self.enable_cloud_logging and not self.gcp_project_id:
            raise ValueError("GCP_PROJECT_ID is required when ENABLE_CLOUD_LOGGING is set")
        return self


__all__ = ["ObservabilitySettings"]
