"""Monitor logging setup on top of the shared commons config."""

from __future__ import annotations

import os

from vigil_commons.config.observability import ObservabilitySettings
from vigil_commons.observability.logging import CloudLoggingTarget
from vigil_commons.observability.logging import configure_logging as _configure_logging

SERVICE_NAME = "vigil-monitor"

_SCAN_LOGGERS = ("vigil_monitor.liveness.search", "vigil_monitor.liveness.matcher")


def scan_logger_levels() -> dict[str, dict[str, str]]:
    """Per-block scan lines log at DEBUG; ``VIGIL_SCAN_LOG_LEVEL`` surfaces them alone."""
    level = os.getenv("VIGIL_SCAN_LOG_LEVEL", "INFO").upper()
    return {name: {"level": level} for name in _SCAN_LOGGERS}


def configure_logging(observability: ObservabilitySettings) -> None:
    cloud = None
    if observability.enable_cloud_logging and observability.gcp_project_id:
        cloud = CloudLoggingTarget(
            project=observability.gcp_project_id,
            log_name=SERVICE_NAME,
            labels={"service": SERVICE_NAME},
        )
    _configure_logging(root_level_env="LOG_LEVEL", root_default="INFO", loggers=scan_logger_levels(), cloud=cloud)


__all__ = ["SERVICE_NAME", "configure_logging", "scan_logger_levels"]
