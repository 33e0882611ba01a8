"""Logging setup shared by vigil services.

Records carry structured fields in ``extra={"data": {...}}``. Locally they are
rendered as ``<line> | data={...}``; under Cloud Run or Kubernetes every record
becomes one JSON object so the platform can index the fields.
"""

from __future__ import annotations

import json
import logging
import os
import time
import traceback
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, is_dataclass
from logging.config import dictConfig
from typing import Any

from opentelemetry import trace

CONSOLE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# logger name -> (level env var, default level)
QUIET_LOGGERS: Mapping[str, tuple[str, str]] = {
    "uvicorn": ("UVICORN_LOG_LEVEL", "INFO"),
    "uvicorn.error": ("UVICORN_LOG_LEVEL", "INFO"),
    "uvicorn.access": ("UVICORN_ACCESS_LOG_LEVEL", "WARNING"),
    "httpx": ("HTTPX_LOG_LEVEL", "WARNING"),
    "httpcore": ("HTTPX_LOG_LEVEL", "WARNING"),
}


@dataclass(frozen=True, slots=True)
class CloudLoggingTarget:
    """Where Google Cloud Logging entries go."""

    project: str
    log_name: str = "vigil"
    labels: Mapping[str, str] = field(default_factory=dict)


def running_in_managed_runtime() -> bool:
    return bool(os.getenv("K_SERVICE") or os.getenv("KUBERNETES_SERVICE_HOST"))


def _env_level(env_var: str, default: str) -> str:
    return os.getenv(env_var, default).upper()


def _iso_utc(record: logging.LogRecord) -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created)) + f".{int(record.msecs):03d}Z"


def _compact(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


def to_jsonable(value: Any, depth: int = 6, max_items: int = 100) -> Any:
    """JSON-safe copy of ``value``; bytes are summarised, unknown types stringified."""
    if depth <= 0:
        return "<depth_exceeded>"
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes len={len(value)}>"
    if is_dataclass(value) and not isinstance(value, type):
        value = asdict(value)
    if isinstance(value, Mapping):
        items = list(value.items())[:max_items]
        return {str(key): to_jsonable(item, depth - 1, max_items) for key, item in items}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(item, depth - 1, max_items) for item in list(value)[:max_items]]
    return str(value)


class ExtrasFormatter(logging.Formatter):
    """Console formatter aware of the ``data`` extra.

    ``json_output=None`` picks JSON only inside a managed runtime.
    """

    def __init__(self, fmt: str | None = None, datefmt: str | None = None, *, json_output: bool | None = None) -> None:
        super().__init__(fmt, datefmt)
        self._json_output = json_output

    def format(self, record: logging.LogRecord) -> str:
        data = record.__dict__.get("data")
        as_json = running_in_managed_runtime() if self._json_output is None else self._json_output
        if as_json:
            return _compact(self._payload(record, data))
        line = super().format(record)
        if data:
            return f"{line} | data={_compact(to_jsonable(data))}"
        return line

    @staticmethod
    def _payload(record: logging.LogRecord, data: Any) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "message": record.getMessage(),
            "severity": record.levelname,
            "logger": record.name,
            "timestamp": _iso_utc(record),
        }
        if data:
            payload["data"] = to_jsonable(data)
        otel = record.__dict__.get("otel")
        if otel:
            payload["otel"] = otel
        if record.exc_info:
            payload["exception"] = "".join(traceback.format_exception(*record.exc_info)).rstrip("\n")
        return payload


class OtelContextLogFilter(logging.Filter):
    """Copies the active span's trace and span ids onto the record as ``otel``."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = trace.get_current_span().get_span_context()
        if context.is_valid:
            record.__dict__["otel"] = {"trace_id": f"{context.trace_id:032x}", "span_id": f"{context.span_id:016x}"}
        return True


def _cloud_handler(target: CloudLoggingTarget) -> dict[str, Any]:
    # Lazy import: the client resolves application default credentials when built.
    from google.cloud import logging as gcp_logging
    from google.cloud.logging_v2.resource import Resource

    return {
        "class": "google.cloud.logging_v2.handlers.handlers.CloudLoggingHandler",
        "level": "INFO",
        "client": gcp_logging.Client(project=target.project),  # type: ignore[no-untyped-call]
        "name": target.log_name,
        "resource": Resource("global", {"project_id": target.project}),
        "labels": dict(target.labels),
        "formatter": "console",
        "filters": ["otel_context"],
    }


def build_log_config(
    *,
    root_level_env: str = "LOG_LEVEL",
    root_default: str = "INFO",
    loggers: Mapping[str, Mapping[str, Any]] | None = None,
    cloud: CloudLoggingTarget | None = None,
) -> dict[str, Any]:
    """dictConfig for a console handler plus, when ``cloud`` is given, Cloud Logging."""
    handlers: dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
            "formatter": "console",
            "filters": ["otel_context"],
        },
    }
    if cloud is not None:
        handlers["cloud_logging"] = _cloud_handler(cloud)
    handler_names = list(handlers)

    logger_config: dict[str, dict[str, Any]] = {
        name: {"level": _env_level(env_var, default), "handlers": handler_names, "propagate": False}
        for name, (env_var, default) in QUIET_LOGGERS.items()
    }
    for name, config in (loggers or {}).items():
        logger_config[name] = dict(config)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {"()": ExtrasFormatter, "format": CONSOLE_FORMAT, "datefmt": "%Y-%m-%dT%H:%M:%S"},
        },
        "filters": {"otel_context": {"()": OtelContextLogFilter}},
        "handlers": handlers,
        "root": {"level": _env_level(root_level_env, root_default), "handlers": handler_names},
        "loggers": logger_config,
    }


def configure_logging(
    *,
    root_level_env: str = "LOG_LEVEL",
    root_default: str = "INFO",
    loggers: Mapping[str, Mapping[str, Any]] | None = None,
    cloud: CloudLoggingTarget | None = None,
) -> None:
    dictConfig(build_log_config(root_level_env=root_level_env, root_default=root_default, loggers=loggers, cloud=cloud))
    logging.getLogger(__name__).debug(
        "logging configured",
        extra={"data": {"cloud_project": cloud.project if cloud else None}},
    )


def shutdown_logging() -> None:
    """Flush and close the root handlers (Cloud Logging sends in the background)."""
    for handler in list(logging.getLogger().handlers):
        handler.flush()
        handler.close()


__all__ = [
    "CloudLoggingTarget",
    "ExtrasFormatter",
    "OtelContextLogFilter",
    "build_log_config",
    "configure_logging",
    "running_in_managed_runtime",
    "shutdown_logging",
    "to_jsonable",
]
