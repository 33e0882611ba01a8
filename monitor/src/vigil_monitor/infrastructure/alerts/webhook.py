"""Alert sinks posting to Slack incoming webhooks and the Telegram bot API."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import httpx

from vigil_commons.config.alerts import AlertSettings
from vigil_monitor.application.ports.alerts import Alert, AlertSinkPort

logger = logging.getLogger("vigil_monitor.alerts")

TELEGRAM_API_URL = "https://api.telegram.org"


class AlertDeliveryError(RuntimeError):
    """Raised by a sink's transport step when the channel rejects an alert."""


@dataclass
class _HttpAlertSink:
    label: str
    timeout_seconds: float = 5.0
    transport: httpx.BaseTransport | None = None

    channel = "http"

    def send(self, alert: Alert) -> None:
        try:
            self._deliver(alert)
        except (httpx.HTTPError, AlertDeliveryError) as exc:
            # Logged only; delivery never fails a cycle.
            logger.error(
                "alert delivery failed",
                extra={"data": {"channel": self.channel, "title": alert.title, "error": str(exc)}},
            )

    def _post(self, url: str, payload: dict[str, object]) -> None:
        with httpx.Client(timeout=self.timeout_seconds, transport=self.transport) as client:
            response = client.post(url, json=payload)
        if response.status_code != httpx.codes.OK:
            raise AlertDeliveryError(f"{self.channel} returned {response.status_code}")

    def _deliver(self, alert: Alert) -> None:  # pragma: no cover - overridden
        raise NotImplementedError


@dataclass
class SlackWebhookAlertSink(_HttpAlertSink):
    webhook_url: str = ""

    channel = "slack"

    def _deliver(self, alert: Alert) -> None:
        self._post(self.webhook_url, {"text": alert.render(label=self.label)})


@dataclass
class TelegramAlertSink(_HttpAlertSink):
    bot_token: str = ""
    chat_id: str = ""
    api_url: str = TELEGRAM_API_URL

    channel = "telegram"

    def _deliver(self, alert: Alert) -> None:
        self._post(
            f"{self.api_url}/bot{self.bot_token}/sendMessage",
            {"chat_id": self.chat_id, "text": alert.render(label=self.label)},
        )


class LoggingAlertSink(AlertSinkPort):
    """Fallback sink used when no channel is configured."""

    def __init__(self, *, label: str | None = None) -> None:
        self._label = label

    def send(self, alert: Alert) -> None:
        level = logging.INFO if alert.status else logging.WARNING
        logger.log(level, alert.render(label=self._label))


class CompositeAlertSink(AlertSinkPort):
    def __init__(self, sinks: Sequence[AlertSinkPort]) -> None:
        self._sinks = tuple(sinks)

    def send(self, alert: Alert) -> None:
        for sink in self._sinks:
            sink.send(alert)


def build_alert_sink(
    settings: AlertSettings,
    *,
    transport: httpx.BaseTransport | None = None,
) -> AlertSinkPort:
    sinks: list[AlertSinkPort] = [LoggingAlertSink(label=settings.alert_label)]
    slack_url = settings.slack_webhook_url_value
    if slack_url:
        sinks.append(
            SlackWebhookAlertSink(
                label=settings.alert_label,
                timeout_seconds=settings.timeout_seconds,
                transport=transport,
                webhook_url=slack_url,
            ),
        )
    if settings.telegram_enabled:
        sinks.append(
            TelegramAlertSink(
                label=settings.alert_label,
                timeout_seconds=settings.timeout_seconds,
                transport=transport,
                bot_token=settings.telegram_bot_token_value or "",
                chat_id=settings.telegram_chat_id or "",
            ),
        )
    return CompositeAlertSink(sinks)


__all__ = [
    "AlertDeliveryError",
    "CompositeAlertSink",
    "LoggingAlertSink",
    "SlackWebhookAlertSink",
    "TelegramAlertSink",
    "build_alert_sink",
]
