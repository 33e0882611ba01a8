"""Port for alert delivery."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True, slots=True)
class Alert:
    """One human-readable notification about a check outcome."""

    title: str
    status: bool
    details: tuple[str, ...] = field(default_factory=tuple)

    def render(self, *, label: str | None = None) -> str:
        marker = "OK" if self.status else "ALERT"
        head = f"[{label}] " if label else ""
        lines = [f"{head}{marker} {self.title}"]
        lines.extend(f"- {detail}" for detail in self.details)
        return "\n".join(lines)


class AlertSinkPort(Protocol):
    def send(self, alert: Alert) -> None:
        """Deliver ``alert``; failures are handled by the sink, never raised."""


__all__ = ["Alert", "AlertSinkPort"]
