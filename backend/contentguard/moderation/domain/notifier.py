"""Alert publishing contract and in-memory notifier."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from contentguard.moderation.domain.models import Alert


class Notifier(Protocol):
    async def publish(self, alert: Alert) -> None:
        """Deliver ``alert`` to subscribers. Raises DeliveryError on failure."""


@dataclass
class InMemoryNotifier(Notifier):
    alerts: list[Alert] = field(default_factory=list)

    async def publish(self, alert: Alert) -> None:
        self.alerts.append(alert)
