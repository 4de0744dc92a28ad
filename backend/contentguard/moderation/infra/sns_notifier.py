"""SNS adapter for inappropriate-content alerts."""

from __future__ import annotations

import asyncio
import json
from typing import Any

from contentguard.moderation.domain.exceptions import DeliveryError
from contentguard.moderation.domain.models import Alert
from contentguard.moderation.domain.notifier import Notifier
from contentguard.moderation.infra.aws import AWS_ERRORS, describe

ALERT_SUBJECT = "Content Moderation Alert"


class SnsNotifier(Notifier):
    def __init__(self, client: Any, topic_arn: str) -> None:
        self._client = client
        self.topic_arn = topic_arn

    async def publish(self, alert: Alert) -> None:
        if not self.topic_arn:
            raise DeliveryError("alert topic is not configured")
        try:
            await asyncio.to_thread(
                self._client.publish,
                TopicArn=self.topic_arn,
                Subject=ALERT_SUBJECT,
                Message=json.dumps(alert.to_payload()),
            )
        except AWS_ERRORS as exc:
            raise DeliveryError(f"publish to {self.topic_arn} failed: {describe(exc)}") from exc
