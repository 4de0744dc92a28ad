"""Function-style entry point invoked with a content-stored event."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Mapping
from uuid import uuid4

from contentguard.moderation.domain.container import get_pipeline
from contentguard.obs import logging as obs_logging
from contentguard.obs import metrics
from contentguard.settings import settings

logger = logging.getLogger(__name__)

_logging_configured = False


def _ensure_logging() -> None:
    global _logging_configured
    if _logging_configured or not settings.obs_enabled:
        return
    obs_logging.configure_logging()
    _logging_configured = True


def handler(event: Mapping[str, Any], context: Any = None) -> dict[str, Any]:
    """Process every item of ``event``; 500 only when an error escapes item-level handling."""

    _ensure_logging()
    batch_id = getattr(context, "aws_request_id", None) or str(uuid4())
    try:
        result = asyncio.run(get_pipeline().process_event(event, batch_id=batch_id))
    except Exception as exc:
        metrics.BATCHES_TOTAL.labels("error").inc()
        logger.exception("batch processing failed", extra={"batch_id": batch_id})
        return {"statusCode": 500, "body": json.dumps(f"Error processing content: {exc}")}

    summary = result.to_summary()
    summary["message"] = "Content processed successfully"
    return {"statusCode": 200, "body": json.dumps(summary)}
