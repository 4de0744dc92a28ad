from __future__ import annotations

import json
from types import SimpleNamespace

from contentguard.moderation import handler
from contentguard.moderation.domain.container import configure
from contentguard.moderation.domain.fetcher import InMemoryContentFetcher
from contentguard.moderation.domain.models import ModerationLabel
from contentguard.moderation.domain.notifier import InMemoryNotifier
from contentguard.moderation.domain.result_store import InMemoryResultStore
from tests.stubs import BUCKET, StubLabelDetector, location, make_pipeline


def _event(*keys: str) -> dict:
    return {"Records": [{"s3": {"bucket": {"name": BUCKET}, "object": {"key": key}}} for key in keys]}


class ExplodingStore(InMemoryResultStore):
    async def put(self, record) -> None:
        raise RuntimeError("disk on fire")


def test_handler_returns_batch_summary() -> None:
    fetcher = InMemoryContentFetcher()
    fetcher.put(location("uploads/cat.png"), b"img", "image/png")
    notifier = InMemoryNotifier()
    configure(
        make_pipeline(
            fetcher=fetcher,
            detector=StubLabelDetector(labels=[ModerationLabel(name="Violence", confidence=92.5)]),
            notifier=notifier,
        )
    )

    response = handler(_event("uploads/cat.png", "uploads/missing.png"), SimpleNamespace(aws_request_id="req-1"))

    assert response["statusCode"] == 200
    body = json.loads(response["body"])
    assert body["message"] == "Content processed successfully"
    assert body["batch_id"] == "req-1"
    assert body["processed"] == 2
    assert body["succeeded"] == 1
    assert body["failed"] == 1
    assert body["items"][0]["is_inappropriate"] is True
    assert body["items"][1]["failed_stage"] == "fetching"
    assert len(notifier.alerts) == 1


def test_handler_rejects_malformed_event_with_500() -> None:
    configure(make_pipeline())

    response = handler({"Records": []})

    assert response["statusCode"] == 500
    assert json.loads(response["body"]).startswith("Error processing content:")


def test_handler_returns_500_for_unexpected_errors() -> None:
    fetcher = InMemoryContentFetcher()
    fetcher.put(location("uploads/cat.png"), b"img", "image/png")
    configure(make_pipeline(fetcher=fetcher, store=ExplodingStore()))

    response = handler(_event("uploads/cat.png"))

    assert response["statusCode"] == 500
    assert json.loads(response["body"]) == "Error processing content: disk on fire"
