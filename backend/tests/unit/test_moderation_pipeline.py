from __future__ import annotations

import asyncio

import pytest

from contentguard.moderation.domain.exceptions import DeliveryError, PersistenceError, ProviderError
from contentguard.moderation.domain.models import ModerationLabel, PipelineStage
from contentguard.moderation.domain.notifier import InMemoryNotifier
from contentguard.moderation.domain.result_store import InMemoryResultStore
from tests.stubs import (
    BUCKET,
    FailingNotifier,
    FailingResultStore,
    StubClassifier,
    StubLabelDetector,
    location,
    make_pipeline,
)

BENIGN_REPLY = '{"is_inappropriate": false, "categories": [], "confidence": 0.02, "reasoning": "benign"}'


def _event(*keys: str) -> dict:
    return {"Records": [{"s3": {"bucket": {"name": BUCKET}, "object": {"key": key}}} for key in keys]}


@pytest.mark.asyncio
async def test_flagged_image_is_persisted_and_alerted(fetcher) -> None:
    target = location("uploads/1700000000000-cat.png")
    fetcher.put(target, b"\x89PNG", "image/png")
    store = InMemoryResultStore()
    notifier = InMemoryNotifier()
    pipeline = make_pipeline(
        fetcher=fetcher,
        detector=StubLabelDetector(labels=[ModerationLabel(name="Violence", confidence=92.5)]),
        store=store,
        notifier=notifier,
    )

    result = await pipeline.process_event(_event("uploads/1700000000000-cat.png"), batch_id="batch-1")

    assert result.batch_id == "batch-1"
    assert result.succeeded == 1 and result.failed == 0
    outcome = result.outcomes[0]
    assert outcome.stage is PipelineStage.DONE
    assert outcome.notified is True
    record = store.records[outcome.record.id]
    assert record.is_inappropriate is True
    assert record.confidence_score == pytest.approx(0.925)
    assert record.content_type == "image/png"
    assert record.size_bytes == 4
    assert len(notifier.alerts) == 1
    assert notifier.alerts[0].to_payload()["file"] == f"s3://{BUCKET}/uploads/1700000000000-cat.png"
    assert notifier.alerts[0].confidence_score == pytest.approx(0.925)


@pytest.mark.asyncio
async def test_benign_text_is_persisted_without_alert(fetcher) -> None:
    target = location("notes/hello.txt")
    fetcher.put(target, "Hello world", "text/plain")
    store = InMemoryResultStore()
    notifier = InMemoryNotifier()
    pipeline = make_pipeline(fetcher=fetcher, classifier=StubClassifier(reply=BENIGN_REPLY), store=store, notifier=notifier)

    result = await pipeline.process_event(_event("notes/hello.txt"))

    outcome = result.outcomes[0]
    assert outcome.succeeded
    assert outcome.notified is False
    assert outcome.record.is_inappropriate is False
    assert outcome.record.confidence_score == pytest.approx(0.02)
    assert outcome.record.analysis.to_payload()["service"] == "bedrock"
    assert notifier.alerts == []
    assert list(store.records) == [outcome.record.id]


@pytest.mark.asyncio
async def test_missing_item_fails_alone(fetcher) -> None:
    fetcher.put(location("a.txt"), "first", "text/plain")
    fetcher.put(location("c.txt"), "third", "text/plain")
    store = InMemoryResultStore()
    pipeline = make_pipeline(fetcher=fetcher, classifier=StubClassifier(reply=BENIGN_REPLY), store=store)

    result = await pipeline.process_event(_event("a.txt", "b.txt", "c.txt"))

    assert result.succeeded == 2
    assert result.failed == 1
    assert [outcome.location.key for outcome in result.outcomes] == ["a.txt", "b.txt", "c.txt"]
    missing = result.outcomes[1]
    assert missing.stage is PipelineStage.FAILED
    assert missing.failed_stage is PipelineStage.FETCHING
    assert missing.record is None
    assert len(store.records) == 2
    summary = result.to_summary()
    assert summary["processed"] == 3
    assert summary["items"][1]["failed_stage"] == "fetching"


@pytest.mark.asyncio
async def test_provider_failure_still_persists_error_record(fetcher) -> None:
    fetcher.put(location("a.png"), b"img", "image/png")
    store = InMemoryResultStore()
    notifier = InMemoryNotifier()
    pipeline = make_pipeline(
        fetcher=fetcher,
        detector=StubLabelDetector(error=ProviderError("rekognition", "AccessDeniedException")),
        store=store,
        notifier=notifier,
    )

    result = await pipeline.process_batch([location("a.png")])

    record = result.outcomes[0].record
    assert result.succeeded == 1
    assert record.is_inappropriate is False
    assert record.confidence_score == 0.0
    assert record.analysis.to_payload() == {"service": "rekognition", "error": "AccessDeniedException"}
    assert notifier.alerts == []


@pytest.mark.asyncio
async def test_unsupported_content_type_is_recorded(fetcher) -> None:
    fetcher.put(location("doc.pdf"), b"%PDF", "application/pdf")
    store = InMemoryResultStore()
    pipeline = make_pipeline(fetcher=fetcher, store=store)

    result = await pipeline.process_batch([location("doc.pdf")])

    record = result.outcomes[0].record
    assert record.analysis.to_payload()["service"] == "unsupported"
    assert record.is_inappropriate is False
    assert len(store.records) == 1


@pytest.mark.asyncio
async def test_video_outcome_is_marked_pending(fetcher) -> None:
    fetcher.put(location("clip.mp4"), b"\x00" * 16, "video/mp4")
    pipeline = make_pipeline(fetcher=fetcher)

    result = await pipeline.process_batch([location("clip.mp4")])

    outcome = result.outcomes[0]
    assert outcome.succeeded
    assert outcome.pending is True
    assert outcome.record.analysis.to_payload() == {
        "service": "rekognition_video",
        "job_id": "job-123",
        "status": "processing",
    }


@pytest.mark.asyncio
async def test_persistence_failure_skips_notification(fetcher) -> None:
    fetcher.put(location("a.png"), b"img", "image/png")
    notifier = InMemoryNotifier()
    pipeline = make_pipeline(
        fetcher=fetcher,
        detector=StubLabelDetector(labels=[ModerationLabel(name="Violence", confidence=92.5)]),
        store=FailingResultStore(PersistenceError("table unavailable")),
        notifier=notifier,
    )

    result = await pipeline.process_batch([location("a.png")])

    outcome = result.outcomes[0]
    assert outcome.stage is PipelineStage.FAILED
    assert outcome.failed_stage is PipelineStage.PERSISTING
    assert outcome.error == "table unavailable"
    assert notifier.alerts == []


@pytest.mark.asyncio
async def test_delivery_failure_keeps_record(fetcher) -> None:
    fetcher.put(location("a.png"), b"img", "image/png")
    store = InMemoryResultStore()
    notifier = FailingNotifier(DeliveryError("topic missing"))
    pipeline = make_pipeline(
        fetcher=fetcher,
        detector=StubLabelDetector(labels=[ModerationLabel(name="Violence", confidence=92.5)]),
        store=store,
        notifier=notifier,
    )

    result = await pipeline.process_batch([location("a.png")])

    outcome = result.outcomes[0]
    assert outcome.succeeded
    assert outcome.notified is False
    assert notifier.attempts == 1
    assert outcome.record.id in store.records


@pytest.mark.asyncio
async def test_slow_store_times_out_as_persistence_failure(fetcher) -> None:
    class SlowStore(InMemoryResultStore):
        async def put(self, record) -> None:
            await asyncio.sleep(1)

    fetcher.put(location("a.txt"), "hi", "text/plain")
    pipeline = make_pipeline(
        fetcher=fetcher,
        classifier=StubClassifier(reply=BENIGN_REPLY),
        store=SlowStore(),
        timeout=0.05,
    )

    result = await pipeline.process_batch([location("a.txt")])

    assert result.outcomes[0].failed_stage is PipelineStage.PERSISTING


@pytest.mark.asyncio
async def test_concurrent_batch_keeps_input_order(fetcher) -> None:
    keys = [f"notes/{idx}.txt" for idx in range(6)]
    for key in keys:
        fetcher.put(location(key), key, "text/plain")
    store = InMemoryResultStore()
    pipeline = make_pipeline(
        fetcher=fetcher,
        classifier=StubClassifier(reply=BENIGN_REPLY),
        store=store,
        concurrency=3,
    )

    result = await pipeline.process_batch([location(key) for key in keys])

    assert [outcome.location.key for outcome in result.outcomes] == keys
    assert result.succeeded == 6
    assert len(store.records) == 6


@pytest.mark.asyncio
async def test_reprocessing_same_object_creates_new_record(fetcher) -> None:
    fetcher.put(location("a.txt"), "hi", "text/plain")
    store = InMemoryResultStore()
    pipeline = make_pipeline(fetcher=fetcher, classifier=StubClassifier(reply=BENIGN_REPLY), store=store)

    await pipeline.process_batch([location("a.txt")])
    await pipeline.process_batch([location("a.txt")])

    assert len(store.records) == 2


@pytest.mark.asyncio
async def test_non_finite_text_confidence_is_recorded_as_analysis_error(fetcher) -> None:
    fetcher.put(location("a.txt"), "first", "text/plain")
    fetcher.put(location("b.png"), b"img", "image/png")
    store = InMemoryResultStore()
    notifier = InMemoryNotifier()
    reply = '{"is_inappropriate": false, "categories": [], "confidence": NaN, "reasoning": "odd"}'
    pipeline = make_pipeline(fetcher=fetcher, classifier=StubClassifier(reply=reply), store=store, notifier=notifier)

    result = await pipeline.process_batch([location("a.txt"), location("b.png")])

    assert result.succeeded == 2
    record = result.outcomes[0].record
    assert record.analysis.to_payload()["service"] == "bedrock"
    assert "error" in record.analysis.to_payload()
    assert record.is_inappropriate is False
    assert record.confidence_score == 0.0
    assert notifier.alerts == []


@pytest.mark.asyncio
async def test_concurrent_batch_cancels_remaining_items_when_one_escapes(fetcher) -> None:
    class PartlyBrokenStore(InMemoryResultStore):
        async def put(self, record) -> None:
            if record.location.key == "boom.pdf":
                raise RuntimeError("disk on fire")
            await asyncio.sleep(0.05)
            self.records[record.id] = record

    keys = ["a.pdf", "boom.pdf", "c.pdf"]
    for key in keys:
        fetcher.put(location(key), b"%PDF", "application/pdf")
    store = PartlyBrokenStore()
    pipeline = make_pipeline(fetcher=fetcher, store=store, timeout=5.0, concurrency=3)

    with pytest.raises(RuntimeError):
        await pipeline.process_batch([location(key) for key in keys])
    await asyncio.sleep(0.2)

    assert store.records == {}
