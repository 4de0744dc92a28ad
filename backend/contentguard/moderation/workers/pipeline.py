"""Pipeline orchestrator driving each content item from fetch to alert."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Iterable, Mapping, TypeVar
from uuid import uuid4

from contentguard.moderation.domain.analyzers import AnalyzerPool
from contentguard.moderation.domain.decision import decide
from contentguard.moderation.domain.events import locations_from_event
from contentguard.moderation.domain.exceptions import (
    DeliveryError,
    ModerationError,
    PersistenceError,
    TransientError,
)
from contentguard.moderation.domain.fetcher import ContentFetcher
from contentguard.moderation.domain.models import (
    Alert,
    BatchResult,
    ContentLocation,
    ItemOutcome,
    ModerationRecord,
    PipelineStage,
    VideoAnalysis,
)
from contentguard.moderation.domain.notifier import Notifier
from contentguard.moderation.domain.result_store import ResultStore
from contentguard.obs import logging as obs_logging
from contentguard.obs import metrics

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TIMEOUT_ERRORS: dict[PipelineStage, type[ModerationError]] = {
    PipelineStage.FETCHING: TransientError,
    PipelineStage.PERSISTING: PersistenceError,
    PipelineStage.NOTIFYING: DeliveryError,
}


@dataclass(slots=True)
class ModerationPipeline:
    """Fetch -> analyze -> decide -> persist -> notify, with failures isolated per item."""

    fetcher: ContentFetcher
    analyzers: AnalyzerPool
    store: ResultStore
    notifier: Notifier
    timeout: float = 10.0
    concurrency: int = 1

    async def _bounded(self, call: Awaitable[T], stage: PipelineStage) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise _TIMEOUT_ERRORS[stage](f"{stage.value} timed out after {self.timeout}s") from exc

    async def process_event(self, event: Mapping[str, Any], *, batch_id: str | None = None) -> BatchResult:
        """Decode a content-stored event and process its items; InvalidEventError escapes."""

        locations = locations_from_event(event)
        return await self.process_batch(locations, batch_id=batch_id)

    async def process_batch(self, locations: Iterable[ContentLocation], *, batch_id: str | None = None) -> BatchResult:
        result = BatchResult(batch_id=batch_id or str(uuid4()))
        tokens = obs_logging.bind_context(batch_id=result.batch_id)
        try:
            items = list(locations)
            if self.concurrency <= 1:
                for location in items:
                    result.outcomes.append(await self.process_item(location))
            else:
                semaphore = asyncio.Semaphore(self.concurrency)

                async def _guarded(location: ContentLocation) -> ItemOutcome:
                    async with semaphore:
                        return await self.process_item(location)

                tasks = [asyncio.create_task(_guarded(location)) for location in items]
                try:
                    result.outcomes.extend(await asyncio.gather(*tasks))
                except BaseException:
                    # no item keeps running once the batch has failed
                    for task in tasks:
                        task.cancel()
                    await asyncio.gather(*tasks, return_exceptions=True)
                    raise
            metrics.BATCHES_TOTAL.labels("ok" if result.failed == 0 else "partial").inc()
            logger.info(
                "batch processed",
                extra={"processed": len(result.outcomes), "succeeded": result.succeeded, "failed": result.failed},
            )
            return result
        finally:
            obs_logging.reset_context(tokens)

    async def process_item(self, location: ContentLocation) -> ItemOutcome:
        tokens = obs_logging.bind_context(object_uri=location.uri)
        start = time.perf_counter()
        stage = PipelineStage.FETCHING
        try:
            try:
                metadata = await self._bounded(self.fetcher.fetch_metadata(location), PipelineStage.FETCHING)

                stage = PipelineStage.ANALYZING
                analysis = await self.analyzers.analyze(location, metadata)

                stage = PipelineStage.DECIDING
                decision = decide(analysis)
                record = ModerationRecord.create(
                    location,
                    metadata,
                    analysis,
                    is_inappropriate=decision.is_inappropriate,
                    confidence_score=decision.confidence_score,
                )

                stage = PipelineStage.PERSISTING
                await self._bounded(self.store.put(record), PipelineStage.PERSISTING)
            except ModerationError as exc:
                return self._failed(location, stage, exc)

            metrics.RECORDS_PERSISTED_TOTAL.labels("ok").inc()
            outcome = ItemOutcome(
                location=location,
                stage=PipelineStage.DONE,
                record=record,
                pending=isinstance(analysis, VideoAnalysis),
            )
            if outcome.pending:
                logger.warning("video moderation result will not be reconciled", extra={"record_id": record.id})
            if record.is_inappropriate:
                outcome.notified = await self._notify(record)
            metrics.PIPELINE_ITEMS_TOTAL.labels(PipelineStage.DONE.value, "ok").inc()
            logger.info(
                "content moderated",
                extra={
                    "record_id": record.id,
                    "content_type": record.content_type,
                    "is_inappropriate": record.is_inappropriate,
                    "confidence_score": record.confidence_score,
                    "latency_ms": round((time.perf_counter() - start) * 1000, 3),
                },
            )
            return outcome
        finally:
            obs_logging.reset_context(tokens)

    async def _notify(self, record: ModerationRecord) -> bool:
        try:
            await self._bounded(self.notifier.publish(Alert.from_record(record)), PipelineStage.NOTIFYING)
        except DeliveryError as exc:
            metrics.ALERTS_PUBLISHED_TOTAL.labels("error").inc()
            logger.error("alert delivery failed", extra={"record_id": record.id, "reason": exc.detail})
            return False
        metrics.ALERTS_PUBLISHED_TOTAL.labels("ok").inc()
        return True

    def _failed(self, location: ContentLocation, stage: PipelineStage, exc: ModerationError) -> ItemOutcome:
        if stage is PipelineStage.PERSISTING:
            metrics.RECORDS_PERSISTED_TOTAL.labels("error").inc()
        metrics.PIPELINE_ITEMS_TOTAL.labels(stage.value, exc.__class__.__name__).inc()
        logger.warning(
            "content item failed",
            extra={"stage": stage.value, "error_type": exc.__class__.__name__, "reason": exc.detail},
        )
        return ItemOutcome(
            location=location,
            stage=PipelineStage.FAILED,
            failed_stage=stage,
            error=exc.detail,
        )
