"""Analyzer pool: one analyzer per content category, selected by content-type prefix."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Literal, Protocol, Sequence, TypeVar

from contentguard.moderation.domain.exceptions import ModerationError
from contentguard.moderation.domain.fetcher import ContentFetcher
from contentguard.moderation.domain.models import (
    AnalysisError,
    AnalysisResult,
    ContentLocation,
    ContentMetadata,
    ImageAnalysis,
    ModerationLabel,
    TextAnalysis,
    UnsupportedAnalysis,
    VideoAnalysis,
)
from contentguard.moderation.domain.parsing import parse_text_judgement
from contentguard.moderation.domain.prompts import render_text_prompt
from contentguard.obs import metrics

logger = logging.getLogger(__name__)

Category = Literal["image", "video", "text", "unsupported"]

DEFAULT_MIN_CONFIDENCE = 60.0
DEFAULT_TIMEOUT_SECONDS = 10.0

T = TypeVar("T")


def content_category(content_type: str | None) -> Category:
    """Map a content type to its analyzer path using only the prefix before the first ``/``."""

    prefix = (content_type or "").strip().split("/", 1)[0].lower()
    if prefix == "image":
        return "image"
    if prefix == "video":
        return "video"
    if prefix == "text":
        return "text"
    return "unsupported"


class ModerationLabelDetector(Protocol):
    async def detect_labels(self, location: ContentLocation, *, min_confidence: float) -> Sequence[ModerationLabel]:
        ...


class VideoModerationStarter(Protocol):
    async def start_moderation(self, location: ContentLocation, *, min_confidence: float) -> str:
        """Submit an asynchronous moderation job and return its identifier."""
        ...


class TextClassifier(Protocol):
    async def classify(self, prompt: str) -> str:
        """Return the raw reply text of the model."""
        ...


class Analyzer(Protocol):
    async def analyze(self, location: ContentLocation, metadata: ContentMetadata) -> AnalysisResult:
        ...


async def _bounded(call: Awaitable[T], timeout: float) -> T:
    return await asyncio.wait_for(call, timeout=timeout)


def _failure(provider: str, location: ContentLocation, exc: BaseException) -> AnalysisError:
    message = str(exc) or exc.__class__.__name__
    if isinstance(exc, asyncio.TimeoutError):
        message = f"{provider} call timed out"
    logger.warning(
        "analyzer call failed",
        extra={"provider": provider, "file": location.uri, "reason": exc.__class__.__name__},
    )
    return AnalysisError(provider_name=provider, error_message=message)


@dataclass(slots=True)
class ImageAnalyzer:
    detector: ModerationLabelDetector
    min_confidence: float = DEFAULT_MIN_CONFIDENCE
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    async def analyze(self, location: ContentLocation, metadata: ContentMetadata) -> AnalysisResult:
        try:
            labels = await _bounded(
                self.detector.detect_labels(location, min_confidence=self.min_confidence),
                self.timeout,
            )
        except (ModerationError, asyncio.TimeoutError) as exc:
            return _failure(ImageAnalysis.service, location, exc)
        return ImageAnalysis(labels=tuple(labels))


@dataclass(slots=True)
class VideoAnalyzer:
    """Submits a moderation job and returns without waiting for it to finish."""

    starter: VideoModerationStarter
    min_confidence: float = DEFAULT_MIN_CONFIDENCE
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    async def analyze(self, location: ContentLocation, metadata: ContentMetadata) -> AnalysisResult:
        try:
            job_id = await _bounded(
                self.starter.start_moderation(location, min_confidence=self.min_confidence),
                self.timeout,
            )
        except (ModerationError, asyncio.TimeoutError) as exc:
            return _failure(VideoAnalysis.service, location, exc)
        # TODO: poll GetContentModeration for job_id and reconcile labels into the record
        logger.info("video moderation job submitted", extra={"job_id": job_id, "file": location.uri})
        return VideoAnalysis(job_id=job_id)


@dataclass(slots=True)
class TextAnalyzer:
    fetcher: ContentFetcher
    classifier: TextClassifier
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    async def analyze(self, location: ContentLocation, metadata: ContentMetadata) -> AnalysisResult:
        try:
            text = await _bounded(self.fetcher.read_text(location), self.timeout)
            reply = await _bounded(self.classifier.classify(render_text_prompt(text)), self.timeout)
            judgement = parse_text_judgement(reply)
        except (ModerationError, UnicodeDecodeError, asyncio.TimeoutError) as exc:
            return _failure(TextAnalysis.service, location, exc)
        return TextAnalysis(judgement=judgement)


@dataclass(slots=True)
class AnalyzerPool:
    image: Analyzer
    video: Analyzer
    text: Analyzer

    def select(self, content_type: str | None) -> Analyzer | None:
        category = content_category(content_type)
        if category == "unsupported":
            return None
        return getattr(self, category)

    async def analyze(self, location: ContentLocation, metadata: ContentMetadata) -> AnalysisResult:
        category = content_category(metadata.content_type)
        analyzer = self.select(metadata.content_type)
        if analyzer is None:
            logger.info("unsupported content type", extra={"content_type": metadata.content_type, "file": location.uri})
            metrics.observe_scan(category, "skipped", 0.0)
            return UnsupportedAnalysis(content_type=metadata.content_type)

        start = time.perf_counter()
        result = await analyzer.analyze(location, metadata)
        if isinstance(result, AnalysisError):
            status = "error"
            metrics.SCAN_FAILURES_TOTAL.labels(category, result.provider_name).inc()
        elif result.detected_inappropriate:
            status = "flagged"
        elif isinstance(result, VideoAnalysis):
            status = "pending"
        else:
            status = "clean"
        metrics.observe_scan(category, status, time.perf_counter() - start)
        return result
