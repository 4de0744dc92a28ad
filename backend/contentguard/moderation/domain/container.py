"""Lightweight service container holding the long-lived pipeline and its client handles."""

from __future__ import annotations

import logging

from contentguard.moderation.domain.analyzers import AnalyzerPool, ImageAnalyzer, TextAnalyzer, VideoAnalyzer
from contentguard.moderation.domain.notifier import InMemoryNotifier, Notifier
from contentguard.moderation.domain.result_store import InMemoryResultStore, ResultStore
from contentguard.moderation.infra.aws import make_client
from contentguard.moderation.infra.bedrock import BedrockTextClassifier
from contentguard.moderation.infra.dynamo_store import DynamoResultStore
from contentguard.moderation.infra.rekognition import RekognitionLabelDetector, RekognitionVideoModeration
from contentguard.moderation.infra.s3_fetcher import S3ContentFetcher
from contentguard.moderation.infra.sns_notifier import SnsNotifier
from contentguard.moderation.workers.pipeline import ModerationPipeline
from contentguard.settings import Settings, settings

logger = logging.getLogger(__name__)

_pipeline: ModerationPipeline | None = None


def _build_store(config: Settings) -> ResultStore:
    if config.store_backend == "memory":
        return InMemoryResultStore()
    return DynamoResultStore(make_client("dynamodb"), config.results_table)


def _build_notifier(config: Settings) -> Notifier:
    if config.notifier_backend == "memory":
        return InMemoryNotifier()
    if not config.alert_topic_arn:
        logger.warning("SNS_TOPIC_ARN not configured; alerts will fail to deliver")
    return SnsNotifier(make_client("sns"), config.alert_topic_arn)


def build_pipeline(config: Settings = settings) -> ModerationPipeline:
    """Construct every client handle once and wire them into a pipeline."""

    fetcher = S3ContentFetcher(make_client("s3"))
    rekognition = make_client("rekognition")
    classifier = BedrockTextClassifier(
        make_client("bedrock-runtime"),
        model_id=config.text_model_id,
        anthropic_version=config.text_anthropic_version,
        max_tokens=config.text_max_tokens,
    )
    timeout = config.provider_timeout_seconds
    analyzers = AnalyzerPool(
        image=ImageAnalyzer(RekognitionLabelDetector(rekognition), min_confidence=config.min_confidence, timeout=timeout),
        video=VideoAnalyzer(RekognitionVideoModeration(rekognition), min_confidence=config.min_confidence, timeout=timeout),
        text=TextAnalyzer(fetcher, classifier, timeout=timeout),
    )
    return ModerationPipeline(
        fetcher=fetcher,
        analyzers=analyzers,
        store=_build_store(config),
        notifier=_build_notifier(config),
        timeout=timeout,
        concurrency=config.batch_concurrency,
    )


def configure(pipeline: ModerationPipeline | None) -> None:
    """Install a pipeline (tests, local runs); ``None`` resets to lazy construction."""

    global _pipeline
    _pipeline = pipeline


def get_pipeline() -> ModerationPipeline:
    global _pipeline
    if _pipeline is None:
        _pipeline = build_pipeline()
    return _pipeline


def get_result_store() -> ResultStore:
    return get_pipeline().store
