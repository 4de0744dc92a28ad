"""Rekognition adapters for image label detection and video moderation jobs."""

from __future__ import annotations

import asyncio
from typing import Any, Sequence

from contentguard.moderation.domain.analyzers import ModerationLabelDetector, VideoModerationStarter
from contentguard.moderation.domain.exceptions import ProviderError
from contentguard.moderation.domain.models import ContentLocation, ImageAnalysis, ModerationLabel, VideoAnalysis
from contentguard.moderation.infra.aws import AWS_ERRORS, describe


def _s3_object(location: ContentLocation) -> dict[str, Any]:
    return {"S3Object": {"Bucket": location.bucket, "Name": location.key}}


class RekognitionLabelDetector(ModerationLabelDetector):
    def __init__(self, client: Any) -> None:
        self._client = client

    async def detect_labels(self, location: ContentLocation, *, min_confidence: float) -> Sequence[ModerationLabel]:
        try:
            response = await asyncio.to_thread(
                self._client.detect_moderation_labels,
                Image=_s3_object(location),
                MinConfidence=min_confidence,
            )
        except AWS_ERRORS as exc:
            raise ProviderError(ImageAnalysis.service, describe(exc)) from exc
        return [ModerationLabel.from_payload(item) for item in response.get("ModerationLabels") or ()]


class RekognitionVideoModeration(VideoModerationStarter):
    def __init__(self, client: Any) -> None:
        self._client = client

    async def start_moderation(self, location: ContentLocation, *, min_confidence: float) -> str:
        try:
            response = await asyncio.to_thread(
                self._client.start_content_moderation,
                Video=_s3_object(location),
                MinConfidence=min_confidence,
            )
        except AWS_ERRORS as exc:
            raise ProviderError(VideoAnalysis.service, describe(exc)) from exc
        job_id = response.get("JobId")
        if not job_id:
            raise ProviderError(VideoAnalysis.service, "no JobId returned")
        return str(job_id)
