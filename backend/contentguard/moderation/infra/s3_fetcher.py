"""S3-backed content fetcher."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from botocore.exceptions import ClientError

from contentguard.moderation.domain.exceptions import NotFoundError, TransientError
from contentguard.moderation.domain.fetcher import ContentFetcher
from contentguard.moderation.domain.models import ContentLocation, ContentMetadata
from contentguard.moderation.infra.aws import AWS_ERRORS, describe, is_not_found

logger = logging.getLogger(__name__)


class S3ContentFetcher(ContentFetcher):
    def __init__(self, client: Any) -> None:
        self._client = client

    def _translate(self, exc: Exception, location: ContentLocation) -> Exception:
        if isinstance(exc, ClientError) and is_not_found(exc):
            return NotFoundError(f"{location.uri}: {describe(exc)}")
        logger.warning("s3 request failed", extra={"file": location.uri, "reason": describe(exc)})
        return TransientError(f"{location.uri}: {describe(exc)}")

    async def fetch_metadata(self, location: ContentLocation) -> ContentMetadata:
        try:
            head = await asyncio.to_thread(self._client.head_object, Bucket=location.bucket, Key=location.key)
        except AWS_ERRORS as exc:
            raise self._translate(exc, location) from exc
        return ContentMetadata(
            content_type=head.get("ContentType") or "",
            size_bytes=int(head.get("ContentLength") or 0),
        )

    def _read_body(self, location: ContentLocation) -> bytes:
        response = self._client.get_object(Bucket=location.bucket, Key=location.key)
        body = response["Body"]
        try:
            return body.read()
        finally:
            body.close()

    async def read_text(self, location: ContentLocation) -> str:
        try:
            data = await asyncio.to_thread(self._read_body, location)
        except AWS_ERRORS as exc:
            raise self._translate(exc, location) from exc
        return data.decode("utf-8")
