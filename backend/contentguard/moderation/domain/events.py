"""Decoding of inbound content-stored events."""

from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import unquote

from contentguard.moderation.domain.exceptions import InvalidEventError
from contentguard.moderation.domain.models import ContentLocation


def decode_object_key(raw_key: str) -> str:
    """Notification keys are form-encoded: ``+`` means space, then percent escapes."""

    return unquote(raw_key.replace("+", " "))


def locations_from_event(event: Mapping[str, Any]) -> list[ContentLocation]:
    """Extract one :class:`ContentLocation` per record of an S3 notification event."""

    if not isinstance(event, Mapping):
        raise InvalidEventError("event must be an object")
    records = event.get("Records")
    if not isinstance(records, list) or not records:
        raise InvalidEventError("event carries no Records")

    locations: list[ContentLocation] = []
    for index, record in enumerate(records):
        try:
            s3 = record["s3"]
            bucket = s3["bucket"]["name"]
            key = s3["object"]["key"]
        except (KeyError, TypeError) as exc:
            raise InvalidEventError(f"record {index} is missing {exc}") from exc
        if not isinstance(bucket, str) or not bucket or not isinstance(key, str) or not key:
            raise InvalidEventError(f"record {index} has an empty bucket or key")
        locations.append(ContentLocation(bucket=bucket, key=decode_object_key(key)))
    return locations
