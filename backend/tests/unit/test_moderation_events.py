from __future__ import annotations

import pytest

from contentguard.moderation.domain.events import decode_object_key, locations_from_event
from contentguard.moderation.domain.exceptions import InvalidEventError
from contentguard.moderation.domain.models import ContentLocation


def _record(bucket: str, key: str) -> dict:
    return {"s3": {"bucket": {"name": bucket}, "object": {"key": key}}}


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("uploads/1700000000000-cat.png", "uploads/1700000000000-cat.png"),
        ("uploads/my+holiday+photo.jpg", "uploads/my holiday photo.jpg"),
        ("uploads/caf%C3%A9%20menu.txt", "uploads/café menu.txt"),
        ("uploads/1%2B1.txt", "uploads/1+1.txt"),
    ],
)
def test_decode_object_key(raw: str, expected: str) -> None:
    assert decode_object_key(raw) == expected


def test_locations_from_event_keeps_order() -> None:
    event = {"Records": [_record("b1", "a+b.png"), _record("b2", "c.txt")]}
    assert locations_from_event(event) == [
        ContentLocation(bucket="b1", key="a b.png"),
        ContentLocation(bucket="b2", key="c.txt"),
    ]


@pytest.mark.parametrize(
    "event",
    [
        {},
        {"Records": []},
        {"Records": "nope"},
        {"Records": [{"s3": {"bucket": {"name": "b"}}}]},
        {"Records": [{"eventSource": "aws:sqs"}]},
        {"Records": [_record("", "key")]},
        {"Records": [_record("bucket", "")]},
        {"Records": [None]},
    ],
)
def test_malformed_events_raise(event: dict) -> None:
    with pytest.raises(InvalidEventError):
        locations_from_event(event)


def test_non_mapping_event_raises() -> None:
    with pytest.raises(InvalidEventError):
        locations_from_event(["not", "an", "event"])  # type: ignore[arg-type]
