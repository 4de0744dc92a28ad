"""Content fetcher contract and an in-memory implementation for local runs and tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import MutableMapping, Protocol

from contentguard.moderation.domain.exceptions import NotFoundError
from contentguard.moderation.domain.models import ContentLocation, ContentMetadata


class ContentFetcher(Protocol):
    """Resolves metadata and body of stored objects."""

    async def fetch_metadata(self, location: ContentLocation) -> ContentMetadata:
        """Return content type and size; raise NotFoundError or TransientError."""

    async def read_text(self, location: ContentLocation) -> str:
        """Read the whole object body as UTF-8 text."""


@dataclass(slots=True)
class StoredObject:
    body: bytes
    content_type: str


@dataclass
class InMemoryContentFetcher(ContentFetcher):
    objects: MutableMapping[tuple[str, str], StoredObject] = field(default_factory=dict)

    def put(self, location: ContentLocation, body: bytes | str, content_type: str) -> None:
        data = body.encode("utf-8") if isinstance(body, str) else body
        self.objects[(location.bucket, location.key)] = StoredObject(body=data, content_type=content_type)

    def _get(self, location: ContentLocation) -> StoredObject:
        stored = self.objects.get((location.bucket, location.key))
        if stored is None:
            raise NotFoundError(f"{location.uri} does not exist")
        return stored

    async def fetch_metadata(self, location: ContentLocation) -> ContentMetadata:
        stored = self._get(location)
        return ContentMetadata(content_type=stored.content_type, size_bytes=len(stored.body))

    async def read_text(self, location: ContentLocation) -> str:
        return self._get(location).body.decode("utf-8")
