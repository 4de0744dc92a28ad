"""Result store contract and in-memory fallback for moderation records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import AsyncIterator, MutableMapping, Protocol

from contentguard.moderation.domain.models import ModerationRecord


class ResultStore(Protocol):
    """Append-only persistence for moderation records."""

    async def put(self, record: ModerationRecord) -> None:
        """Persist ``record``; same id overwrites. Raises PersistenceError on failure."""

    def scan_all(self) -> AsyncIterator[ModerationRecord]:
        """Yield every persisted record, unordered. Intended for offline reporting."""


@dataclass
class InMemoryResultStore(ResultStore):
    """Simple store with in-memory state for local development and tests."""

    records: MutableMapping[str, ModerationRecord] = field(default_factory=dict)

    async def put(self, record: ModerationRecord) -> None:
        self.records[record.id] = record

    async def get(self, record_id: str) -> ModerationRecord | None:
        """Lookup by id for local inspection; not part of the store contract."""
        return self.records.get(record_id)

    async def scan_all(self) -> AsyncIterator[ModerationRecord]:
        for record in list(self.records.values()):
            yield record
