"""DynamoDB-backed result store."""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Any, AsyncIterator, Mapping

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer

from contentguard.moderation.domain.exceptions import PersistenceError
from contentguard.moderation.domain.models import ModerationRecord
from contentguard.moderation.domain.result_store import ResultStore
from contentguard.moderation.infra.aws import AWS_ERRORS, describe

logger = logging.getLogger(__name__)

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def _to_dynamo_value(value: Any) -> Any:
    # DynamoDB numbers are Decimal; built from str() to keep the short float repr
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, Mapping):
        return {key: _to_dynamo_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_dynamo_value(item) for item in value]
    return value


def _from_dynamo_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, Mapping):
        return {key: _from_dynamo_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_from_dynamo_value(item) for item in value]
    return value


def serialize_item(record: ModerationRecord) -> dict[str, Any]:
    item = _to_dynamo_value(record.to_item())
    return {key: _serializer.serialize(value) for key, value in item.items()}


def deserialize_item(raw: Mapping[str, Any]) -> ModerationRecord:
    item = {key: _from_dynamo_value(_deserializer.deserialize(value)) for key, value in raw.items()}
    return ModerationRecord.from_item(item)


class DynamoResultStore(ResultStore):
    def __init__(self, client: Any, table_name: str) -> None:
        self._client = client
        self.table_name = table_name

    async def put(self, record: ModerationRecord) -> None:
        try:
            item = serialize_item(record)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"record {record.id} cannot be stored: {exc}") from exc
        try:
            await asyncio.to_thread(self._client.put_item, TableName=self.table_name, Item=item)
        except AWS_ERRORS as exc:
            raise PersistenceError(f"put {record.id} failed: {describe(exc)}") from exc

    async def scan_all(self) -> AsyncIterator[ModerationRecord]:
        params: dict[str, Any] = {"TableName": self.table_name}
        while True:
            try:
                page = await asyncio.to_thread(self._client.scan, **params)
            except AWS_ERRORS as exc:
                raise PersistenceError(f"scan of {self.table_name} failed: {describe(exc)}") from exc
            for raw in page.get("Items", []):
                try:
                    yield deserialize_item(raw)
                except (KeyError, TypeError, ValueError):
                    logger.warning("skipping malformed moderation record", exc_info=True)
            last_key = page.get("LastEvaluatedKey")
            if not last_key:
                return
            params["ExclusiveStartKey"] = last_key
