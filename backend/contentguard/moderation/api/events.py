"""Content-stored event intake and moderation record listing endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status
from pydantic import BaseModel

from contentguard.moderation.domain.container import get_pipeline, get_result_store
from contentguard.moderation.domain.exceptions import InvalidEventError, PersistenceError
from contentguard.moderation.domain.models import ModerationRecord
from contentguard.moderation.domain.result_store import ResultStore
from contentguard.moderation.workers.pipeline import ModerationPipeline
from contentguard.settings import settings

router = APIRouter(prefix=settings.api_prefix, tags=["moderation"])


class ItemOutcomeOut(BaseModel):
    file: str
    status: str
    notified: bool
    pending: bool
    id: str | None = None
    is_inappropriate: bool | None = None
    confidence_score: float | None = None
    failed_stage: str | None = None
    error: str | None = None


class BatchResultOut(BaseModel):
    batch_id: str
    processed: int
    succeeded: int
    failed: int
    items: list[ItemOutcomeOut]


class ModerationRecordOut(BaseModel):
    id: str
    bucket: str
    key: str
    content_type: str
    file_size: int
    timestamp: datetime
    moderation_results: dict[str, Any]
    is_inappropriate: bool
    confidence_score: float

    @classmethod
    def from_domain(cls, record: ModerationRecord) -> "ModerationRecordOut":
        return cls(**record.to_item())


async def _pipeline_dep() -> ModerationPipeline:
    return get_pipeline()


async def _store_dep() -> ResultStore:
    return get_result_store()


@router.post("/events", response_model=BatchResultOut)
async def submit_event(
    request: Request,
    event: dict[str, Any] = Body(...),
    pipeline: ModerationPipeline = Depends(_pipeline_dep),
) -> BatchResultOut:
    batch_id = getattr(request.state, "request_id", None)
    try:
        result = await pipeline.process_event(event, batch_id=batch_id)
    except InvalidEventError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return BatchResultOut(**result.to_summary())


@router.get("/records", response_model=list[ModerationRecordOut])
async def list_records(store: ResultStore = Depends(_store_dep)) -> list[ModerationRecordOut]:
    try:
        return [ModerationRecordOut.from_domain(record) async for record in store.scan_all()]
    except PersistenceError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=exc.detail) from exc
