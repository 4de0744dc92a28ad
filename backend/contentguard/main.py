"""FastAPI application exposing the moderation pipeline."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from contentguard import obs
from contentguard.moderation.api import router as moderation_router
from contentguard.settings import settings

app = FastAPI(title="contentguard", version="0.1.0")
obs.init(app)
app.include_router(moderation_router)


@app.get("/health/live")
async def live() -> dict[str, object]:
    return {"ok": True, "service": settings.service_name, "env": settings.environment}


@app.get("/metrics")
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
