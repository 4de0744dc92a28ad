"""Moderation package integration helpers exposed to the application."""

from contentguard.moderation.domain.container import configure, get_pipeline
from contentguard.moderation.workers.handler import handler

__all__ = ["configure", "get_pipeline", "handler"]
