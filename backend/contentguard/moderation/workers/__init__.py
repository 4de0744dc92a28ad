"""Moderation worker exports."""

from .pipeline import ModerationPipeline

__all__ = ["ModerationPipeline"]
