"""Pure mapping from analyzer findings to a verdict and a normalised confidence score."""

from __future__ import annotations

from dataclasses import dataclass

from contentguard.moderation.domain.models import (
    AnalysisError,
    AnalysisResult,
    ImageAnalysis,
    TextAnalysis,
    UnsupportedAnalysis,
    VideoAnalysis,
)

# Rekognition reports label confidence on a 0-100 scale
IMAGE_CONFIDENCE_SCALE = 100.0


@dataclass(frozen=True)
class Decision:
    is_inappropriate: bool
    confidence_score: float


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def is_inappropriate(result: AnalysisResult) -> bool:
    if isinstance(result, AnalysisError):
        return False
    return bool(result.detected_inappropriate)


def confidence_score(result: AnalysisResult) -> float:
    if isinstance(result, AnalysisError):
        return 0.0
    if isinstance(result, ImageAnalysis):
        if not result.labels:
            return 0.0
        return _clamp(max(label.confidence for label in result.labels) / IMAGE_CONFIDENCE_SCALE)
    if isinstance(result, TextAnalysis):
        confidence = result.judgement.confidence
        return _clamp(confidence) if confidence is not None else 0.0
    if isinstance(result, (VideoAnalysis, UnsupportedAnalysis)):
        return 0.0
    raise TypeError(f"unknown analysis result: {type(result).__name__}")


def decide(result: AnalysisResult) -> Decision:
    return Decision(is_inappropriate=is_inappropriate(result), confidence_score=confidence_score(result))
