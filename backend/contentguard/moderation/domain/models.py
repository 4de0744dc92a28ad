"""Data model for content items, analysis results and moderation records."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Mapping, Union
from uuid import uuid4

ALERT_MESSAGE = "Inappropriate content detected"


@dataclass(frozen=True, slots=True)
class ContentLocation:
    """Where a stored content item lives."""

    bucket: str
    key: str

    @property
    def uri(self) -> str:
        return f"s3://{self.bucket}/{self.key}"


@dataclass(frozen=True, slots=True)
class ContentMetadata:
    content_type: str
    size_bytes: int


@dataclass(frozen=True, slots=True)
class ModerationLabel:
    """A single label reported by the image moderation detector (confidence on a 0-100 scale)."""

    name: str
    confidence: float
    parent_name: str = ""

    def to_payload(self) -> dict[str, Any]:
        return {"Name": self.name, "Confidence": self.confidence, "ParentName": self.parent_name}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ModerationLabel":
        return cls(
            name=str(payload.get("Name", "")),
            confidence=float(payload.get("Confidence") or 0.0),
            parent_name=str(payload.get("ParentName") or ""),
        )


@dataclass(frozen=True, slots=True)
class ImageAnalysis:
    service: ClassVar[str] = "rekognition"

    labels: tuple[ModerationLabel, ...] = ()

    @property
    def detected_inappropriate(self) -> bool:
        return len(self.labels) > 0

    def to_payload(self) -> dict[str, Any]:
        return {
            "service": self.service,
            "labels": [label.to_payload() for label in self.labels],
            "detected_inappropriate": self.detected_inappropriate,
        }


@dataclass(frozen=True, slots=True)
class VideoAnalysis:
    """Submitted video moderation job; its outcome is not reconciled into the record."""

    service: ClassVar[str] = "rekognition_video"

    job_id: str
    status: str = "processing"

    @property
    def detected_inappropriate(self) -> bool:
        return False

    def to_payload(self) -> dict[str, Any]:
        return {"service": self.service, "job_id": self.job_id, "status": self.status}


@dataclass(frozen=True, slots=True)
class TextJudgement:
    is_inappropriate: bool
    categories: frozenset[str] = frozenset()
    confidence: float | None = None
    reasoning: str = ""

    def to_payload(self) -> dict[str, Any]:
        return {
            "is_inappropriate": self.is_inappropriate,
            "categories": sorted(self.categories),
            "confidence": self.confidence,
            "reasoning": self.reasoning,
        }


@dataclass(frozen=True, slots=True)
class TextAnalysis:
    service: ClassVar[str] = "bedrock"

    judgement: TextJudgement

    @property
    def detected_inappropriate(self) -> bool:
        return self.judgement.is_inappropriate

    def to_payload(self) -> dict[str, Any]:
        return {
            "service": self.service,
            "analysis": self.judgement.to_payload(),
            "detected_inappropriate": self.detected_inappropriate,
        }


@dataclass(frozen=True, slots=True)
class UnsupportedAnalysis:
    service: ClassVar[str] = "unsupported"

    content_type: str

    @property
    def detected_inappropriate(self) -> bool:
        return False

    def to_payload(self) -> dict[str, Any]:
        return {"service": self.service, "content_type": self.content_type, "detected_inappropriate": False}


@dataclass(frozen=True, slots=True)
class AnalysisError:
    """Inconclusive result produced when an analyzer call fails."""

    provider_name: str
    error_message: str

    @property
    def service(self) -> str:
        return self.provider_name

    @property
    def detected_inappropriate(self) -> bool:
        return False

    def to_payload(self) -> dict[str, Any]:
        return {"service": self.provider_name, "error": self.error_message}


AnalysisResult = Union[ImageAnalysis, VideoAnalysis, TextAnalysis, UnsupportedAnalysis, AnalysisError]


def analysis_from_payload(payload: Mapping[str, Any]) -> AnalysisResult:
    """Restore an analysis variant from its persisted payload."""

    service = str(payload.get("service", ""))
    if "error" in payload:
        return AnalysisError(provider_name=service, error_message=str(payload["error"]))
    if service == ImageAnalysis.service:
        labels = tuple(ModerationLabel.from_payload(item) for item in payload.get("labels") or ())
        return ImageAnalysis(labels=labels)
    if service == VideoAnalysis.service:
        return VideoAnalysis(job_id=str(payload.get("job_id", "")), status=str(payload.get("status", "processing")))
    if service == TextAnalysis.service:
        analysis = payload.get("analysis") or {}
        confidence = analysis.get("confidence")
        return TextAnalysis(
            judgement=TextJudgement(
                is_inappropriate=bool(analysis.get("is_inappropriate", False)),
                categories=frozenset(str(item) for item in analysis.get("categories") or ()),
                confidence=float(confidence) if confidence is not None else None,
                reasoning=str(analysis.get("reasoning") or ""),
            )
        )
    return UnsupportedAnalysis(content_type=str(payload.get("content_type", "")))


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


@dataclass(frozen=True, slots=True)
class ModerationRecord:
    """Persisted outcome of analyzing one content item."""

    id: str
    location: ContentLocation
    content_type: str
    size_bytes: int
    created_at: datetime
    analysis: AnalysisResult
    is_inappropriate: bool
    confidence_score: float

    @classmethod
    def create(
        cls,
        location: ContentLocation,
        metadata: ContentMetadata,
        analysis: AnalysisResult,
        *,
        is_inappropriate: bool,
        confidence_score: float,
        created_at: datetime | None = None,
    ) -> "ModerationRecord":
        return cls(
            id=str(uuid4()),
            location=location,
            content_type=metadata.content_type,
            size_bytes=metadata.size_bytes,
            created_at=created_at or datetime.now(timezone.utc),
            analysis=analysis,
            is_inappropriate=is_inappropriate,
            confidence_score=confidence_score,
        )

    @property
    def timestamp(self) -> str:
        return self.created_at.isoformat()

    def to_item(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "bucket": self.location.bucket,
            "key": self.location.key,
            "content_type": self.content_type,
            "file_size": self.size_bytes,
            "timestamp": self.timestamp,
            "moderation_results": self.analysis.to_payload(),
            "is_inappropriate": self.is_inappropriate,
            "confidence_score": self.confidence_score,
        }

    @classmethod
    def from_item(cls, item: Mapping[str, Any]) -> "ModerationRecord":
        return cls(
            id=str(item["id"]),
            location=ContentLocation(bucket=str(item["bucket"]), key=str(item["key"])),
            content_type=str(item.get("content_type") or ""),
            size_bytes=int(item.get("file_size") or 0),
            created_at=_parse_timestamp(item["timestamp"]),
            analysis=analysis_from_payload(item.get("moderation_results") or {}),
            is_inappropriate=bool(item.get("is_inappropriate", False)),
            confidence_score=float(item.get("confidence_score") or 0.0),
        )


@dataclass(frozen=True, slots=True)
class Alert:
    location_uri: str
    confidence_score: float
    timestamp: str
    message: str = ALERT_MESSAGE

    @classmethod
    def from_record(cls, record: ModerationRecord) -> "Alert":
        return cls(
            location_uri=record.location.uri,
            confidence_score=record.confidence_score,
            timestamp=record.timestamp,
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "alert": self.message,
            "file": self.location_uri,
            "confidence": self.confidence_score,
            "timestamp": self.timestamp,
        }


class PipelineStage(str, enum.Enum):
    FETCHING = "fetching"
    ANALYZING = "analyzing"
    DECIDING = "deciding"
    PERSISTING = "persisting"
    NOTIFYING = "notifying"
    DONE = "done"
    FAILED = "failed"


@dataclass(slots=True)
class ItemOutcome:
    """Result of driving one content item through the pipeline."""

    location: ContentLocation
    stage: PipelineStage
    failed_stage: PipelineStage | None = None
    record: ModerationRecord | None = None
    error: str | None = None
    notified: bool = False
    # video jobs are submitted but never polled
    pending: bool = False

    @property
    def succeeded(self) -> bool:
        return self.stage is PipelineStage.DONE

    def to_summary(self) -> dict[str, Any]:
        summary: dict[str, Any] = {
            "file": self.location.uri,
            "status": self.stage.value,
            "notified": self.notified,
            "pending": self.pending,
        }
        if self.record is not None:
            summary["id"] = self.record.id
            summary["is_inappropriate"] = self.record.is_inappropriate
            summary["confidence_score"] = self.record.confidence_score
        if self.failed_stage is not None:
            summary["failed_stage"] = self.failed_stage.value
            summary["error"] = self.error
        return summary


@dataclass(slots=True)
class BatchResult:
    batch_id: str
    outcomes: list[ItemOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def failed(self) -> int:
        return len(self.outcomes) - self.succeeded

    def to_summary(self) -> dict[str, Any]:
        return {
            "batch_id": self.batch_id,
            "processed": len(self.outcomes),
            "succeeded": self.succeeded,
            "failed": self.failed,
            "items": [outcome.to_summary() for outcome in self.outcomes],
        }
