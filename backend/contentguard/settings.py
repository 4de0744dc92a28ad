"""Settings for the content moderation pipeline with observability configuration."""

from __future__ import annotations

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_field(default, *env_names: str):
    if env_names:
        alias = AliasChoices(*env_names) if len(env_names) > 1 else env_names[0]
        return Field(default=default, validation_alias=alias)
    return Field(default=default)


class Settings(BaseSettings):
    aws_region: str = _env_field("us-east-1", "AWS_REGION", "AWS_DEFAULT_REGION", "REGION")
    results_table: str = _env_field("moderation-results", "DYNAMODB_TABLE")
    alert_topic_arn: str = _env_field("", "SNS_TOPIC_ARN")
    # Rekognition drops labels below this score (0-100 scale) for images and videos
    min_confidence: float = _env_field(60.0, "MODERATION_MIN_CONFIDENCE")
    text_model_id: str = _env_field("anthropic.claude-3-haiku-20240307-v1:0", "TEXT_MODEL_ID", "BEDROCK_MODEL_ID")
    text_anthropic_version: str = _env_field("bedrock-2023-05-31", "TEXT_ANTHROPIC_VERSION")
    text_max_tokens: int = _env_field(1000, "TEXT_MAX_TOKENS")
    provider_timeout_seconds: float = _env_field(10.0, "PROVIDER_TIMEOUT_SECONDS")
    aws_connect_timeout_seconds: float = _env_field(3.0, "AWS_CONNECT_TIMEOUT_SECONDS")
    aws_read_timeout_seconds: float = _env_field(8.0, "AWS_READ_TIMEOUT_SECONDS")
    aws_max_attempts: int = _env_field(3, "AWS_MAX_ATTEMPTS")
    batch_concurrency: int = _env_field(1, "BATCH_CONCURRENCY")
    # "aws" wires boto3 adapters, "memory" keeps records and alerts in-process
    store_backend: str = _env_field("aws", "STORE_BACKEND")
    notifier_backend: str = _env_field("aws", "NOTIFIER_BACKEND")

    environment: str = _env_field("production", "ENV", "APP_ENV", "ENVIRONMENT")
    obs_enabled: bool = _env_field(True, "OBS_ENABLED")
    obs_log_level: str = _env_field("INFO", "LOG_LEVEL")
    obs_log_sampling_rate_info: float = _env_field(1.0, "LOG_SAMPLING_RATE_INFO")
    service_name: str = _env_field("contentguard", "SERVICE_NAME")
    git_commit: str = _env_field("unknown", "GIT_COMMIT", "COMMIT_SHA", "SOURCE_VERSION")
    api_prefix: str = _env_field("/api/mod/v1", "API_PREFIX")

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("store_backend", "notifier_backend", mode="before")
    def _normalise_backend(cls, value):  # type: ignore[override]
        text = str(value or "aws").strip().lower()
        if text not in {"aws", "memory"}:
            raise ValueError(f"unsupported backend: {value}")
        return text

    @field_validator("min_confidence")
    def _check_confidence(cls, value: float) -> float:  # type: ignore[override]
        if not 0.0 <= value <= 100.0:
            raise ValueError("min_confidence must be within 0-100")
        return value

    @field_validator("batch_concurrency")
    def _check_concurrency(cls, value: int) -> int:  # type: ignore[override]
        return max(1, value)


def _normalise_level(level: str) -> str:
    return level.upper()


settings = Settings()
settings.obs_log_level = _normalise_level(settings.obs_log_level)
