"""Shared boto3 client construction and botocore error classification."""

from __future__ import annotations

from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from contentguard.settings import settings

AWS_ERRORS = (ClientError, BotoCoreError)

_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound", "NoSuchBucket"})
# S3 answers HEAD on a missing key with 403 when the caller lacks s3:ListBucket
_DENIED_CODES = frozenset({"403", "AccessDenied", "Forbidden"})


def client_config() -> Config:
    return Config(
        region_name=settings.aws_region,
        connect_timeout=settings.aws_connect_timeout_seconds,
        read_timeout=settings.aws_read_timeout_seconds,
        retries={"max_attempts": settings.aws_max_attempts, "mode": "standard"},
    )


def make_client(service_name: str) -> Any:
    return boto3.client(service_name, config=client_config())


def error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


def is_not_found(exc: ClientError) -> bool:
    code = error_code(exc)
    return code in _NOT_FOUND_CODES or code in _DENIED_CODES


def describe(exc: BaseException) -> str:
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        return f"{error.get('Code', 'ClientError')}: {error.get('Message', '')}".rstrip(": ")
    return str(exc) or exc.__class__.__name__
