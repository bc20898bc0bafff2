"""boto3 client factory shared by the S3, Transcribe, Translate and Polly wrappers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

import boto3
from botocore.config import Config

from voice_gateway.config.settings import settings


@lru_cache(maxsize=1)
def _session() -> boto3.session.Session:
    aws = settings.aws
    if aws.access_key_id and aws.secret_access_key:
        return boto3.session.Session(
            aws_access_key_id=aws.access_key_id,
            aws_secret_access_key=aws.secret_access_key.get_secret_value(),
            aws_session_token=(
                aws.session_token.get_secret_value() if aws.session_token else None
            ),
        )
    return boto3.session.Session()


def create_boto3_client(service_name: str, *, region_name: str | None = None) -> Any:
    """Build a client for ``service_name`` in ``region_name`` or the shared AWS region."""

    retry_config = Config(
        retries={"max_attempts": settings.aws.max_retry_attempts, "mode": "standard"},
    )
    return _session().client(
        service_name,
        region_name=region_name or settings.aws.region,
        config=retry_config,
    )


__all__ = ["create_boto3_client"]
