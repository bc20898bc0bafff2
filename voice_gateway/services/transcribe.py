"""Amazon Transcribe integration helpers using batch transcription jobs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

import httpx
from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from voice_gateway.config.settings import settings
from voice_gateway.services.aws import create_boto3_client

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TranscriptionJobSnapshot:
    """One ``get_transcription_job`` answer, reduced to the fields we use."""

    job_name: str
    status: str
    language_code: str | None = None
    transcript_uri: str | None = None
    failure_reason: str | None = None


class TranscriptionServiceError(RuntimeError):
    """Raised when Amazon Transcribe cannot be reached or answers unexpectedly."""


class TranscribeJobService:
    """High-level facade for Amazon Transcribe batch jobs."""

    def __init__(
        self,
        *,
        client: Any | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        fetch_timeout: float = 30.0,
    ) -> None:
        self._client = client or create_boto3_client(
            "transcribe", region_name=settings.transcribe.region
        )
        self._transport = transport
        self._fetch_timeout = fetch_timeout

    async def start_job(
        self,
        *,
        job_name: str,
        media_uri: str,
        language_options: Sequence[str],
        media_format: str,
        output_bucket: str,
        output_key: str,
    ) -> None:
        """Submit a job that identifies the spoken language among ``language_options``."""

        try:
            await run_in_threadpool(
                self._client.start_transcription_job,
                TranscriptionJobName=job_name,
                IdentifyLanguage=True,
                LanguageOptions=list(language_options),
                MediaFormat=media_format,
                Media={"MediaFileUri": media_uri},
                OutputBucketName=output_bucket,
                OutputKey=output_key,
            )
        except (BotoCoreError, ClientError) as exc:
            raise TranscriptionServiceError(
                f"Failed to start transcription job {job_name}: {exc}"
            ) from exc
        logger.info("Transcribe job started: %s", job_name)

    async def get_job(self, job_name: str) -> TranscriptionJobSnapshot:
        try:
            response: dict[str, Any] = await run_in_threadpool(
                self._client.get_transcription_job,
                TranscriptionJobName=job_name,
            )
        except (BotoCoreError, ClientError) as exc:
            raise TranscriptionServiceError(
                f"Failed to query transcription job {job_name}: {exc}"
            ) from exc

        job = response.get("TranscriptionJob") or {}
        status = job.get("TranscriptionJobStatus")
        if not status:
            raise TranscriptionServiceError(
                f"Transcribe returned no status for job {job_name}."
            )
        return TranscriptionJobSnapshot(
            job_name=job_name,
            status=status,
            language_code=job.get("LanguageCode"),
            transcript_uri=(job.get("Transcript") or {}).get("TranscriptFileUri"),
            failure_reason=job.get("FailureReason"),
        )

    async def fetch_transcript_document(self, transcript_uri: str) -> Mapping[str, Any]:
        """Dereference the transcript URI returned by a completed job."""

        try:
            async with httpx.AsyncClient(
                timeout=self._fetch_timeout, transport=self._transport
            ) as client:
                response = await client.get(transcript_uri)
                response.raise_for_status()
                return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise TranscriptionServiceError(
                f"Failed to fetch transcript document: {exc}"
            ) from exc


__all__ = [
    "TranscribeJobService",
    "TranscriptionJobSnapshot",
    "TranscriptionServiceError",
]
