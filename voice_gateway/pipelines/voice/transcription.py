"""Transcription stage (Stage 02) of the voice pipeline.

Jobs are driven as a small state machine: ``submit`` creates a job in
``SUBMITTED``, every ``check`` performs exactly one status call and returns
the next state, and ``wait`` repeats checks until a terminal state or the
attempt ceiling (``TIMED_OUT``). The sleep between checks is injectable so
tests can run the full ceiling instantly.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Mapping, Sequence
from uuid import uuid4

from voice_gateway.config.settings import settings
from voice_gateway.services.storage import S3ObjectStorage, StorageError
from voice_gateway.services.transcribe import (
    TranscribeJobService,
    TranscriptionServiceError,
)
from voice_gateway.telemetry import record_status_checks

from .errors import TranscriptionFailedError, TranscriptionTimedOutError
from .types import JobStatus, StoredAudioRef, TranscriptionJob

logger = logging.getLogger("voice_gateway.pipeline")

Sleep = Callable[[float], Awaitable[Any]]

_SERVICE_STATUS_MAP: dict[str, JobStatus] = {
    "QUEUED": JobStatus.SUBMITTED,
    "IN_PROGRESS": JobStatus.IN_PROGRESS,
    "COMPLETED": JobStatus.COMPLETED,
    "FAILED": JobStatus.FAILED,
}


def parse_transcript_document(document: Mapping[str, Any]) -> str:
    """Return ``results.transcripts[0].transcript`` from a Transcribe document."""

    try:
        return document["results"]["transcripts"][0]["transcript"]
    except (KeyError, IndexError, TypeError) as exc:
        raise TranscriptionFailedError(f"malformed transcript document ({exc!r})") from exc


class TranscriptionJobManager:
    """Submit one language-identifying job per request and poll it to the end."""

    def __init__(
        self,
        service: TranscribeJobService,
        storage: S3ObjectStorage,
        *,
        language_options: Sequence[str] | None = None,
        media_format: str | None = None,
        poll_interval: float | None = None,
        max_attempts: int | None = None,
        default_language: str | None = None,
        transcript_prefix: str | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        config = settings.transcribe
        self._service = service
        self._storage = storage
        self._language_options = tuple(language_options or config.language_options)
        self._media_format = media_format or config.media_format
        self._poll_interval = config.poll_interval_seconds if poll_interval is None else poll_interval
        self._max_attempts = max_attempts or config.max_poll_attempts
        self._default_language = default_language or settings.voice.default_language
        self._transcript_prefix = (transcript_prefix or settings.s3.transcript_prefix).strip("/")
        self._job_name_prefix = config.job_name_prefix
        self._sleep = sleep

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    @property
    def max_wait_seconds(self) -> float:
        """Upper bound on time spent sleeping between status checks."""

        return self._poll_interval * (self._max_attempts - 1)

    async def submit(self, audio_ref: StoredAudioRef) -> TranscriptionJob:
        job_name = f"{self._job_name_prefix}-{uuid4()}"
        output_key = f"{self._transcript_prefix}/{job_name}.json"
        logger.info(
            "Starting transcribe job %s with language options %s",
            job_name,
            ", ".join(self._language_options),
        )
        try:
            await self._service.start_job(
                job_name=job_name,
                media_uri=audio_ref.uri,
                language_options=self._language_options,
                media_format=self._media_format,
                output_bucket=self._storage.bucket,
                output_key=output_key,
            )
        except TranscriptionServiceError as exc:
            raise TranscriptionFailedError(str(exc)) from exc
        return TranscriptionJob(job_name=job_name, output_key=output_key)

    async def check(self, job: TranscriptionJob) -> TranscriptionJob:
        """Issue one status call and return the job's next state."""

        try:
            snapshot = await self._service.get_job(job.job_name)
        except TranscriptionServiceError as exc:
            raise TranscriptionFailedError(str(exc)) from exc

        checks = job.status_checks + 1
        status = _SERVICE_STATUS_MAP.get(snapshot.status)
        if status is None:
            logger.warning(
                "Unexpected transcription status %s for %s; treating as in progress",
                snapshot.status,
                job.job_name,
            )
            status = JobStatus.IN_PROGRESS

        if status is JobStatus.FAILED:
            return job.advance(
                JobStatus.FAILED,
                status_checks=checks,
                failure_reason=snapshot.failure_reason or "Unknown reason",
            )
        if status is JobStatus.COMPLETED:
            document = await self._load_transcript_document(job, snapshot.transcript_uri)
            return job.advance(
                JobStatus.COMPLETED,
                status_checks=checks,
                transcript_uri=snapshot.transcript_uri,
                language_code=snapshot.language_code or self._default_language,
                transcript=parse_transcript_document(document),
            )
        return job.advance(status, status_checks=checks)

    async def wait(self, job: TranscriptionJob) -> TranscriptionJob:
        """Poll until a terminal state, giving up after ``max_attempts`` checks."""

        while True:
            job = await self.check(job)
            if job.status.is_terminal:
                break
            if job.status_checks >= self._max_attempts:
                job = job.advance(JobStatus.TIMED_OUT)
                break
            logger.info(
                "Transcription job status: %s. Waiting... (%s/%s)",
                job.status.value,
                job.status_checks,
                self._max_attempts,
            )
            await self._sleep(self._poll_interval)

        record_status_checks(job.status_checks)
        return job

    async def complete(self, job: TranscriptionJob) -> TranscriptionJob:
        """Wait for ``job`` and raise unless it finished ``COMPLETED``."""

        job = await self.wait(job)
        if job.status is JobStatus.FAILED:
            logger.error("Transcription job %s failed: %s", job.job_name, job.failure_reason)
            raise TranscriptionFailedError(job.failure_reason or "Unknown reason")
        if job.status is JobStatus.TIMED_OUT:
            logger.error(
                "Transcription job %s timed out after %s checks",
                job.job_name,
                job.status_checks,
            )
            raise TranscriptionTimedOutError(
                f"Transcription job timed out after {job.status_checks} status checks."
            )
        logger.info(
            "Transcription completed job=%s language=%s", job.job_name, job.language_code
        )
        return job

    async def _load_transcript_document(
        self,
        job: TranscriptionJob,
        transcript_uri: str | None,
    ) -> Mapping[str, Any]:
        try:
            return json.loads(await self._storage.get(job.output_key))
        except (StorageError, ValueError) as exc:
            if not transcript_uri:
                raise TranscriptionFailedError(
                    f"transcript artifact unavailable: {exc}"
                ) from exc
            logger.info(
                "Reading transcript from bucket failed (%s); dereferencing %s",
                exc,
                transcript_uri,
            )

        try:
            return await self._service.fetch_transcript_document(transcript_uri)
        except TranscriptionServiceError as exc:
            raise TranscriptionFailedError(str(exc)) from exc


__all__ = ["TranscriptionJobManager", "parse_transcript_document"]
