"""Cleanup and response assembly (Stage 06) of the voice pipeline."""

from __future__ import annotations

import logging
from typing import Iterable

from voice_gateway.services.storage import S3ObjectStorage, StorageError
from voice_gateway.services.tts import SynthesizedSpeech
from voice_gateway.telemetry import record_cleanup_failure

from .types import PipelineFailure, PipelineResult, TranscriptionJob, VoiceResolution

logger = logging.getLogger("voice_gateway.pipeline")


async def delete_transient_objects(storage: S3ObjectStorage, keys: Iterable[str]) -> int:
    """Delete every key, logging failures instead of raising. Returns deletions."""

    deleted = 0
    for key in keys:
        try:
            await storage.delete(key)
        except StorageError as exc:
            logger.warning("Failed to clean up %s: %s", key, exc)
            record_cleanup_failure()
            continue
        deleted += 1
    if deleted:
        logger.info("Cleaned up %s temporary S3 object(s).", deleted)
    return deleted


def assemble_success(
    job: TranscriptionJob,
    reply_text: str,
    resolution: VoiceResolution,
    speech: SynthesizedSpeech,
) -> PipelineResult:
    return PipelineResult(
        transcript=job.transcript,
        reply_text=reply_text,
        spoken_text=resolution.spoken_text,
        audio_bytes=speech.audio_bytes,
        detected_language=job.language_code,
        voice=resolution.profile,
    )


def assemble_failure(
    failure: PipelineFailure,
    *,
    job: TranscriptionJob | None = None,
    reply_text: str | None = None,
    resolution: VoiceResolution | None = None,
) -> PipelineResult:
    """Error result carrying whatever the earlier stages produced."""

    return PipelineResult(
        transcript=job.transcript if job else None,
        reply_text=reply_text,
        spoken_text=resolution.spoken_text if resolution else None,
        detected_language=job.language_code if job else None,
        voice=resolution.profile if resolution else None,
        error=failure,
    )


__all__ = ["assemble_failure", "assemble_success", "delete_transient_objects"]
