"""End-to-end orchestration of one voice query.

Stages run strictly in order: ingest, transcription, reply, voice
resolution, synthesis. Cleanup runs on every exit path once the audio has
been uploaded, including cancellation.
"""

from __future__ import annotations

import logging

from voice_gateway.services.storage import S3ObjectStorage
from voice_gateway.telemetry import record_pipeline_run

from .cleanup import assemble_failure, assemble_success, delete_transient_objects
from .errors import UnknownProviderError, VoicePipelineError
from .ingestion import upload_audio
from .reply import ReplyGenerator
from .synthesis import SpeechSynthesizer
from .transcription import TranscriptionJobManager
from .types import PipelineResult, TranscriptionJob, VoiceRequest, VoiceResolution
from .voices import VoiceResolver

logger = logging.getLogger("voice_gateway.pipeline")


class VoicePipeline:
    """One instance may serve concurrent requests; all run state is local to ``run``."""

    def __init__(
        self,
        *,
        storage: S3ObjectStorage,
        transcriber: TranscriptionJobManager,
        replier: ReplyGenerator,
        resolver: VoiceResolver,
        synthesizer: SpeechSynthesizer,
    ) -> None:
        self._storage = storage
        self._transcriber = transcriber
        self._replier = replier
        self._resolver = resolver
        self._synthesizer = synthesizer

    async def run(self, request: VoiceRequest) -> PipelineResult:
        transient_keys: list[str] = []
        job: TranscriptionJob | None = None
        reply_text: str | None = None
        resolution: VoiceResolution | None = None

        try:
            audio_ref = await upload_audio(self._storage, request)
            transient_keys.append(audio_ref.key)

            job = await self._transcriber.submit(audio_ref)
            transient_keys.append(job.output_key)
            job = await self._transcriber.complete(job)
            logger.info("Transcribed request=%s: %s", request.request_id, job.transcript)

            reply_text = await self._replier.generate(job.transcript or "", job.language_code)
            resolution = await self._resolver.resolve(job.language_code, reply_text)
            speech = await self._synthesizer.synthesize(
                resolution.spoken_text, resolution.profile
            )
        except UnknownProviderError as exc:
            logger.exception("Resolved voice has no synthesis backend request=%s", request.request_id)
            return self._failed(exc, job, reply_text, resolution)
        except VoicePipelineError as exc:
            logger.error(
                "Pipeline aborted request=%s stage=%s kind=%s: %s",
                request.request_id,
                exc.stage.value,
                exc.kind,
                exc,
            )
            return self._failed(exc, job, reply_text, resolution)
        finally:
            await delete_transient_objects(self._storage, transient_keys)

        record_pipeline_run("success", "complete")
        logger.info(
            "Pipeline complete request=%s language=%s voice=%s/%s",
            request.request_id,
            job.language_code,
            resolution.profile.provider.value,
            resolution.profile.voice_id,
        )
        return assemble_success(job, reply_text, resolution, speech)

    @staticmethod
    def _failed(
        exc: VoicePipelineError,
        job: TranscriptionJob | None,
        reply_text: str | None,
        resolution: VoiceResolution | None,
    ) -> PipelineResult:
        record_pipeline_run("error", exc.stage.value)
        return assemble_failure(
            exc.to_failure(),
            job=job,
            reply_text=reply_text,
            resolution=resolution,
        )


__all__ = ["VoicePipeline"]
