"""Pydantic schemas for the voice processing endpoint."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from voice_gateway.pipelines.voice import PipelineFailure, PipelineResult


class VoiceInfo(BaseModel):
    provider: str
    voice_id: str
    engine: Optional[str] = None
    language_code: str


class VoiceProcessResponse(BaseModel):
    """Successful pipeline run."""

    message: str = "Processing complete"
    transcribed_text: str
    llm_response: str
    final_spoken_text: str
    audio_response_base64: str
    detected_language: str
    voice: VoiceInfo

    @classmethod
    def from_result(cls, result: PipelineResult) -> "VoiceProcessResponse":
        profile = result.voice
        return cls(
            transcribed_text=result.transcript or "",
            llm_response=result.reply_text or "",
            final_spoken_text=result.spoken_text or "",
            audio_response_base64=result.audio_base64,
            detected_language=result.detected_language or "",
            voice=VoiceInfo(
                provider=profile.provider.value,
                voice_id=profile.voice_id,
                engine=profile.engine,
                language_code=profile.language_code,
            ),
        )


class VoiceErrorResponse(BaseModel):
    """Stage-tagged error envelope with best-effort partial fields."""

    message: str
    error: str
    stage: str
    transcribed_text: Optional[str] = None
    llm_response: Optional[str] = None
    final_spoken_text: Optional[str] = None
    detected_language: Optional[str] = None

    @classmethod
    def from_result(cls, result: PipelineResult) -> "VoiceErrorResponse":
        failure = result.error
        return cls(
            message=failure.message,
            error=failure.kind,
            stage=failure.stage.value,
            transcribed_text=result.transcript,
            llm_response=result.reply_text,
            final_spoken_text=result.spoken_text,
            detected_language=result.detected_language,
        )


def render_result(result: PipelineResult) -> tuple[int, dict]:
    """Return ``(status_code, json_body)`` for a pipeline result."""

    if result.ok:
        return 200, VoiceProcessResponse.from_result(result).model_dump()
    return result.status_code, VoiceErrorResponse.from_result(result).model_dump(
        exclude_none=True
    )


def render_rejection(failure: PipelineFailure) -> tuple[int, dict]:
    """Error envelope for a request rejected before the pipeline started."""

    body = VoiceErrorResponse(
        message=failure.message,
        error=failure.kind,
        stage=failure.stage.value,
    )
    return failure.status_code, body.model_dump(exclude_none=True)
