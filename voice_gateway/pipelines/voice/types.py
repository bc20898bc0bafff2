"""Typed containers shared across the voice pipeline stages.

These live in their own module so every stage can import them without
creating circular dependencies.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, replace
from enum import Enum

from voice_gateway.services.tts import VoiceProfile


class PipelineStage(str, Enum):
    """Stages in execution order, used to tag failures and metrics."""

    INGEST = "ingest"
    TRANSCRIPTION = "transcription"
    REPLY = "reply"
    VOICE_RESOLUTION = "voice_resolution"
    SYNTHESIS = "synthesis"
    CLEANUP = "cleanup"


@dataclass(frozen=True)
class VoiceRequest:
    """Decoded inbound audio; immutable for the lifetime of one run."""

    audio_bytes: bytes
    request_id: str
    media_format: str = "mp3"


@dataclass(frozen=True)
class StoredAudioRef:
    """Location of the uploaded audio in object storage."""

    key: str
    uri: str


class JobStatus(str, Enum):
    SUBMITTED = "SUBMITTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.TIMED_OUT)


@dataclass(frozen=True)
class TranscriptionJob:
    """State of one transcription job.

    ``language_code`` and ``transcript`` are set only once the job is
    ``COMPLETED``; ``failure_reason`` only once it is ``FAILED``.
    ``output_key`` names the artifact Transcribe writes to the bucket.
    """

    job_name: str
    output_key: str
    status: JobStatus = JobStatus.SUBMITTED
    status_checks: int = 0
    transcript_uri: str | None = None
    language_code: str | None = None
    transcript: str | None = None
    failure_reason: str | None = None

    def advance(self, status: JobStatus, **changes) -> "TranscriptionJob":
        if self.status.is_terminal:
            raise ValueError(f"Job {self.job_name} is already {self.status.value}.")
        return replace(self, status=status, **changes)


class ResolutionOutcome(str, Enum):
    DIRECT = "direct"
    TRANSLATED = "translated"
    DEFAULT_VOICE = "default_voice"
    LAST_RESORT = "last_resort"


@dataclass(frozen=True)
class VoiceResolution:
    """Synthesis target plus the text that will actually be spoken."""

    profile: VoiceProfile
    spoken_text: str
    outcome: ResolutionOutcome
    translation_attempted: bool = False


@dataclass(frozen=True)
class PipelineFailure:
    """Stage-tagged error envelope."""

    kind: str
    stage: PipelineStage
    message: str
    status_code: int


@dataclass(frozen=True)
class PipelineResult:
    """Sole externally observable output of one pipeline run.

    On failure only ``error`` is guaranteed; the text fields carry whatever
    was produced before the failing stage.
    """

    transcript: str | None = None
    reply_text: str | None = None
    spoken_text: str | None = None
    audio_bytes: bytes | None = None
    detected_language: str | None = None
    voice: VoiceProfile | None = None
    error: PipelineFailure | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status_code(self) -> int:
        return 200 if self.error is None else self.error.status_code

    @property
    def audio_base64(self) -> str:
        if not self.audio_bytes:
            return ""
        return base64.b64encode(self.audio_bytes).decode("ascii")


__all__ = [
    "JobStatus",
    "PipelineFailure",
    "PipelineResult",
    "PipelineStage",
    "ResolutionOutcome",
    "StoredAudioRef",
    "TranscriptionJob",
    "VoiceRequest",
    "VoiceResolution",
]
