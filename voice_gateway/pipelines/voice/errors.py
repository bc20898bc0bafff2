"""Fatal pipeline errors, one class per error kind."""

from __future__ import annotations

from .types import PipelineFailure, PipelineStage


class VoicePipelineError(RuntimeError):
    """Base class for errors that end a pipeline run."""

    kind = "InternalError"
    stage = PipelineStage.INGEST
    status_code = 500

    def to_failure(self) -> PipelineFailure:
        return PipelineFailure(
            kind=self.kind,
            stage=self.stage,
            message=str(self),
            status_code=self.status_code,
        )


class InvalidInputError(VoicePipelineError):
    kind = "InvalidInput"
    stage = PipelineStage.INGEST
    status_code = 400


class StorageUploadFailedError(VoicePipelineError):
    kind = "StorageUploadFailed"
    stage = PipelineStage.INGEST


class TranscriptionFailedError(VoicePipelineError):
    kind = "TranscriptionFailed"
    stage = PipelineStage.TRANSCRIPTION

    def __init__(self, reason: str) -> None:
        super().__init__(f"Transcription failed: {reason}")
        self.reason = reason


class TranscriptionTimedOutError(VoicePipelineError):
    kind = "TranscriptionTimedOut"
    stage = PipelineStage.TRANSCRIPTION


class SynthesisConfigFailedError(VoicePipelineError):
    kind = "SynthesisConfigError"
    stage = PipelineStage.SYNTHESIS


class SynthesisFailedError(VoicePipelineError):
    kind = "SynthesisFailed"
    stage = PipelineStage.SYNTHESIS

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        # Only 4xx/5xx provider statuses replace the default.
        if status_code is not None and 400 <= status_code < 600:
            self.status_code = status_code


class UnknownProviderError(VoicePipelineError):
    kind = "UnknownProvider"
    stage = PipelineStage.SYNTHESIS


__all__ = [
    "InvalidInputError",
    "StorageUploadFailedError",
    "SynthesisConfigFailedError",
    "SynthesisFailedError",
    "TranscriptionFailedError",
    "TranscriptionTimedOutError",
    "UnknownProviderError",
    "VoicePipelineError",
]
