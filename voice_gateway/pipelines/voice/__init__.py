"""Voice query pipeline package.

Modules are organised by the order in which ``/process-voice`` executes:

1. ``ingestion`` – decode the request and upload the audio to S3.
2. ``transcription`` – run an Amazon Transcribe job and poll it to the end.
3. ``reply`` – ask Gemini for an answer in the detected language.
4. ``voices`` – pick a voice, translating to the default language if needed.
5. ``synthesis`` – render the answer with Polly or ElevenLabs.
6. ``cleanup`` – delete transient objects and assemble the result.

``pipeline.VoicePipeline`` ties the stages together.
"""

from .cleanup import assemble_failure, assemble_success, delete_transient_objects
from .errors import (
    InvalidInputError,
    StorageUploadFailedError,
    SynthesisConfigFailedError,
    SynthesisFailedError,
    TranscriptionFailedError,
    TranscriptionTimedOutError,
    UnknownProviderError,
    VoicePipelineError,
)
from .ingestion import build_voice_request, decode_audio_payload, decode_request_body, upload_audio
from .pipeline import VoicePipeline
from .reply import LLM_FALLBACK_TEXT, ReplyGenerator, build_reply_prompt
from .synthesis import SpeechSynthesizer
from .transcription import TranscriptionJobManager, parse_transcript_document
from .types import (
    JobStatus,
    PipelineFailure,
    PipelineResult,
    PipelineStage,
    ResolutionOutcome,
    StoredAudioRef,
    TranscriptionJob,
    VoiceRequest,
    VoiceResolution,
)
from .voices import (
    LAST_RESORT_PROFILE,
    TRANSLATION_FALLBACK_TEXT,
    VoiceResolver,
    base_language,
    load_voice_table,
)

__all__ = [
    "InvalidInputError",
    "JobStatus",
    "LAST_RESORT_PROFILE",
    "LLM_FALLBACK_TEXT",
    "PipelineFailure",
    "PipelineResult",
    "PipelineStage",
    "ReplyGenerator",
    "ResolutionOutcome",
    "SpeechSynthesizer",
    "StorageUploadFailedError",
    "StoredAudioRef",
    "SynthesisConfigFailedError",
    "SynthesisFailedError",
    "TRANSLATION_FALLBACK_TEXT",
    "TranscriptionFailedError",
    "TranscriptionJob",
    "TranscriptionJobManager",
    "TranscriptionTimedOutError",
    "UnknownProviderError",
    "VoicePipeline",
    "VoicePipelineError",
    "VoiceRequest",
    "VoiceResolution",
    "VoiceResolver",
    "assemble_failure",
    "assemble_success",
    "base_language",
    "build_reply_prompt",
    "build_voice_request",
    "decode_audio_payload",
    "decode_request_body",
    "delete_transient_objects",
    "load_voice_table",
    "parse_transcript_document",
    "upload_audio",
]
