"""Service layer helpers for external integrations."""

from .llm_client import GeminiLlmClient, LlmConfigurationError, LlmInvocationError
from .storage import S3ObjectStorage, StorageError
from .transcribe import (
    TranscribeJobService,
    TranscriptionJobSnapshot,
    TranscriptionServiceError,
)
from .translate import TranslateService, TranslationError
from .tts import (
    ElevenLabsSpeechBackend,
    PollySpeechBackend,
    SpeechBackend,
    SpeechProvider,
    SynthesisConfigError,
    SynthesisError,
    SynthesizedSpeech,
    VoiceProfile,
)

__all__ = [
    "GeminiLlmClient",
    "LlmConfigurationError",
    "LlmInvocationError",
    "S3ObjectStorage",
    "StorageError",
    "TranscribeJobService",
    "TranscriptionJobSnapshot",
    "TranscriptionServiceError",
    "TranslateService",
    "TranslationError",
    "ElevenLabsSpeechBackend",
    "PollySpeechBackend",
    "SpeechBackend",
    "SpeechProvider",
    "SynthesisConfigError",
    "SynthesisError",
    "SynthesizedSpeech",
    "VoiceProfile",
]
