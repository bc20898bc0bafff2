"""Common dependencies reused across controllers and the Lambda entry point."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from voice_gateway.pipelines.voice import (
    ReplyGenerator,
    SpeechSynthesizer,
    TranscriptionJobManager,
    VoicePipeline,
    VoiceResolver,
)
from voice_gateway.services import (
    ElevenLabsSpeechBackend,
    GeminiLlmClient,
    PollySpeechBackend,
    S3ObjectStorage,
    TranscribeJobService,
    TranslateService,
)


def build_voice_pipeline() -> VoicePipeline:
    """Wire the pipeline against the real AWS, Gemini and ElevenLabs services."""

    storage = S3ObjectStorage()
    return VoicePipeline(
        storage=storage,
        transcriber=TranscriptionJobManager(TranscribeJobService(), storage),
        replier=ReplyGenerator(GeminiLlmClient()),
        resolver=VoiceResolver(TranslateService()),
        synthesizer=SpeechSynthesizer(
            [PollySpeechBackend(), ElevenLabsSpeechBackend()]
        ),
    )


@lru_cache(maxsize=1)
def get_voice_pipeline() -> VoicePipeline:
    """Return a lazily-instantiated pipeline singleton."""

    return build_voice_pipeline()


VoicePipelineDep = Annotated[VoicePipeline, Depends(get_voice_pipeline)]


__all__ = ["VoicePipelineDep", "build_voice_pipeline", "get_voice_pipeline"]
