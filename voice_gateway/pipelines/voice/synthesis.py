"""Speech synthesis stage (Stage 05) of the voice pipeline."""

from __future__ import annotations

import logging
from typing import Iterable

from voice_gateway.services.tts import (
    SpeechBackend,
    SpeechProvider,
    SynthesisConfigError,
    SynthesisError,
    SynthesizedSpeech,
    VoiceProfile,
)

from .errors import SynthesisConfigFailedError, SynthesisFailedError, UnknownProviderError

logger = logging.getLogger("voice_gateway.pipeline")


class SpeechSynthesizer:
    """Dispatch a resolved profile to the backend registered for its provider.

    Construction fails unless every :class:`SpeechProvider` has exactly one
    backend, so a resolved profile always has somewhere to go.
    """

    def __init__(self, backends: Iterable[SpeechBackend]) -> None:
        registry: dict[SpeechProvider, SpeechBackend] = {}
        for backend in backends:
            if backend.provider in registry:
                raise ValueError(f"Duplicate backend for provider {backend.provider.value}")
            registry[backend.provider] = backend
        missing = set(SpeechProvider) - set(registry)
        if missing:
            names = ", ".join(sorted(provider.value for provider in missing))
            raise ValueError(f"No synthesis backend registered for: {names}")
        self._backends = registry

    async def synthesize(self, text: str, profile: VoiceProfile) -> SynthesizedSpeech:
        backend = self._backends.get(profile.provider)
        if backend is None:
            raise UnknownProviderError(f"Unknown TTS service specified: {profile.provider!r}")

        try:
            return await backend.synthesize(text, profile)
        except SynthesisConfigError as exc:
            logger.error("TTS configuration error: %s", exc)
            raise SynthesisConfigFailedError(
                f"TTS service configuration error: {exc}"
            ) from exc
        except SynthesisError as exc:
            logger.error("TTS synthesis failed provider=%s: %s", profile.provider.value, exc)
            raise SynthesisFailedError(str(exc), status_code=exc.status_code) from exc


__all__ = ["SpeechSynthesizer"]
