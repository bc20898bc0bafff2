"""Speech synthesis backends: Amazon Polly and ElevenLabs."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Optional

import httpx
from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ConfigDict

from voice_gateway.config.settings import settings
from voice_gateway.services.aws import create_boto3_client

logger = logging.getLogger(__name__)


class SpeechProvider(str, Enum):
    """Closed set of synthesis vendors."""

    POLLY = "polly"
    ELEVENLABS = "elevenlabs"


class VoiceProfile(BaseModel):
    """Provider, voice identity, engine and language for one synthesis target."""

    provider: SpeechProvider
    voice_id: str
    language_code: str
    engine: Optional[str] = None

    model_config = ConfigDict(frozen=True, use_enum_values=False)


@dataclass(frozen=True)
class SynthesizedSpeech:
    """Raw audio returned by a backend."""

    audio_bytes: bytes
    media_type: str
    provider: SpeechProvider
    voice_id: str


class SynthesisConfigError(RuntimeError):
    """Raised when a backend is missing configuration such as an API key."""


class SynthesisError(RuntimeError):
    """Raised when a backend call fails."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SpeechBackend(ABC):
    """One synthesis vendor."""

    provider: ClassVar[SpeechProvider]

    @abstractmethod
    async def synthesize(self, text: str, profile: VoiceProfile) -> SynthesizedSpeech:
        """Return audio for ``text`` spoken with ``profile``."""


class PollySpeechBackend(SpeechBackend):
    """Amazon Polly backend returning MP3 bytes."""

    provider = SpeechProvider.POLLY

    def __init__(self, *, client: Any | None = None, output_format: str | None = None) -> None:
        self._client = client or create_boto3_client("polly", region_name=settings.polly.region)
        self._output_format = output_format or settings.polly.output_format

    async def synthesize(self, text: str, profile: VoiceProfile) -> SynthesizedSpeech:
        engine = profile.engine or "standard"
        logger.info(
            "Synthesizing with Polly voice=%s lang=%s engine=%s",
            profile.voice_id,
            profile.language_code,
            engine,
        )
        try:
            response: dict[str, Any] = await run_in_threadpool(
                self._client.synthesize_speech,
                Text=text,
                OutputFormat=self._output_format,
                VoiceId=profile.voice_id,
                LanguageCode=profile.language_code,
                Engine=engine,
            )
            audio_stream = response.get("AudioStream")
            if audio_stream is None:
                raise SynthesisError("Polly returned no audio stream.")
            audio_bytes = await run_in_threadpool(audio_stream.read)
        except ClientError as exc:
            status_code = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            raise SynthesisError(
                f"Polly synthesis failed: {exc}", status_code=status_code
            ) from exc
        except BotoCoreError as exc:
            raise SynthesisError(f"Polly synthesis failed: {exc}") from exc

        if not audio_bytes:
            raise SynthesisError("Polly returned an empty audio stream.")
        return SynthesizedSpeech(
            audio_bytes=audio_bytes,
            media_type="audio/mpeg",
            provider=self.provider,
            voice_id=profile.voice_id,
        )


class ElevenLabsSpeechBackend(SpeechBackend):
    """ElevenLabs backend over its keyed HTTP API."""

    provider = SpeechProvider.ELEVENLABS

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        model_id: str | None = None,
        stability: float | None = None,
        similarity_boost: float | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        config = settings.elevenlabs
        if api_key is None and config.api_key is not None:
            api_key = config.api_key.get_secret_value()
        self._api_key = api_key
        self._base_url = (base_url or config.base_url).rstrip("/")
        self._model_id = model_id or config.model_id
        self._voice_settings = {
            "stability": config.stability if stability is None else stability,
            "similarity_boost": (
                config.similarity_boost if similarity_boost is None else similarity_boost
            ),
        }
        self._timeout = timeout or config.timeout_seconds
        self._transport = transport

    async def synthesize(self, text: str, profile: VoiceProfile) -> SynthesizedSpeech:
        if not self._api_key:
            raise SynthesisConfigError("ELEVENLABS_API_KEY is not set for ElevenLabs.")

        model_id = profile.engine or self._model_id
        logger.info(
            "Synthesizing with ElevenLabs voice=%s model=%s", profile.voice_id, model_id
        )
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self._base_url}/text-to-speech/{profile.voice_id}",
                    headers={
                        "Content-Type": "application/json",
                        "xi-api-key": self._api_key,
                    },
                    json={
                        "text": text,
                        "model_id": model_id,
                        "voice_settings": self._voice_settings,
                    },
                )
                response.raise_for_status()
                audio_bytes = response.content
        except httpx.HTTPStatusError as exc:
            logger.error(
                "ElevenLabs error status=%s body=%s",
                exc.response.status_code,
                exc.response.text[:500],
            )
            raise SynthesisError(
                f"External TTS API error: {exc.response.reason_phrase}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise SynthesisError(f"ElevenLabs request failed: {exc}") from exc

        if not audio_bytes:
            raise SynthesisError("ElevenLabs returned an empty body.")
        return SynthesizedSpeech(
            audio_bytes=audio_bytes,
            media_type=response.headers.get("content-type", "audio/mpeg"),
            provider=self.provider,
            voice_id=profile.voice_id,
        )


__all__ = [
    "ElevenLabsSpeechBackend",
    "PollySpeechBackend",
    "SpeechBackend",
    "SpeechProvider",
    "SynthesisConfigError",
    "SynthesisError",
    "SynthesizedSpeech",
    "VoiceProfile",
]
