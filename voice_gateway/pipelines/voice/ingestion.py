"""Request ingestion helpers (Stage 01 of the voice pipeline)."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any, Final, Mapping
from uuid import uuid4

from voice_gateway.config.settings import settings
from voice_gateway.services.storage import S3ObjectStorage, StorageError

from .errors import InvalidInputError, StorageUploadFailedError
from .types import StoredAudioRef, VoiceRequest

logger = logging.getLogger("voice_gateway.pipeline")

AUDIO_FIELD: Final[str] = "audio_data"
MEDIA_FORMAT: Final[str] = "mp3"
MEDIA_CONTENT_TYPE: Final[str] = "audio/mpeg"


def decode_request_body(raw_body: bytes | str | None, *, is_base64_encoded: bool) -> dict[str, Any]:
    """Turn a raw (optionally base64-wrapped) body into a JSON object."""

    if not raw_body:
        raise InvalidInputError("Received an empty request body.")

    try:
        if is_base64_encoded:
            raw_body = base64.b64decode(raw_body, validate=True)
        text = raw_body.decode("utf-8") if isinstance(raw_body, bytes) else raw_body
    except (binascii.Error, ValueError) as exc:
        raise InvalidInputError(f"Failed to decode request body: {exc}") from exc

    try:
        body = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("JSON body rejected (first 200 chars): %s", text[:200])
        raise InvalidInputError(f"Failed to parse JSON body: {exc}") from exc

    if not isinstance(body, dict):
        raise InvalidInputError("Request body must be a JSON object.")
    return body


def decode_audio_payload(audio_data: Any) -> bytes:
    """Decode the base64 ``audio_data`` field, rejecting empty payloads."""

    if not audio_data:
        raise InvalidInputError(f"Missing {AUDIO_FIELD} in request body")
    if not isinstance(audio_data, str):
        raise InvalidInputError(f"{AUDIO_FIELD} must be a base64 string")
    try:
        audio_bytes = base64.b64decode(audio_data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidInputError(f"{AUDIO_FIELD} is not valid base64: {exc}") from exc
    if not audio_bytes:
        raise InvalidInputError(f"{AUDIO_FIELD} decoded to an empty payload")
    return audio_bytes


def build_voice_request(body: Mapping[str, Any], *, request_id: str | None = None) -> VoiceRequest:
    """Extract the audio from a decoded body into a :class:`VoiceRequest`."""

    audio_bytes = decode_audio_payload(body.get(AUDIO_FIELD))
    return VoiceRequest(
        audio_bytes=audio_bytes,
        request_id=request_id or uuid4().hex,
        media_format=MEDIA_FORMAT,
    )


async def upload_audio(
    storage: S3ObjectStorage,
    request: VoiceRequest,
    *,
    prefix: str | None = None,
) -> StoredAudioRef:
    """Persist the request audio under a fresh unique key."""

    if not request.audio_bytes:
        raise InvalidInputError("Audio payload is empty.")

    key_prefix = (prefix or settings.s3.audio_prefix).strip("/")
    key = f"{key_prefix}/{uuid4()}.{request.media_format}"
    try:
        uri = await storage.put(key, request.audio_bytes, content_type=MEDIA_CONTENT_TYPE)
    except StorageError as exc:
        logger.error("Audio upload failed request=%s: %s", request.request_id, exc)
        raise StorageUploadFailedError(f"Failed to upload audio to S3: {exc}") from exc

    logger.info("Audio uploaded request=%s uri=%s", request.request_id, uri)
    return StoredAudioRef(key=key, uri=uri)


__all__ = [
    "AUDIO_FIELD",
    "build_voice_request",
    "decode_audio_payload",
    "decode_request_body",
    "upload_audio",
]
