"""Amazon Translate wrapper."""

from __future__ import annotations

from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from voice_gateway.config.settings import settings
from voice_gateway.services.aws import create_boto3_client


class TranslationError(RuntimeError):
    """Raised when Amazon Translate fails to translate text."""


class TranslateService:
    def __init__(self, *, client: Any | None = None) -> None:
        self._client = client or create_boto3_client(
            "translate", region_name=settings.translate.region
        )

    async def translate(self, text: str, source_language: str, target_language: str) -> str:
        """Translate ``text`` between two base language subtags (``en``, ``hi``...)."""

        try:
            response: dict[str, Any] = await run_in_threadpool(
                self._client.translate_text,
                Text=text,
                SourceLanguageCode=source_language,
                TargetLanguageCode=target_language,
            )
        except (BotoCoreError, ClientError) as exc:
            raise TranslationError(f"Translate call failed: {exc}") from exc

        translated = response.get("TranslatedText")
        if not translated:
            raise TranslationError("Translate returned no text.")
        return translated


__all__ = ["TranslateService", "TranslationError"]
