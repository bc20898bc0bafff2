"""Thin Gemini client wrapper for single-turn text generation."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from voice_gateway.config.settings import settings

logger = logging.getLogger(__name__)


class LlmInvocationError(RuntimeError):
    """Raised when the Gemini invocation fails or answers malformed content."""


class LlmConfigurationError(LlmInvocationError):
    """Raised when the Gemini client is missing its credentials."""


def _extract_text(payload: Any) -> str | None:
    """Return the first candidate's text, ``None`` when there are no candidates."""

    if not isinstance(payload, dict):
        raise LlmInvocationError("Gemini returned a non-object payload.")
    candidates = payload.get("candidates")
    if not candidates:
        return None
    try:
        text = candidates[0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise LlmInvocationError(f"Gemini candidate missing text content: {exc}") from exc
    if not isinstance(text, str):
        raise LlmInvocationError(f"Gemini candidate text is {type(text).__name__}, not str.")
    return text


class GeminiLlmClient:
    """Invoke Gemini ``generateContent`` with standard configuration."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if api_key is None and settings.gemini.api_key is not None:
            api_key = settings.gemini.api_key.get_secret_value()
        self._api_key = api_key
        self._model = model or settings.gemini.model
        self._base_url = (base_url or settings.gemini.base_url).rstrip("/")
        self._timeout = timeout or settings.gemini.timeout_seconds
        self._transport = transport

    async def invoke(self, prompt: str) -> str | None:
        """Send ``prompt`` as a single user turn and return the reply text."""

        if not self._api_key:
            raise LlmConfigurationError("GEMINI_API_KEY is not set.")

        url = f"{self._base_url}/models/{self._model}:generateContent"
        payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    url,
                    params={"key": self._api_key},
                    json=payload,
                )
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPError as exc:
            raise LlmInvocationError(f"Gemini request failed: {exc}") from exc
        except ValueError as exc:
            raise LlmInvocationError(f"Gemini returned invalid JSON: {exc}") from exc

        text = _extract_text(body)
        if text is None:
            logger.info("Gemini returned no candidates: %s", body)
            return None
        return text.strip() or None


__all__ = ["GeminiLlmClient", "LlmConfigurationError", "LlmInvocationError"]
