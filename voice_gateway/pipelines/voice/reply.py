"""Reply generation stage (Stage 03) of the voice pipeline."""

from __future__ import annotations

import logging
from typing import Final

from voice_gateway.config.settings import settings
from voice_gateway.services.llm_client import (
    GeminiLlmClient,
    LlmConfigurationError,
    LlmInvocationError,
)
from voice_gateway.telemetry import record_local_fallback

logger = logging.getLogger("voice_gateway.pipeline")

LLM_FALLBACK_TEXT: Final[str] = "I'm sorry, I couldn't generate a response at this time."


def build_reply_prompt(transcript: str, language_code: str, persona: str) -> str:
    """Single-turn prompt asking for an answer in the caller's own language."""

    return (
        f"The farmer said: '{transcript}'. "
        f"{persona.strip()} "
        "**Respond in the same language as the farmer's query, "
        f"which was detected as {language_code}.**"
    )


class ReplyGenerator:
    """Ask the hosted model for a reply; never fails the pipeline."""

    def __init__(self, client: GeminiLlmClient, *, persona: str | None = None) -> None:
        self._client = client
        self._persona = persona or settings.voice.persona

    async def generate(self, transcript: str, language_code: str) -> str:
        prompt = build_reply_prompt(transcript, language_code, self._persona)
        try:
            reply = await self._client.invoke(prompt)
        except LlmConfigurationError as exc:
            logger.warning("LLM misconfigured, using fallback reply: %s", exc)
            record_local_fallback("llm")
            return LLM_FALLBACK_TEXT
        except LlmInvocationError as exc:
            logger.warning("LLM call failed, using fallback reply: %s", exc)
            record_local_fallback("llm")
            return LLM_FALLBACK_TEXT

        if not reply:
            logger.warning("LLM returned no usable content, using fallback reply")
            record_local_fallback("llm")
            return LLM_FALLBACK_TEXT

        logger.info("LLM reply (%s chars) language=%s", len(reply), language_code)
        return reply


__all__ = ["LLM_FALLBACK_TEXT", "ReplyGenerator", "build_reply_prompt"]
