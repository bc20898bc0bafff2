"""Tests for reply generation and the Gemini client."""

from __future__ import annotations

import json

import httpx
import pytest

from conftest import FakeLlmClient
from voice_gateway.pipelines.voice import LLM_FALLBACK_TEXT, ReplyGenerator, build_reply_prompt
from voice_gateway.services import GeminiLlmClient, LlmConfigurationError, LlmInvocationError


def _gemini(handler, *, api_key: str = "test-key") -> GeminiLlmClient:
    return GeminiLlmClient(
        api_key=api_key,
        model="gemini-2.0-flash",
        base_url="https://gemini.test/v1beta",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


def _candidate(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def test_prompt_names_transcript_and_language() -> None:
    prompt = build_reply_prompt("When should I sow wheat?", "hi-IN", "Be a local expert.")

    assert "When should I sow wheat?" in prompt
    assert "Be a local expert." in prompt
    assert "detected as hi-IN" in prompt


@pytest.mark.asyncio
async def test_generator_returns_model_reply() -> None:
    client = FakeLlmClient("Sow wheat in November.")
    generator = ReplyGenerator(client, persona="Be brief.")

    reply = await generator.generate("When should I sow wheat?", "en-IN")

    assert reply == "Sow wheat in November."
    (prompt,) = client.prompts
    assert "When should I sow wheat?" in prompt
    assert "en-IN" in prompt


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "outcome",
    [
        None,
        "",
        LlmInvocationError("Gemini request failed: 503"),
        LlmConfigurationError("GEMINI_API_KEY is not set."),
    ],
)
async def test_generator_falls_back(outcome) -> None:
    generator = ReplyGenerator(FakeLlmClient(outcome), persona="Be brief.")

    assert await generator.generate("Hello", "en-US") == LLM_FALLBACK_TEXT


@pytest.mark.asyncio
async def test_gemini_posts_single_user_turn() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_candidate("  Namaste!  "))

    reply = await _gemini(handler).invoke("Say hello")

    assert reply == "Namaste!"
    (request,) = seen
    assert request.method == "POST"
    assert request.url.path == "/v1beta/models/gemini-2.0-flash:generateContent"
    assert request.url.params["key"] == "test-key"
    body = json.loads(request.content)
    assert body == {"contents": [{"role": "user", "parts": [{"text": "Say hello"}]}]}


@pytest.mark.asyncio
async def test_gemini_without_candidates_returns_none() -> None:
    reply = await _gemini(lambda request: httpx.Response(200, json={"candidates": []})).invoke("hi")

    assert reply is None


@pytest.mark.asyncio
async def test_gemini_without_key_is_a_configuration_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected without a key")

    with pytest.raises(LlmConfigurationError):
        await _gemini(handler, api_key="").invoke("hi")


@pytest.mark.asyncio
async def test_gemini_http_error_raises() -> None:
    client = _gemini(lambda request: httpx.Response(503, json={"error": "overloaded"}))

    with pytest.raises(LlmInvocationError):
        await client.invoke("hi")


@pytest.mark.asyncio
async def test_non_string_candidate_text_falls_back() -> None:
    client = _gemini(
        lambda request: httpx.Response(
            200, json={"candidates": [{"content": {"parts": [{"text": 5}]}}]}
        )
    )

    with pytest.raises(LlmInvocationError):
        await client.invoke("hi")
    assert await ReplyGenerator(client, persona="Be brief.").generate("Hello", "en-US") == (
        LLM_FALLBACK_TEXT
    )


@pytest.mark.asyncio
async def test_gemini_malformed_candidate_raises() -> None:
    client = _gemini(lambda request: httpx.Response(200, json={"candidates": [{"content": {}}]}))

    with pytest.raises(LlmInvocationError):
        await client.invoke("hi")
