"""Tests for the voice resolution cascade and the voice table."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from conftest import FakeTranslator
from voice_gateway.pipelines.voice import (
    LAST_RESORT_PROFILE,
    TRANSLATION_FALLBACK_TEXT,
    ResolutionOutcome,
    VoiceResolver,
    base_language,
    load_voice_table,
)
from voice_gateway.services import SpeechProvider, VoiceProfile

REPLY = "Irrigate in the early morning."


def test_bundled_table_covers_identified_languages(voice_table) -> None:
    for code in ("hi-IN", "en-US", "en-IN", "ta-IN", "te-IN", "mr-IN", "bn-IN"):
        assert code in voice_table

    assert voice_table["hi-IN"].provider is SpeechProvider.POLLY
    assert voice_table["ta-IN"].provider is SpeechProvider.ELEVENLABS


def test_loaded_table_is_read_only() -> None:
    table = load_voice_table()

    with pytest.raises(TypeError):
        table["xx-XX"] = LAST_RESORT_PROFILE


def test_table_rejects_unknown_provider(tmp_path) -> None:
    path = tmp_path / "voices.json"
    path.write_text(
        json.dumps({"en-US": {"provider": "azure", "voice_id": "Jenny", "language_code": "en-US"}}),
        encoding="utf-8",
    )

    with pytest.raises(ValidationError):
        load_voice_table(path)


def test_base_language() -> None:
    assert base_language("en-US") == "en"
    assert base_language("hi-IN") == "hi"
    assert base_language("fr") == "fr"


@pytest.mark.asyncio
async def test_direct_match_for_every_table_entry(voice_table) -> None:
    translator = FakeTranslator()
    resolver = VoiceResolver(translator, table=voice_table, default_language="hi-IN")

    for code, profile in voice_table.items():
        resolution = await resolver.resolve(code, REPLY)
        assert resolution.profile == profile
        assert resolution.spoken_text == REPLY
        assert resolution.outcome is ResolutionOutcome.DIRECT

    assert translator.calls == []


@pytest.mark.asyncio
async def test_unmapped_language_translates_to_default(voice_table) -> None:
    translator = FakeTranslator(result="सुबह जल्दी सिंचाई करें।")
    resolver = VoiceResolver(translator, table=voice_table, default_language="hi-IN")

    resolution = await resolver.resolve("de-DE", REPLY)

    assert translator.calls == [(REPLY, "de", "hi")]
    assert resolution.profile == voice_table["hi-IN"]
    assert resolution.spoken_text == "सुबह जल्दी सिंचाई करें।"
    assert resolution.outcome is ResolutionOutcome.TRANSLATED
    assert resolution.translation_attempted


@pytest.mark.asyncio
async def test_same_base_language_skips_translation(voice_table) -> None:
    translator = FakeTranslator()
    resolver = VoiceResolver(translator, table=voice_table, default_language="en-US")

    resolution = await resolver.resolve("en-GB", REPLY)

    assert translator.calls == []
    assert resolution.spoken_text == REPLY
    assert resolution.profile == voice_table["en-US"]
    assert resolution.outcome is ResolutionOutcome.DEFAULT_VOICE
    assert not resolution.translation_attempted


@pytest.mark.asyncio
async def test_translation_failure_speaks_fixed_text(voice_table) -> None:
    translator = FakeTranslator(fail=True)
    resolver = VoiceResolver(translator, table=voice_table, default_language="hi-IN")

    resolution = await resolver.resolve("de-DE", REPLY)

    assert len(translator.calls) == 1
    assert resolution.spoken_text == TRANSLATION_FALLBACK_TEXT
    assert resolution.profile == voice_table["hi-IN"]


@pytest.mark.asyncio
async def test_missing_default_voice_uses_last_resort() -> None:
    table = {
        "en-IN": VoiceProfile(
            provider=SpeechProvider.POLLY,
            voice_id="Kajal",
            engine="neural",
            language_code="en-IN",
        )
    }
    translator = FakeTranslator()
    resolver = VoiceResolver(translator, table=table, default_language="hi-IN")

    resolution = await resolver.resolve("de-DE", REPLY)

    assert resolution.profile == LAST_RESORT_PROFILE
    assert resolution.profile.voice_id == "Joanna"
    assert resolution.outcome is ResolutionOutcome.LAST_RESORT
    assert resolution.spoken_text == "translated text"
