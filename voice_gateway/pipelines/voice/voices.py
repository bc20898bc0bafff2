"""Voice resolution stage (Stage 04) of the voice pipeline.

Resolution is a cascade: direct table match, then translation into the
default language with that language's voice, then one hardcoded profile.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Final, Mapping

from pydantic import TypeAdapter

from voice_gateway.config.settings import settings
from voice_gateway.services.translate import TranslateService, TranslationError
from voice_gateway.services.tts import SpeechProvider, VoiceProfile
from voice_gateway.telemetry import record_local_fallback, record_voice_resolution

from .types import ResolutionOutcome, VoiceResolution

logger = logging.getLogger("voice_gateway.pipeline")

_RESOURCE_ROOT = Path(__file__).resolve().parents[2] / "resources"
DEFAULT_VOICE_TABLE_PATH: Final[Path] = _RESOURCE_ROOT / "voices.json"

TRANSLATION_FALLBACK_TEXT: Final[str] = "I couldn't translate the message for voice output."

LAST_RESORT_PROFILE: Final[VoiceProfile] = VoiceProfile(
    provider=SpeechProvider.POLLY,
    voice_id="Joanna",
    engine="neural",
    language_code="en-US",
)

_TABLE_ADAPTER = TypeAdapter(dict[str, VoiceProfile])


def load_voice_table(path: Path | None = None) -> Mapping[str, VoiceProfile]:
    """Load and validate the language-to-voice table as a read-only mapping."""

    table_path = path or settings.voice.voice_table_path or DEFAULT_VOICE_TABLE_PATH
    with Path(table_path).open("r", encoding="utf-8") as table_file:
        raw = json.load(table_file)
    table = _TABLE_ADAPTER.validate_python(raw)
    logger.info("Loaded %s voice profiles from %s", len(table), table_path)
    return MappingProxyType(table)


def base_language(language_code: str) -> str:
    """``en-US`` -> ``en``."""

    return language_code.split("-", 1)[0].lower()


class VoiceResolver:
    """Pick the synthesis profile and the final text to speak."""

    def __init__(
        self,
        translator: TranslateService,
        *,
        table: Mapping[str, VoiceProfile] | None = None,
        default_language: str | None = None,
        last_resort: VoiceProfile = LAST_RESORT_PROFILE,
    ) -> None:
        self._translator = translator
        self._table = table if table is not None else load_voice_table()
        self._default_language = default_language or settings.voice.default_language
        self._last_resort = last_resort

    @property
    def default_language(self) -> str:
        return self._default_language

    async def resolve(self, language_code: str, reply_text: str) -> VoiceResolution:
        profile = self._table.get(language_code)
        if profile is not None:
            record_voice_resolution(ResolutionOutcome.DIRECT.value)
            return VoiceResolution(
                profile=profile,
                spoken_text=reply_text,
                outcome=ResolutionOutcome.DIRECT,
            )

        logger.info(
            "No direct voice for %s; falling back to %s",
            language_code,
            self._default_language,
        )
        spoken_text, attempted = await self._translate_to_default(language_code, reply_text)

        profile = self._table.get(self._default_language)
        outcome = ResolutionOutcome.TRANSLATED if attempted else ResolutionOutcome.DEFAULT_VOICE
        if profile is None:
            logger.error(
                "No voice for default language %s; using last-resort voice %s",
                self._default_language,
                self._last_resort.voice_id,
            )
            profile = self._last_resort
            outcome = ResolutionOutcome.LAST_RESORT

        record_voice_resolution(outcome.value)
        return VoiceResolution(
            profile=profile,
            spoken_text=spoken_text,
            outcome=outcome,
            translation_attempted=attempted,
        )

    async def _translate_to_default(self, language_code: str, text: str) -> tuple[str, bool]:
        source = base_language(language_code)
        target = base_language(self._default_language)
        if source == target:
            logger.info("Detected language shares base %s with default; no translation", source)
            return text, False

        try:
            translated = await self._translator.translate(text, source, target)
        except TranslationError as exc:
            logger.warning("Translation %s->%s failed: %s", source, target, exc)
            record_local_fallback("translation")
            return TRANSLATION_FALLBACK_TEXT, True

        logger.info("Translated reply %s->%s for fallback voice", source, target)
        return translated, True


__all__ = [
    "DEFAULT_VOICE_TABLE_PATH",
    "LAST_RESORT_PROFILE",
    "TRANSLATION_FALLBACK_TEXT",
    "VoiceResolver",
    "base_language",
    "load_voice_table",
]
