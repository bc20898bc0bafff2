"""Shared fakes for the voice pipeline tests.

Every fake records its calls so tests can assert which external services
were (or were not) contacted.
"""

from __future__ import annotations

import json
from pathlib import Path
import sys
from typing import Any, Callable, Sequence

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from voice_gateway.pipelines.voice import (  # noqa: E402
    ReplyGenerator,
    SpeechSynthesizer,
    TranscriptionJobManager,
    VoicePipeline,
    VoiceResolver,
    load_voice_table,
)
from voice_gateway.services import (  # noqa: E402
    SpeechBackend,
    SpeechProvider,
    StorageError,
    SynthesizedSpeech,
    TranscriptionJobSnapshot,
    TranslationError,
    VoiceProfile,
)


class FakeStorage:
    bucket = "test-bucket"

    def __init__(self, *, fail_put: bool = False, fail_delete: bool = False) -> None:
        self.objects: dict[str, bytes] = {}
        self.puts: list[str] = []
        self.deletes: list[str] = []
        self.fail_put = fail_put
        self.fail_delete = fail_delete

    def object_uri(self, key: str) -> str:
        return f"s3://{self.bucket}/{key}"

    async def put(self, key: str, data: bytes, *, content_type: str = "audio/mpeg") -> str:
        if self.fail_put:
            raise StorageError("bucket unavailable")
        self.puts.append(key)
        self.objects[key] = data
        return self.object_uri(key)

    async def get(self, key: str) -> bytes:
        if key not in self.objects:
            raise StorageError(f"NoSuchKey: {key}")
        return self.objects[key]

    async def delete(self, key: str) -> None:
        self.deletes.append(key)
        if self.fail_delete:
            raise StorageError("AccessDenied")
        self.objects.pop(key, None)


def transcript_document(text: str) -> dict[str, Any]:
    return {"results": {"transcripts": [{"transcript": text}]}}


class FakeTranscribeService:
    """Replays ``statuses`` one per status call, repeating the last one forever."""

    def __init__(
        self,
        storage: FakeStorage,
        *,
        statuses: Sequence[str] = ("COMPLETED",),
        transcript: str = "Hello",
        language_code: str | None = "en-US",
        failure_reason: str | None = "Unsupported media",
        write_artifact: bool = True,
    ) -> None:
        self.storage = storage
        self.statuses = list(statuses)
        self.transcript = transcript
        self.language_code = language_code
        self.failure_reason = failure_reason
        self.write_artifact = write_artifact
        self.started: list[dict[str, Any]] = []
        self.status_calls = 0
        self.fetched: list[str] = []

    async def start_job(self, **kwargs: Any) -> None:
        self.started.append(kwargs)
        if self.write_artifact:
            self.storage.objects[kwargs["output_key"]] = json.dumps(
                transcript_document(self.transcript)
            ).encode("utf-8")

    async def get_job(self, job_name: str) -> TranscriptionJobSnapshot:
        status = self.statuses[min(self.status_calls, len(self.statuses) - 1)]
        self.status_calls += 1
        if status == "COMPLETED":
            return TranscriptionJobSnapshot(
                job_name=job_name,
                status=status,
                language_code=self.language_code,
                transcript_uri=f"https://s3.amazonaws.com/test-bucket/{job_name}.json",
            )
        if status == "FAILED":
            return TranscriptionJobSnapshot(
                job_name=job_name,
                status=status,
                failure_reason=self.failure_reason,
            )
        return TranscriptionJobSnapshot(job_name=job_name, status=status)

    async def fetch_transcript_document(self, transcript_uri: str) -> dict[str, Any]:
        self.fetched.append(transcript_uri)
        return transcript_document(self.transcript)


class FakeLlmClient:
    def __init__(self, reply: str | None | Exception = "Namaste! How can I help?") -> None:
        self.reply = reply
        self.prompts: list[str] = []

    async def invoke(self, prompt: str) -> str | None:
        self.prompts.append(prompt)
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


class FakeTranslator:
    def __init__(self, *, result: str = "translated text", fail: bool = False) -> None:
        self.result = result
        self.fail = fail
        self.calls: list[tuple[str, str, str]] = []

    async def translate(self, text: str, source_language: str, target_language: str) -> str:
        self.calls.append((text, source_language, target_language))
        if self.fail:
            raise TranslationError("Translate unavailable")
        return self.result


class FakeSpeechBackend(SpeechBackend):
    def __init__(self, provider: SpeechProvider, *, error: Exception | None = None) -> None:
        self.provider = provider
        self.error = error
        self.calls: list[tuple[str, VoiceProfile]] = []

    async def synthesize(self, text: str, profile: VoiceProfile) -> SynthesizedSpeech:
        self.calls.append((text, profile))
        if self.error is not None:
            raise self.error
        return SynthesizedSpeech(
            audio_bytes=f"{self.provider.value}:{profile.voice_id}".encode("utf-8"),
            media_type="audio/mpeg",
            provider=self.provider,
            voice_id=profile.voice_id,
        )


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class PipelineHarness:
    """A real :class:`VoicePipeline` wired to fakes, with handles on each fake."""

    def __init__(
        self,
        *,
        storage: FakeStorage | None = None,
        statuses: Sequence[str] = ("COMPLETED",),
        transcript: str = "Hello",
        language_code: str | None = "en-US",
        llm_reply: str | None | Exception = "Namaste! How can I help?",
        translator: FakeTranslator | None = None,
        table: dict[str, VoiceProfile] | None = None,
        default_language: str = "hi-IN",
        polly_error: Exception | None = None,
        elevenlabs_error: Exception | None = None,
        sleep: Callable[[float], Any] | None = None,
    ) -> None:
        self.storage = storage or FakeStorage()
        self.transcribe = FakeTranscribeService(
            self.storage,
            statuses=statuses,
            transcript=transcript,
            language_code=language_code,
        )
        self.sleep = sleep or SleepRecorder()
        self.llm = FakeLlmClient(llm_reply)
        self.translator = translator or FakeTranslator()
        self.table = table if table is not None else dict(load_voice_table())
        self.polly = FakeSpeechBackend(SpeechProvider.POLLY, error=polly_error)
        self.elevenlabs = FakeSpeechBackend(SpeechProvider.ELEVENLABS, error=elevenlabs_error)
        self.pipeline = VoicePipeline(
            storage=self.storage,
            transcriber=TranscriptionJobManager(
                self.transcribe,
                self.storage,
                poll_interval=5.0,
                max_attempts=120,
                default_language=default_language,
                sleep=self.sleep,
            ),
            replier=ReplyGenerator(self.llm, persona="Be a helpful expert."),
            resolver=VoiceResolver(
                self.translator,
                table=self.table,
                default_language=default_language,
            ),
            synthesizer=SpeechSynthesizer([self.polly, self.elevenlabs]),
        )

    @property
    def synthesis_calls(self) -> int:
        return len(self.polly.calls) + len(self.elevenlabs.calls)


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def voice_table() -> dict[str, VoiceProfile]:
    return dict(load_voice_table())
