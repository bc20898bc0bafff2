"""Tests for the API Gateway proxy entry point."""

from __future__ import annotations

import base64
import json
from types import SimpleNamespace

import pytest

from conftest import PipelineHarness
from voice_gateway import lambda_handler as handler_module
from voice_gateway.lambda_handler import lambda_handler

CONTEXT = SimpleNamespace(aws_request_id="lambda-req-1")
AUDIO_B64 = base64.b64encode(b"ID3-question").decode("ascii")


@pytest.fixture
def harness(monkeypatch: pytest.MonkeyPatch) -> PipelineHarness:
    harness = PipelineHarness()
    monkeypatch.setattr(handler_module, "get_voice_pipeline", lambda: harness.pipeline)
    return harness


def test_post_runs_pipeline(harness: PipelineHarness) -> None:
    event = {"httpMethod": "POST", "body": json.dumps({"audio_data": AUDIO_B64})}

    response = lambda_handler(event, CONTEXT)

    assert response["statusCode"] == 200
    assert response["headers"]["Access-Control-Allow-Origin"] == "*"
    body = json.loads(response["body"])
    assert body["transcribed_text"] == "Hello"
    assert body["voice"]["voice_id"] == "Joanna"
    assert len(harness.storage.deletes) == 2


def test_post_with_base64_encoded_body(harness: PipelineHarness) -> None:
    raw = json.dumps({"audio_data": AUDIO_B64}).encode("utf-8")
    event = {
        "httpMethod": "POST",
        "isBase64Encoded": True,
        "body": base64.b64encode(raw).decode("ascii"),
    }

    response = lambda_handler(event, CONTEXT)

    assert response["statusCode"] == 200


def test_post_without_audio_is_rejected(harness: PipelineHarness) -> None:
    response = lambda_handler({"httpMethod": "POST", "body": "{}"}, CONTEXT)

    assert response["statusCode"] == 400
    assert json.loads(response["body"])["error"] == "InvalidInput"
    assert "Access-Control-Allow-Origin" not in response["headers"]
    assert harness.storage.puts == []


def test_pipeline_error_is_returned_without_cors(monkeypatch: pytest.MonkeyPatch) -> None:
    failing = PipelineHarness(statuses=("FAILED",))
    monkeypatch.setattr(handler_module, "get_voice_pipeline", lambda: failing.pipeline)
    event = {"httpMethod": "POST", "body": json.dumps({"audio_data": AUDIO_B64})}

    response = lambda_handler(event, CONTEXT)

    assert response["statusCode"] == 500
    body = json.loads(response["body"])
    assert body["error"] == "TranscriptionFailed"
    assert body["stage"] == "transcription"
    assert "Access-Control-Allow-Origin" not in response["headers"]


def test_unexpected_error_returns_json_500(monkeypatch: pytest.MonkeyPatch) -> None:
    class ExplodingPipeline:
        async def run(self, request):
            raise AttributeError("boom")

    monkeypatch.setattr(handler_module, "get_voice_pipeline", lambda: ExplodingPipeline())
    event = {"httpMethod": "POST", "body": json.dumps({"audio_data": AUDIO_B64})}

    response = lambda_handler(event, CONTEXT)

    assert response["statusCode"] == 500
    assert response["headers"]["Content-Type"] == "application/json"
    assert json.loads(response["body"]) == {"message": "Internal server error"}


def test_get_echoes_challenge() -> None:
    event = {
        "httpMethod": "GET",
        "queryStringParameters": {"hub.mode": "subscribe", "hub.challenge": "abc123"},
    }

    response = lambda_handler(event, CONTEXT)

    assert response == {
        "statusCode": 200,
        "headers": {"Content-Type": "text/plain"},
        "body": "abc123",
    }


def test_get_without_parameters_is_forbidden() -> None:
    response = lambda_handler({"httpMethod": "GET", "queryStringParameters": None}, CONTEXT)

    assert response["statusCode"] == 403


def test_other_methods_are_rejected() -> None:
    response = lambda_handler({"httpMethod": "DELETE"}, CONTEXT)

    assert response["statusCode"] == 405
    assert json.loads(response["body"]) == {"message": "Method Not Allowed"}
