"""Voice processing endpoints.

``POST /process-voice`` decodes the request, runs the full pipeline and
returns either the synthesized answer or a stage-tagged error envelope.
``GET /process-voice`` answers webhook verification challenges.
"""

from __future__ import annotations

import hmac
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from voice_gateway.config.settings import settings
from voice_gateway.controllers.dependencies import VoicePipelineDep
from voice_gateway.pipelines.voice import (
    InvalidInputError,
    build_voice_request,
    decode_request_body,
)
from voice_gateway.views import render_rejection, render_result

router = APIRouter(tags=["voice"])

logger = logging.getLogger(__name__)


def webhook_challenge(
    mode: Optional[str],
    token: Optional[str],
    challenge: Optional[str],
) -> Optional[str]:
    """Return the challenge to echo back, or ``None`` if verification fails."""

    if mode != "subscribe" or not challenge:
        return None
    expected = settings.webhook.verify_token
    if expected is not None and not hmac.compare_digest(
        (token or "").encode("utf-8"),
        expected.get_secret_value().encode("utf-8"),
    ):
        return None
    return challenge


@router.get("/process-voice", response_class=PlainTextResponse)
async def verify_webhook(request: Request) -> PlainTextResponse:
    """Echo ``hub.challenge`` for a valid subscription handshake."""

    params = request.query_params
    challenge = webhook_challenge(
        params.get("hub.mode"),
        params.get("hub.verify_token"),
        params.get("hub.challenge"),
    )
    if challenge is None:
        logger.warning("Webhook verification failed: invalid mode or token.")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Verification failed",
        )
    logger.info("Webhook verification successful.")
    return PlainTextResponse(challenge)


@router.post("/process-voice")
async def process_voice(request: Request, pipeline: VoicePipelineDep) -> JSONResponse:
    """Transcribe the uploaded audio, answer it and return synthesized speech."""

    raw_body = await request.body()
    is_base64 = request.headers.get("content-transfer-encoding", "").lower() == "base64"
    try:
        body = decode_request_body(raw_body, is_base64_encoded=is_base64)
        voice_request = build_voice_request(
            body, request_id=getattr(request.state, "request_id", None)
        )
    except InvalidInputError as exc:
        logger.warning("Rejected voice request: %s", exc)
        status_code, content = render_rejection(exc.to_failure())
        return JSONResponse(status_code=status_code, content=content)

    result = await pipeline.run(voice_request)
    status_code, content = render_result(result)
    return JSONResponse(status_code=status_code, content=content)


__all__ = ["router", "webhook_challenge"]
