"""AWS Lambda entry point for API Gateway proxy integrations.

Routes proxy events onto the same pipeline and response shapes as the
FastAPI app so the gateway can be deployed either way.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Mapping

from voice_gateway.controllers.dependencies import get_voice_pipeline
from voice_gateway.controllers.voice import webhook_challenge
from voice_gateway.pipelines.voice import (
    InvalidInputError,
    build_voice_request,
    decode_request_body,
)
from voice_gateway.views import render_rejection, render_result

logger = logging.getLogger(__name__)

CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}


def _json_response(status_code: int, body: Mapping[str, Any], *, cors: bool = False) -> dict[str, Any]:
    headers = {"Content-Type": "application/json"}
    if cors:
        headers.update(CORS_HEADERS)
    return {
        "statusCode": status_code,
        "headers": headers,
        "body": json.dumps(body),
    }


def _verify(event: Mapping[str, Any]) -> dict[str, Any]:
    params = event.get("queryStringParameters") or {}
    challenge = webhook_challenge(
        params.get("hub.mode"),
        params.get("hub.verify_token"),
        params.get("hub.challenge"),
    )
    if challenge is None:
        logger.warning("Webhook verification failed: invalid mode or token.")
        return {"statusCode": 403, "body": "Verification failed"}
    return {
        "statusCode": 200,
        "headers": {"Content-Type": "text/plain"},
        "body": challenge,
    }


async def _process(event: Mapping[str, Any], request_id: str | None) -> dict[str, Any]:
    try:
        body = decode_request_body(
            event.get("body"),
            is_base64_encoded=bool(event.get("isBase64Encoded", False)),
        )
        voice_request = build_voice_request(body, request_id=request_id)
    except InvalidInputError as exc:
        logger.warning("Rejected voice request: %s", exc)
        status_code, content = render_rejection(exc.to_failure())
        return _json_response(status_code, content)

    result = await get_voice_pipeline().run(voice_request)
    status_code, content = render_result(result)
    return _json_response(status_code, content, cors=result.ok)


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    http_method = event.get("httpMethod")
    request_id = getattr(context, "aws_request_id", None)
    logger.info("Received %s request id=%s", http_method, request_id)

    try:
        if http_method == "GET":
            return _verify(event)
        if http_method == "POST":
            return asyncio.run(_process(event, request_id))
    except Exception:
        logger.exception("Unhandled error on %s request id=%s", http_method, request_id)
        return _json_response(500, {"message": "Internal server error"})

    logger.warning("Unsupported HTTP method: %s", http_method)
    return _json_response(405, {"message": "Method Not Allowed"})


__all__ = ["lambda_handler"]
