"""Pydantic schemas used as views."""

from .voice import (
    VoiceErrorResponse,
    VoiceInfo,
    VoiceProcessResponse,
    render_rejection,
    render_result,
)

__all__ = [
    "VoiceErrorResponse",
    "VoiceInfo",
    "VoiceProcessResponse",
    "render_rejection",
    "render_result",
]
