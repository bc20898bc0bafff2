"""Telemetry helpers and metrics."""

from .metrics import (
    CLEANUP_FAILURES,
    ERROR_COUNTER,
    LOCAL_FALLBACKS,
    PIPELINE_RUNS,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    TRANSCRIPTION_STATUS_CHECKS,
    VOICE_RESOLUTIONS,
    observe_request,
    record_cleanup_failure,
    record_local_fallback,
    record_pipeline_run,
    record_status_checks,
    record_voice_resolution,
)

__all__ = [
    "CLEANUP_FAILURES",
    "ERROR_COUNTER",
    "LOCAL_FALLBACKS",
    "PIPELINE_RUNS",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "TRANSCRIPTION_STATUS_CHECKS",
    "VOICE_RESOLUTIONS",
    "observe_request",
    "record_cleanup_failure",
    "record_local_fallback",
    "record_pipeline_run",
    "record_status_checks",
    "record_voice_resolution",
]
