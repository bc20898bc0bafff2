"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "voice_gateway_http_requests_total",
    "HTTP requests by route and status",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "voice_gateway_http_request_duration_seconds",
    "HTTP request duration; a full voice run can approach the ten minute polling ceiling",
    ("method", "route"),
    buckets=(0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0, 600.0),
)

ERROR_COUNTER = Counter(
    "voice_gateway_http_5xx_total",
    "Requests answered with a 5xx status",
    ("method", "route"),
)

PIPELINE_RUNS = Counter(
    "voice_pipeline_runs_total",
    "Voice pipeline runs by outcome and the stage that ended them",
    ("outcome", "stage"),
)

TRANSCRIPTION_STATUS_CHECKS = Histogram(
    "transcription_status_checks",
    "Status checks issued per transcription job",
    buckets=(1, 2, 5, 10, 20, 40, 60, 90, 120),
)

VOICE_RESOLUTIONS = Counter(
    "voice_resolutions_total",
    "Voice profile resolutions by cascade outcome",
    ("outcome",),
)

LOCAL_FALLBACKS = Counter(
    "voice_local_fallbacks_total",
    "Failures absorbed with substitute text",
    ("component",),
)

CLEANUP_FAILURES = Counter(
    "voice_cleanup_failures_total",
    "Transient objects that could not be deleted",
)


def observe_request(method: str, route: str, status_code: int, duration_seconds: float) -> None:
    """Count and time one HTTP request; 5xx responses also bump the error counter."""

    labels = {"method": method or "UNKNOWN", "route": route or "unknown"}
    REQUEST_COUNT.labels(status=str(status_code), **labels).inc()
    REQUEST_LATENCY.labels(**labels).observe(max(duration_seconds, 0.0))
    if status_code >= 500:
        ERROR_COUNTER.labels(**labels).inc()


def record_pipeline_run(outcome: str, stage: str) -> None:
    PIPELINE_RUNS.labels(outcome=outcome, stage=stage).inc()


def record_status_checks(count: int) -> None:
    TRANSCRIPTION_STATUS_CHECKS.observe(count)


def record_voice_resolution(outcome: str) -> None:
    VOICE_RESOLUTIONS.labels(outcome=outcome).inc()


def record_local_fallback(component: str) -> None:
    LOCAL_FALLBACKS.labels(component=component).inc()


def record_cleanup_failure() -> None:
    CLEANUP_FAILURES.inc()
