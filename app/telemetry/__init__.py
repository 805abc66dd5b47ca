"""Telemetry helpers and metrics."""

from .metrics import (
    ERROR_COUNTER,
    PIPELINE_DURATION,
    PIPELINE_RUNS,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    STAGE_FAILURES,
    TRANSCRIPTION_POLLS,
    increment_stage_failure,
    increment_transcription_poll,
    observe_pipeline_run,
    observe_request,
)

__all__ = [
    "ERROR_COUNTER",
    "PIPELINE_DURATION",
    "PIPELINE_RUNS",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "STAGE_FAILURES",
    "TRANSCRIPTION_POLLS",
    "increment_stage_failure",
    "increment_transcription_poll",
    "observe_pipeline_run",
    "observe_request",
]
