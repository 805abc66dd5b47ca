"""Stage-level errors raised inside the compliance pipeline.

The orchestrator catches :class:`StageError` subclasses per stage and records
the stage as absent; they never escape a run.
"""

from __future__ import annotations


class StageError(RuntimeError):
    """Base class for recoverable stage failures."""

    stage = "unknown"


class VisualAnalysisError(StageError):
    """Vision capability unavailable or its response unusable."""

    stage = "visual"


class TranscriptionServiceError(StageError):
    """Transcription capability reported an error or could not be reached."""

    stage = "transcription"


class TranscriptionTimeoutError(TranscriptionServiceError):
    """Job did not reach a terminal state within the attempt ceiling."""


class ComplianceCheckError(StageError):
    """Language capability could not be reached for the vocabulary check."""

    stage = "compliance"


__all__ = [
    "ComplianceCheckError",
    "StageError",
    "TranscriptionServiceError",
    "TranscriptionTimeoutError",
    "VisualAnalysisError",
]
