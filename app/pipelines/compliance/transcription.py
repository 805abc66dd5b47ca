"""Transcription stage: submit the media URL, then poll until a terminal state.

This is the only stage with a wait loop. The wait is an ``asyncio.sleep`` so a
cancelled run stops polling immediately.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from app.services.transcribe import (
    JOB_COMPLETED,
    JOB_ERROR,
    TranscriptionError,
    TranscriptionJobStatus,
)
from app.telemetry import increment_transcription_poll

from .capabilities import TranscriptionCapability
from .errors import TranscriptionServiceError, TranscriptionTimeoutError
from .types import Transcript

logger = logging.getLogger("app.pipelines.compliance")


def _to_transcript(status: TranscriptionJobStatus) -> Transcript:
    return Transcript(
        text=(status.text or "").strip(),
        words=tuple(status.words or ()),
        duration_ms=status.duration_ms,
        language_code=status.language_code,
    )


class TranscriptionStage:
    def __init__(
        self,
        capability: TranscriptionCapability,
        *,
        poll_interval_seconds: float = 5.0,
        max_attempts: int = 60,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._capability = capability
        self._poll_interval = poll_interval_seconds
        self._max_attempts = max_attempts
        self._sleep = sleep

    async def transcribe(self, media_url: str) -> Transcript:
        """Return the transcript of ``media_url``.

        Raises TranscriptionServiceError when the job errors or the capability
        cannot be reached, TranscriptionTimeoutError when the attempt ceiling
        is hit first.
        """

        try:
            job_id = await self._capability.submit(media_url)
        except TranscriptionError as exc:
            raise TranscriptionServiceError(str(exc)) from exc

        logger.info("Transcription job %s submitted", job_id)

        for attempt in range(1, self._max_attempts + 1):
            try:
                status = await self._capability.status(job_id)
            except TranscriptionError as exc:
                raise TranscriptionServiceError(str(exc)) from exc
            increment_transcription_poll()

            if status.state == JOB_COMPLETED:
                transcript = _to_transcript(status)
                logger.info(
                    "Transcription job %s completed after %s poll(s): %s chars, %s words",
                    job_id,
                    attempt,
                    len(transcript.text),
                    len(transcript.words),
                )
                return transcript
            if status.state == JOB_ERROR:
                raise TranscriptionServiceError(
                    status.error or f"Transcription job {job_id} failed"
                )

            if attempt < self._max_attempts:
                await self._sleep(self._poll_interval)

        raise TranscriptionTimeoutError(
            f"Transcription job {job_id} did not finish after {self._max_attempts} polls"
        )


__all__ = ["TranscriptionStage"]
