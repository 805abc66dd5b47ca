"""Transcription stage polling behaviour."""

from __future__ import annotations

import pytest

from app.pipelines.compliance import (
    TranscriptionServiceError,
    TranscriptionStage,
    TranscriptionTimeoutError,
)
from app.services.transcribe import JOB_ERROR, TranscriptionError, TranscriptionJobStatus
from conftest import FakeTranscription, completed_transcript


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class UnreachableTranscription:
    async def submit(self, media_url: str) -> str:
        raise TranscriptionError("endpoint unreachable")

    async def status(self, job_id: str) -> TranscriptionJobStatus:
        raise AssertionError("status should not be polled")


@pytest.mark.asyncio
async def test_polls_until_completed():
    capability = FakeTranscription(completed_transcript("Fizzy Cola tastes great"), pending_polls=2)
    sleep = RecordingSleep()
    stage = TranscriptionStage(capability, poll_interval_seconds=5.0, max_attempts=5, sleep=sleep)

    transcript = await stage.transcribe("https://cdn.example.com/clip.mp4")

    assert capability.submitted == ["https://cdn.example.com/clip.mp4"]
    assert capability.polls == 3
    assert sleep.calls == [5.0, 5.0]
    assert transcript.text == "Fizzy Cola tastes great"
    assert len(transcript.words) == 4
    assert transcript.language_code == "en-US"


@pytest.mark.asyncio
async def test_times_out_after_attempt_ceiling():
    capability = FakeTranscription(final=None)
    sleep = RecordingSleep()
    stage = TranscriptionStage(capability, poll_interval_seconds=1.5, max_attempts=4, sleep=sleep)

    with pytest.raises(TranscriptionTimeoutError):
        await stage.transcribe("https://cdn.example.com/clip.mp4")

    assert capability.polls == 4
    assert sleep.calls == [1.5, 1.5, 1.5]


@pytest.mark.asyncio
async def test_error_state_raises_service_error():
    capability = FakeTranscription(TranscriptionJobStatus(state=JOB_ERROR, error="unsupported codec"))
    stage = TranscriptionStage(capability, max_attempts=3, sleep=RecordingSleep())

    with pytest.raises(TranscriptionServiceError, match="unsupported codec") as excinfo:
        await stage.transcribe("https://cdn.example.com/clip.mp4")

    assert not isinstance(excinfo.value, TranscriptionTimeoutError)


@pytest.mark.asyncio
async def test_submit_failure_raises_service_error():
    stage = TranscriptionStage(UnreachableTranscription(), sleep=RecordingSleep())

    with pytest.raises(TranscriptionServiceError, match="unreachable"):
        await stage.transcribe("https://cdn.example.com/clip.mp4")


def test_rejects_non_positive_attempt_ceiling():
    with pytest.raises(ValueError):
        TranscriptionStage(FakeTranscription(), max_attempts=0)
