"""Amazon Transcribe integration helpers using the batch job API."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional
from uuid import uuid4

import httpx
from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from app.config.settings import TranscribeConfig, settings
from app.services.aws import create_boto3_client

logger = logging.getLogger(__name__)

JOB_COMPLETED = "completed"
JOB_ERROR = "error"
JOB_PROCESSING = "processing"

_STATE_MAP = {
    "COMPLETED": JOB_COMPLETED,
    "FAILED": JOB_ERROR,
    "QUEUED": JOB_PROCESSING,
    "IN_PROGRESS": JOB_PROCESSING,
}


class TranscriptionError(RuntimeError):
    """Raised when Amazon Transcribe cannot be reached or returns garbage."""


@dataclass(frozen=True)
class TranscriptWord:
    """One recognised word with its timing in milliseconds."""

    text: str
    start_ms: int
    end_ms: int
    confidence: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "start": self.start_ms,
            "end": self.end_ms,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class TranscriptionJobStatus:
    """Snapshot of a transcription job as reported by the provider."""

    state: str
    text: Optional[str] = None
    words: tuple[TranscriptWord, ...] = field(default_factory=tuple)
    duration_ms: Optional[int] = None
    language_code: Optional[str] = None
    error: Optional[str] = None


def _seconds_to_ms(value: Any) -> int:
    return int(round(float(value) * 1000))


def parse_transcript_document(document: dict[str, Any]) -> TranscriptionJobStatus:
    """Turn an Amazon Transcribe result document into a completed status."""

    results = document.get("results") or {}
    transcripts = results.get("transcripts") or []
    text = " ".join(
        entry.get("transcript", "") for entry in transcripts if entry.get("transcript")
    ).strip()

    words: list[TranscriptWord] = []
    for item in results.get("items") or []:
        if item.get("type") != "pronunciation":
            continue
        alternatives = item.get("alternatives") or []
        if not alternatives or "start_time" not in item:
            continue
        best = alternatives[0]
        confidence = best.get("confidence")
        words.append(
            TranscriptWord(
                text=best.get("content", ""),
                start_ms=_seconds_to_ms(item["start_time"]),
                end_ms=_seconds_to_ms(item.get("end_time", item["start_time"])),
                confidence=float(confidence) if confidence is not None else None,
            )
        )

    duration_ms = words[-1].end_ms if words else None
    return TranscriptionJobStatus(
        state=JOB_COMPLETED,
        text=text,
        words=tuple(words),
        duration_ms=duration_ms,
        language_code=results.get("language_code"),
    )


class TranscribeService:
    """Submit batch transcription jobs and report on their progress."""

    def __init__(
        self,
        config: Optional[TranscribeConfig] = None,
        client: Any = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._config = config or settings.transcribe
        self._client = client or create_boto3_client(
            "transcribe", region_name=self._config.region
        )
        self._http_client = http_client

    async def submit(self, media_url: str) -> str:
        """Start a transcription job for ``media_url`` and return its name."""

        if not media_url:
            raise TranscriptionError("Media URL for transcription is empty.")

        job_name = f"compliance-{uuid4().hex}"
        request: dict[str, Any] = {
            "TranscriptionJobName": job_name,
            "Media": {"MediaFileUri": media_url},
        }
        if self._config.language_code:
            request["LanguageCode"] = self._config.language_code
        else:
            request["IdentifyLanguage"] = self._config.identify_language

        try:
            await run_in_threadpool(lambda: self._client.start_transcription_job(**request))
        except (BotoCoreError, ClientError) as exc:
            raise TranscriptionError(f"Failed to start transcription job: {exc}") from exc

        logger.info("Started transcription job %s", job_name)
        return job_name

    async def status(self, job_id: str) -> TranscriptionJobStatus:
        """Return the current state of ``job_id``, fetching the transcript once done."""

        try:
            response = await run_in_threadpool(
                lambda: self._client.get_transcription_job(TranscriptionJobName=job_id)
            )
        except (BotoCoreError, ClientError) as exc:
            raise TranscriptionError(f"Failed to read transcription job {job_id}: {exc}") from exc

        job = response.get("TranscriptionJob") or {}
        state = _STATE_MAP.get(job.get("TranscriptionJobStatus", ""), JOB_PROCESSING)

        if state == JOB_ERROR:
            return TranscriptionJobStatus(
                state=JOB_ERROR,
                error=job.get("FailureReason") or "Transcription job failed",
            )
        if state != JOB_COMPLETED:
            return TranscriptionJobStatus(state=JOB_PROCESSING)

        transcript_uri = (job.get("Transcript") or {}).get("TranscriptFileUri")
        if not transcript_uri:
            raise TranscriptionError(f"Job {job_id} completed without a transcript URI")

        document = await self._fetch_document(transcript_uri)
        return parse_transcript_document(document)

    async def _fetch_document(self, uri: str) -> dict[str, Any]:
        try:
            if self._http_client is not None:
                response = await self._http_client.get(uri)
            else:
                async with httpx.AsyncClient(
                    timeout=self._config.request_timeout_seconds
                ) as client:
                    response = await client.get(uri)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise TranscriptionError(f"Failed to download transcript: {exc}") from exc


__all__ = [
    "JOB_COMPLETED",
    "JOB_ERROR",
    "JOB_PROCESSING",
    "TranscribeService",
    "TranscriptionError",
    "TranscriptionJobStatus",
    "TranscriptWord",
    "parse_transcript_document",
]
