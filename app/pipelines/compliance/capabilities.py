"""Narrow capability interfaces the pipeline stages depend on.

Production wiring uses Bedrock, Amazon Transcribe and S3; tests plug in
hand-written fakes with the same method shapes.
"""

from __future__ import annotations

from typing import Protocol

from app.services.transcribe import TranscriptionJobStatus


class AssetStore(Protocol):
    async def download(self, storage_path: str) -> bytes:
        ...

    def public_url(self, storage_path: str) -> str:
        ...


class VisionCapability(Protocol):
    async def describe_image(
        self, image_bytes: bytes, mime_type: str, *, prompt: str
    ) -> str:
        ...


class TranscriptionCapability(Protocol):
    async def submit(self, media_url: str) -> str:
        ...

    async def status(self, job_id: str) -> TranscriptionJobStatus:
        ...


class LanguageCapability(Protocol):
    async def complete(self, prompt: str) -> str:
        ...


__all__ = [
    "AssetStore",
    "LanguageCapability",
    "TranscriptionCapability",
    "VisionCapability",
]
