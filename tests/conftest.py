"""Shared fakes for the compliance pipeline test-suite."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
import sys
from typing import Any, Optional
from uuid import UUID, uuid4

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from app.application.interfaces import (  # noqa: E402
    AssetRepositoryInterface,
    CampaignNotFoundError,
)
from app.domain.models import (  # noqa: E402
    AssetStatus,
    BrandConfig,
    CreativeAssetRecord,
)
from app.infrastructure.external.s3_adapter import StorageError  # noqa: E402
from app.pipelines.compliance import (  # noqa: E402
    AuthenticityClassifier,
    PipelineOrchestrator,
    TranscriptionStage,
    VisualAnalysisStage,
    VocabularyComplianceStage,
)
from app.services.llm_client import LlmInvocationError  # noqa: E402
from app.services.transcribe import (  # noqa: E402
    JOB_COMPLETED,
    JOB_PROCESSING,
    TranscriptionJobStatus,
    TranscriptWord,
)

CLEAN_VISION_RESPONSE = """Description: A person holding a can of Fizzy Cola in a kitchen.
Logos: Fizzy Cola
Text: FIZZY, Stay bubbly
Colors: #FF0000, #ffffff
Objects: soda can
People: 1
Scenes: kitchen
Logo visible: yes
Brand colors present: yes
Product visible: yes
Handheld camera: yes
Casual setting: yes
Authentic feel: yes
Professional lighting: no
Studio setup: no
"""

BLANK_VISION_RESPONSE = """Description: A plain grey wall.
Logos: none
Text: none
Colors: none
Objects: none
People: 0
Scenes: studio
Logo visible: no
Brand colors present: no
Product visible: no
Handheld camera: no
Casual setting: no
Authentic feel: no
Professional lighting: yes
Studio setup: yes
"""


async def no_sleep(_seconds: float) -> None:
    return None


class FakeAssetRepository(AssetRepositoryInterface):
    """In-memory stand-in for the SQLAlchemy repository."""

    def __init__(self) -> None:
        self.assets: dict[UUID, CreativeAssetRecord] = {}
        self.brands: dict[UUID, BrandConfig] = {}
        self.writes: list[tuple[UUID, dict[str, Any]]] = []
        self.fail_on_complete = False

    def add_campaign(self, brand: Optional[BrandConfig] = None) -> UUID:
        campaign_id = uuid4()
        self.brands[campaign_id] = brand or BrandConfig(
            brand_name="Fizzy Cola",
            phonetic_pronunciation="FIZ-ee KOH-luh",
            banned_terms=["cheap", "knockoff"],
        )
        return campaign_id

    def add_asset(
        self,
        *,
        campaign_id: Optional[UUID] = None,
        mime_type: str = "image/png",
        status: AssetStatus = AssetStatus.PENDING,
        storage_path: Optional[str] = None,
    ) -> CreativeAssetRecord:
        asset = CreativeAssetRecord(
            id=uuid4(),
            campaign_id=campaign_id or self.add_campaign(),
            storage_path=storage_path or f"campaigns/{uuid4().hex}/creative",
            mime_type=mime_type,
            display_name="creative",
            status=status,
            created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
        )
        self.assets[asset.id] = asset
        return asset

    async def get(self, asset_id: UUID) -> Optional[CreativeAssetRecord]:
        return self.assets.get(asset_id)

    async def create_pending(
        self,
        *,
        campaign_id: UUID,
        storage_path: str,
        mime_type: Optional[str] = None,
        file_size: Optional[int] = None,
        display_name: Optional[str] = None,
    ) -> CreativeAssetRecord:
        if campaign_id not in self.brands:
            raise CampaignNotFoundError(f"Campaign {campaign_id} not found")
        asset = CreativeAssetRecord(
            id=uuid4(),
            campaign_id=campaign_id,
            storage_path=storage_path,
            mime_type=mime_type,
            file_size=file_size,
            display_name=display_name,
            status=AssetStatus.PENDING,
        )
        self.assets[asset.id] = asset
        return asset

    async def transition_status(
        self,
        asset_id: UUID,
        expected: AssetStatus,
        new: AssetStatus,
        **fields: Any,
    ) -> bool:
        asset = self.assets.get(asset_id)
        if asset is None or asset.status != expected:
            return False
        await self.update_fields(asset_id, status=new, **fields)
        return True

    async def update_fields(self, asset_id: UUID, **fields: Any) -> None:
        if self.fail_on_complete and fields.get("status") == AssetStatus.COMPLETED:
            raise RuntimeError("database unavailable")
        self.writes.append((asset_id, dict(fields)))
        self.assets[asset_id] = self.assets[asset_id].model_copy(update=fields)

    async def get_brand_config(self, campaign_id: UUID) -> BrandConfig:
        try:
            return self.brands[campaign_id]
        except KeyError:
            raise CampaignNotFoundError(f"No brand for campaign {campaign_id}") from None

    async def list_by_status(self, campaign_id: UUID, status: AssetStatus):
        return [
            asset
            for asset in self.assets.values()
            if asset.campaign_id == campaign_id and asset.status == status
        ]


class FakeAssetStore:
    def __init__(self, payload: bytes = b"\x89PNG fake image bytes") -> None:
        self.payload = payload
        self.fail = False

    async def download(self, storage_path: str) -> bytes:
        if self.fail:
            raise StorageError(f"Failed to download '{storage_path}'")
        return self.payload

    def public_url(self, storage_path: str) -> str:
        return f"https://cdn.example.com/{storage_path}"


class FakeVision:
    def __init__(self, response: str = CLEAN_VISION_RESPONSE, error: Exception | None = None):
        self.response = response
        self.error = error
        self.calls = 0

    async def describe_image(self, image_bytes: bytes, mime_type: str, *, prompt: str) -> str:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.response


class FakeTranscription:
    """Returns ``processing`` ``pending_polls`` times, then ``final``."""

    def __init__(self, final: Optional[TranscriptionJobStatus] = None, pending_polls: int = 0):
        self.final = final
        self.pending_polls = pending_polls
        self.submitted: list[str] = []
        self.polls = 0

    async def submit(self, media_url: str) -> str:
        self.submitted.append(media_url)
        return "job-1"

    async def status(self, job_id: str) -> TranscriptionJobStatus:
        self.polls += 1
        if self.final is None or self.polls <= self.pending_polls:
            return TranscriptionJobStatus(state=JOB_PROCESSING)
        return self.final


class FakeLanguage:
    def __init__(self, *responses: str, error: Exception | None = None):
        self.responses = list(responses)
        self.error = error
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0] if self.responses else ""


def completed_transcript(text: str = "Fizzy Cola keeps me going all day") -> TranscriptionJobStatus:
    words = tuple(
        TranscriptWord(text=word, start_ms=index * 400, end_ms=index * 400 + 300, confidence=0.98)
        for index, word in enumerate(text.split())
    )
    return TranscriptionJobStatus(
        state=JOB_COMPLETED,
        text=text,
        words=words,
        duration_ms=words[-1].end_ms if words else None,
        language_code="en-US",
    )


def build_orchestrator(
    repository: FakeAssetRepository,
    *,
    store: Optional[FakeAssetStore] = None,
    vision: Optional[FakeVision] = None,
    transcription: Optional[FakeTranscription] = None,
    language: Optional[FakeLanguage] = None,
    max_attempts: int = 3,
) -> PipelineOrchestrator:
    return PipelineOrchestrator(
        repository,
        store or FakeAssetStore(),
        VisualAnalysisStage(vision or FakeVision()),
        AuthenticityClassifier(),
        TranscriptionStage(
            transcription or FakeTranscription(completed_transcript()),
            poll_interval_seconds=0.0,
            max_attempts=max_attempts,
            sleep=no_sleep,
        ),
        VocabularyComplianceStage(
            language or FakeLanguage('{"status": "pass", "notes": "No issues found.", "citations": []}')
        ),
        models_used=["vision-test", "transcribe-test", "language-test"],
    )


@pytest.fixture
def repository() -> FakeAssetRepository:
    return FakeAssetRepository()


__all__ = [
    "BLANK_VISION_RESPONSE",
    "CLEAN_VISION_RESPONSE",
    "FakeAssetRepository",
    "FakeAssetStore",
    "FakeLanguage",
    "FakeTranscription",
    "FakeVision",
    "LlmInvocationError",
    "build_orchestrator",
    "completed_transcript",
    "no_sleep",
]
