"""Pipeline orchestrator: owns the asset lifecycle for one run.

``run(asset_id)`` moves an asset ``pending -> processing -> completed|failed``.
Only download and final persistence are fatal; every analysis stage failure
is logged, counted and recorded in ``detailed_results["stages"]`` while the
run carries on with that stage absent.
"""

from __future__ import annotations

import asyncio
import logging
import mimetypes
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from app.application.interfaces import AssetRepositoryInterface
from app.config.settings import Settings, settings as default_settings
from app.domain.models import AssetStatus, CreativeAssetRecord, CreativeType, OverallStatus
from app.telemetry import increment_stage_failure, observe_pipeline_run

from .capabilities import AssetStore
from .classifier import AuthenticityClassifier
from .errors import TranscriptionTimeoutError
from .report import aggregate
from .transcription import TranscriptionStage
from .types import Classification, ComplianceResult, FrameAnalysis, Transcript
from .visual import VisualAnalysisStage
from .vocabulary import VocabularyComplianceStage

logger = logging.getLogger("app.pipelines.compliance")

PROCESSING_VERSION = "2.0"

STAGE_COMPLETED = "completed"
STAGE_FAILED = "failed"
STAGE_SKIPPED = "skipped"
STAGE_TIMEOUT = "timeout"
STAGE_DEGRADED = "degraded"
STAGE_NOT_APPLICABLE = "not_applicable"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RunContext:
    """Mutable state accumulated while one asset moves through the stages."""

    asset: CreativeAssetRecord
    mime_type: str
    data: bytes = b""
    frames: Optional[list[FrameAnalysis]] = None
    classification: Optional[Classification] = None
    transcript: Optional[Transcript] = None
    compliance: Optional[ComplianceResult] = None
    stages: dict[str, dict[str, Any]] = field(default_factory=dict)

    def record(self, stage: str, status: str, error: Optional[str] = None) -> None:
        entry: dict[str, Any] = {"status": status}
        if error:
            entry["error"] = error
        self.stages[stage] = entry


def _brand_elements_summary(frames: list[FrameAnalysis]) -> dict[str, int]:
    return {
        "logo_appearances": sum(1 for f in frames if f.brand_elements.logo_visible),
        "brand_color_appearances": sum(
            1 for f in frames if f.brand_elements.brand_colors_present
        ),
        "product_appearances": sum(1 for f in frames if f.brand_elements.product_visible),
    }


def _unique(values) -> list[str]:
    seen: list[str] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


class PipelineOrchestrator:
    def __init__(
        self,
        repository: AssetRepositoryInterface,
        store: AssetStore,
        visual: VisualAnalysisStage,
        classifier: AuthenticityClassifier,
        transcription: TranscriptionStage,
        vocabulary: VocabularyComplianceStage,
        *,
        max_inline_image_bytes: int = 20 * 1024 * 1024,
        models_used: Optional[list[str]] = None,
    ) -> None:
        self._repository = repository
        self._store = store
        self._visual = visual
        self._classifier = classifier
        self._transcription = transcription
        self._vocabulary = vocabulary
        self._max_inline_image_bytes = max_inline_image_bytes
        self._models_used = list(models_used or [])

    async def run(self, asset_id: UUID) -> Optional[AssetStatus]:
        """Process one asset; returns the terminal status, or None when skipped."""

        asset = await self._repository.get(asset_id)
        if asset is None:
            logger.warning("Asset %s not found; nothing to process", asset_id)
            observe_pipeline_run("skipped")
            return None
        if asset.status != AssetStatus.PENDING:
            logger.info("Asset %s is %s, not pending; skipping", asset_id, asset.status.value)
            observe_pipeline_run("skipped")
            return None

        claimed = await self._repository.transition_status(
            asset_id,
            AssetStatus.PENDING,
            AssetStatus.PROCESSING,
            error_detail=None,
        )
        if not claimed:
            logger.info("Asset %s was claimed by another worker; skipping", asset_id)
            observe_pipeline_run("skipped")
            return None

        started = time.perf_counter()
        logger.info("Processing asset %s (%s)", asset_id, asset.storage_path)
        ctx = RunContext(asset=asset, mime_type=self._resolve_mime_type(asset))

        try:
            ctx.data = await self._store.download(asset.storage_path)
        except Exception as exc:
            logger.exception("Download failed for asset %s", asset_id)
            await self._mark_failed(asset_id, "download", exc)
            observe_pipeline_run("failed", time.perf_counter() - started)
            return AssetStatus.FAILED

        stage = "analysis"
        try:
            await asyncio.gather(self._run_visual(ctx), self._run_transcription(ctx))
            ctx.classification = self._classifier.classify(
                [frame.ugc_indicators for frame in ctx.frames or []]
            )
            await self._run_compliance(ctx)

            stage = "aggregate"
            detailed_results = self._build_detailed_results(ctx)
            report = aggregate(detailed_results)

            stage = "persist"
            await self._repository.update_fields(
                asset_id,
                status=AssetStatus.COMPLETED,
                source_properties=self._source_properties(ctx),
                ugc_detection_data=ctx.classification.votes.to_dict(),
                creative_type=CreativeType(ctx.classification.creative_type),
                raw_transcript=ctx.transcript.to_dict() if ctx.transcript else None,
                vocabulary_compliance_result=(
                    ctx.compliance.to_dict() if ctx.compliance else None
                ),
                detailed_results=detailed_results,
                frontend_report=report.report_dicts(),
                overall_status=OverallStatus(report.overall_status),
                compliance_score=report.compliance_score,
                error_detail=None,
            )
        except Exception as exc:
            logger.exception("Asset %s failed during %s", asset_id, stage)
            await self._mark_failed(asset_id, stage, exc)
            observe_pipeline_run("failed", time.perf_counter() - started)
            return AssetStatus.FAILED

        elapsed = time.perf_counter() - started
        observe_pipeline_run("completed", elapsed)
        logger.info(
            "Asset %s completed in %.2fs: %s (score %s)",
            asset_id,
            elapsed,
            report.overall_status,
            report.compliance_score,
        )
        return AssetStatus.COMPLETED

    async def _mark_failed(self, asset_id: UUID, stage: str, exc: BaseException) -> None:
        await self._repository.update_fields(
            asset_id,
            status=AssetStatus.FAILED,
            error_detail={"stage": stage, "message": str(exc) or exc.__class__.__name__},
        )

    @staticmethod
    def _resolve_mime_type(asset: CreativeAssetRecord) -> str:
        if asset.mime_type:
            return asset.mime_type.lower()
        guessed, _ = mimetypes.guess_type(asset.storage_path)
        return (guessed or "application/octet-stream").lower()

    def _stage_failed(self, ctx: RunContext, stage: str, exc: Exception, status: str = STAGE_FAILED) -> None:
        logger.warning("Stage %s failed for asset %s: %s", stage, ctx.asset.id, exc)
        increment_stage_failure(stage)
        ctx.record(stage, status, str(exc) or exc.__class__.__name__)

    async def _run_visual(self, ctx: RunContext) -> None:
        if ctx.mime_type.startswith("video/"):
            # no frame extraction; the classifier falls back to its prior
            ctx.frames = []
            ctx.record("visual", STAGE_SKIPPED, "frame extraction not supported")
            return
        if not ctx.mime_type.startswith("image/"):
            ctx.frames = []
            ctx.record("visual", STAGE_NOT_APPLICABLE)
            return
        if len(ctx.data) > self._max_inline_image_bytes:
            ctx.frames = []
            ctx.record("visual", STAGE_SKIPPED, "image exceeds inline size limit")
            return

        try:
            frame = await self._visual.analyze(ctx.data, ctx.mime_type, 0)
        except Exception as exc:
            self._stage_failed(ctx, "visual", exc)
            return
        ctx.frames = [frame]
        ctx.record("visual", STAGE_COMPLETED)

    async def _run_transcription(self, ctx: RunContext) -> None:
        if not ctx.mime_type.startswith(("audio/", "video/")):
            ctx.record("transcription", STAGE_NOT_APPLICABLE)
            return

        try:
            media_url = self._store.public_url(ctx.asset.storage_path)
            ctx.transcript = await self._transcription.transcribe(media_url)
        except TranscriptionTimeoutError as exc:
            self._stage_failed(ctx, "transcription", exc, STAGE_TIMEOUT)
            return
        except Exception as exc:
            self._stage_failed(ctx, "transcription", exc)
            return
        ctx.record("transcription", STAGE_COMPLETED)

    async def _run_compliance(self, ctx: RunContext) -> None:
        if ctx.transcript is None or not ctx.transcript.has_text:
            ctx.record("compliance", STAGE_NOT_APPLICABLE)
            return

        try:
            brand_config = await self._repository.get_brand_config(ctx.asset.campaign_id)
        except Exception as exc:
            self._stage_failed(ctx, "brand", exc)
            ctx.record("compliance", STAGE_SKIPPED, "brand configuration unavailable")
            return

        try:
            ctx.compliance = await self._vocabulary.check(ctx.transcript, brand_config)
        except Exception as exc:
            self._stage_failed(ctx, "compliance", exc)
            return
        ctx.record(
            "compliance",
            STAGE_DEGRADED if ctx.compliance.degraded else STAGE_COMPLETED,
        )

    def _source_properties(self, ctx: RunContext) -> dict[str, Any]:
        uploaded_at = ctx.asset.created_at or _utc_now()
        return {
            "file_size": len(ctx.data),
            "mime_type": ctx.mime_type,
            "file_name": ctx.asset.display_name,
            "uploaded_at": uploaded_at.isoformat(),
        }

    def _build_detailed_results(self, ctx: RunContext) -> dict[str, Any]:
        visual_analysis = None
        if ctx.frames is not None:
            frames = ctx.frames
            visual_analysis = {
                "frames_analyzed": [frame.to_dict() for frame in frames],
                "summary": {
                    "total_frames": len(frames),
                    "brand_elements_detected": _brand_elements_summary(frames),
                    "dominant_colors": _unique(
                        color for frame in frames for color in frame.detected_elements.colors
                    ),
                    "text_detected": _unique(
                        text for frame in frames for text in frame.detected_elements.text
                    ),
                },
            }

        transcription = None
        if ctx.transcript is not None:
            transcription = {
                "text_length": len(ctx.transcript.text),
                "word_count": len(ctx.transcript.words),
                "duration_ms": ctx.transcript.duration_ms,
                "language_code": ctx.transcript.language_code,
            }

        return {
            "visual_analysis": visual_analysis,
            "ugc_classification": ctx.classification.to_dict() if ctx.classification else None,
            "transcription": transcription,
            "vocabulary_compliance": ctx.compliance.to_dict() if ctx.compliance else None,
            "stages": dict(ctx.stages),
            "processing_metadata": {
                "processed_at": _utc_now().isoformat(),
                "processing_version": PROCESSING_VERSION,
                "models_used": list(self._models_used),
            },
        }


def build_orchestrator(
    repository: AssetRepositoryInterface,
    *,
    config: Optional[Settings] = None,
    store: Optional[AssetStore] = None,
    llm_client=None,
    transcribe_service=None,
) -> PipelineOrchestrator:
    """Wire the production capabilities (S3, Bedrock, Amazon Transcribe)."""

    from app.infrastructure.external.s3_adapter import S3AssetStore
    from app.services.llm_client import BedrockLlmClient
    from app.services.transcribe import TranscribeService

    cfg = config or default_settings
    llm = llm_client or BedrockLlmClient(cfg.bedrock)
    return PipelineOrchestrator(
        repository,
        store or S3AssetStore(cfg.s3),
        VisualAnalysisStage(llm),
        AuthenticityClassifier(
            default_type=cfg.pipeline.default_creative_type,
            default_confidence=cfg.pipeline.default_confidence,
        ),
        TranscriptionStage(
            transcribe_service or TranscribeService(cfg.transcribe),
            poll_interval_seconds=cfg.transcribe.poll_interval_seconds,
            max_attempts=cfg.transcribe.max_poll_attempts,
        ),
        VocabularyComplianceStage(
            llm,
            confidence_threshold=cfg.pipeline.mispronunciation_confidence_threshold,
            max_json_retries=cfg.pipeline.max_json_retries,
            max_words_in_prompt=cfg.pipeline.max_transcript_words_in_prompt,
        ),
        max_inline_image_bytes=cfg.pipeline.max_inline_image_bytes,
        models_used=[
            cfg.bedrock.vision_model_id,
            "amazon-transcribe",
            cfg.bedrock.model_id,
        ],
    )


__all__ = ["PROCESSING_VERSION", "PipelineOrchestrator", "RunContext", "build_orchestrator"]
