"""High-level map of the compliance pipeline.

``PipelineOrchestrator.run`` in ``orchestrator`` holds the actual
choreography; this module documents the canonical execution order so team
members can navigate the package and so ``GET /assets/pipeline/stages`` can
describe it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List


@dataclass(frozen=True)
class PipelineStage:
    """Human-readable description of one stage in the compliance pipeline."""

    order: int
    name: str
    module: str
    summary: str
    fatal: bool = False


class CompliancePipeline:
    """Utility wrapper for documenting the asset processing flow."""

    _STAGES: List[PipelineStage] = [
        PipelineStage(
            1,
            "Claim",
            "app.pipelines.compliance.orchestrator",
            "Move the asset from pending to processing with a conditional update; skip otherwise.",
        ),
        PipelineStage(
            2,
            "Download",
            "app.infrastructure.external.s3_adapter",
            "Read the asset bytes from object storage.",
            fatal=True,
        ),
        PipelineStage(
            3,
            "Visual Analysis",
            "app.pipelines.compliance.visual",
            "Describe image frame 0 with the vision model and extract brand/UGC indicators.",
        ),
        PipelineStage(
            4,
            "Transcription",
            "app.pipelines.compliance.transcription",
            "Submit audio/video to Amazon Transcribe and poll until completed, error or timeout.",
        ),
        PipelineStage(
            5,
            "Authenticity Classification",
            "app.pipelines.compliance.classifier",
            "Weigh UGC indicators per frame and vote UGC versus Produced.",
        ),
        PipelineStage(
            6,
            "Vocabulary Compliance",
            "app.pipelines.compliance.vocabulary",
            "Check the transcript for banned terms and clear brand mispronunciations.",
        ),
        PipelineStage(
            7,
            "Report Aggregation",
            "app.pipelines.compliance.report",
            "Build the four-check report, overall status and compliance score.",
        ),
        PipelineStage(
            8,
            "Persistence",
            "app.infrastructure.persistence.asset_repository",
            "Write every stage output with status completed.",
            fatal=True,
        ),
    ]

    @classmethod
    def describe(cls) -> Iterable[PipelineStage]:
        """Expose the ordered list of stages for debugging and documentation."""

        return tuple(cls._STAGES)


__all__ = ["CompliancePipeline", "PipelineStage"]
