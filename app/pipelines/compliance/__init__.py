"""Creative asset compliance pipeline package.

Modules are organised by the order in which an asset run executes:

1. `visual` – describe the image and extract brand/UGC indicators.
2. `transcription` – submit audio/video for speech-to-text and poll.
3. `classifier` – vote UGC versus Produced from the indicators.
4. `vocabulary` – check the transcript against the brand's vocabulary rules.
5. `report` – aggregate the four checks, status and score.
6. `orchestrator` – state machine that sequences the stages and persists.
7. `flow` – human-readable description of the end-to-end stages.
"""

from .classifier import AuthenticityClassifier
from .errors import (
    ComplianceCheckError,
    StageError,
    TranscriptionServiceError,
    TranscriptionTimeoutError,
    VisualAnalysisError,
)
from .flow import CompliancePipeline, PipelineStage
from .orchestrator import PipelineOrchestrator, build_orchestrator
from .report import aggregate
from .transcription import TranscriptionStage
from .visual import IndicatorExtractor, KeywordIndicatorExtractor, VisualAnalysisStage
from .vocabulary import VocabularyComplianceStage

__all__ = [
    "AuthenticityClassifier",
    "CompliancePipeline",
    "ComplianceCheckError",
    "IndicatorExtractor",
    "KeywordIndicatorExtractor",
    "PipelineOrchestrator",
    "PipelineStage",
    "StageError",
    "TranscriptionServiceError",
    "TranscriptionStage",
    "TranscriptionTimeoutError",
    "VisualAnalysisError",
    "VisualAnalysisStage",
    "VocabularyComplianceStage",
    "aggregate",
    "build_orchestrator",
]
