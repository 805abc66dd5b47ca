"""Typed containers shared across the compliance pipeline.

These dataclasses live in their own module so the stages (`visual`,
`classifier`, `transcription`, `vocabulary`, `report`) and the orchestrator
can import them without creating circular dependencies. Every container
exposes ``to_dict`` producing the JSON shape persisted on the asset row.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from app.services.transcribe import TranscriptWord

CHECK_LOGO_USAGE = "Logo Usage"
CHECK_COLOR_PALETTE = "Color Palette"
CHECK_CONTENT_TYPE = "Content Type"
CHECK_BRAND_VOCABULARY = "Brand Vocabulary"

REPORT_CHECKS = (
    CHECK_LOGO_USAGE,
    CHECK_COLOR_PALETTE,
    CHECK_CONTENT_TYPE,
    CHECK_BRAND_VOCABULARY,
)

RESULT_PASS = "pass"
RESULT_WARN = "warn"
RESULT_FAIL = "fail"

CITATION_BANNED_WORD = "banned_word"
CITATION_MISPRONUNCIATION = "mispronunciation"


@dataclass(frozen=True)
class DetectedElements:
    logos: tuple[str, ...] = ()
    text: tuple[str, ...] = ()
    colors: tuple[str, ...] = ()
    objects: tuple[str, ...] = ()
    people: int = 0
    scenes: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "logos": list(self.logos),
            "text": list(self.text),
            "colors": list(self.colors),
            "objects": list(self.objects),
            "people": self.people,
            "scenes": list(self.scenes),
        }


@dataclass(frozen=True)
class BrandElements:
    logo_visible: bool = False
    brand_colors_present: bool = False
    product_visible: bool = False

    def to_dict(self) -> dict[str, bool]:
        return {
            "logo_visible": self.logo_visible,
            "brand_colors_present": self.brand_colors_present,
            "product_visible": self.product_visible,
        }


@dataclass(frozen=True)
class UgcIndicators:
    handheld_camera: bool = False
    casual_setting: bool = False
    authentic_feel: bool = False
    professional_lighting: bool = False
    studio_setup: bool = False

    def to_dict(self) -> dict[str, bool]:
        return {
            "handheld_camera": self.handheld_camera,
            "casual_setting": self.casual_setting,
            "authentic_feel": self.authentic_feel,
            "professional_lighting": self.professional_lighting,
            "studio_setup": self.studio_setup,
        }


@dataclass(frozen=True)
class FrameAnalysis:
    """Parsed output of the vision capability for one frame."""

    frame_number: int
    timestamp_ms: int
    visual_description: str
    detected_elements: DetectedElements = field(default_factory=DetectedElements)
    brand_elements: BrandElements = field(default_factory=BrandElements)
    ugc_indicators: UgcIndicators = field(default_factory=UgcIndicators)

    def to_dict(self) -> dict[str, Any]:
        return {
            "frame_number": self.frame_number,
            "timestamp": self.timestamp_ms,
            "visual_description": self.visual_description,
            "detected_elements": self.detected_elements.to_dict(),
            "brand_elements": self.brand_elements.to_dict(),
            "ugc_indicators": self.ugc_indicators.to_dict(),
        }


@dataclass(frozen=True)
class UgcVotes:
    total_frames: int = 0
    ugc_frames: int = 0
    produced_frames: int = 0
    confidence_scores: tuple[float, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_frames": self.total_frames,
            "ugc_frames": self.ugc_frames,
            "produced_frames": self.produced_frames,
            "confidence_scores": list(self.confidence_scores),
        }


@dataclass(frozen=True)
class Classification:
    """Outcome of the authenticity classifier."""

    creative_type: str
    confidence: float
    votes: UgcVotes
    fallback: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "result": self.creative_type,
            "confidence": self.confidence,
            "votes": self.votes.to_dict(),
            "fallback": self.fallback,
        }


@dataclass(frozen=True)
class Transcript:
    text: str
    words: tuple[TranscriptWord, ...] = ()
    duration_ms: Optional[int] = None
    language_code: Optional[str] = None

    @property
    def has_text(self) -> bool:
        return bool(self.text and self.text.strip())

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "words": [word.to_dict() for word in self.words],
            "duration_ms": self.duration_ms,
            "language_code": self.language_code,
        }


@dataclass(frozen=True)
class Citation:
    type: str
    spoken_text: str
    timestamp_ms: Optional[float] = None
    confidence: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "spoken_text": self.spoken_text,
            "timestamp_ms": self.timestamp_ms,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class ComplianceResult:
    status: str
    notes: str
    citations: tuple[Citation, ...] = ()
    degraded: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "notes": self.notes,
            "citations": [citation.to_dict() for citation in self.citations],
            "degraded": self.degraded,
        }


@dataclass(frozen=True)
class ReportItem:
    check_name: str
    result: str
    details: str

    def to_dict(self) -> dict[str, str]:
        return {
            "check_name": self.check_name,
            "result": self.result,
            "details": self.details,
        }


@dataclass(frozen=True)
class AggregatedReport:
    frontend_report: tuple[ReportItem, ...]
    overall_status: str
    compliance_score: int

    def report_dicts(self) -> list[dict[str, str]]:
        return [item.to_dict() for item in self.frontend_report]


__all__ = [
    "AggregatedReport",
    "BrandElements",
    "CHECK_BRAND_VOCABULARY",
    "CHECK_COLOR_PALETTE",
    "CHECK_CONTENT_TYPE",
    "CHECK_LOGO_USAGE",
    "CITATION_BANNED_WORD",
    "CITATION_MISPRONUNCIATION",
    "Citation",
    "Classification",
    "ComplianceResult",
    "DetectedElements",
    "FrameAnalysis",
    "REPORT_CHECKS",
    "RESULT_FAIL",
    "RESULT_PASS",
    "RESULT_WARN",
    "ReportItem",
    "Transcript",
    "TranscriptWord",
    "UgcIndicators",
    "UgcVotes",
]
