"""Report aggregation and scoring.

``aggregate`` reads the ``detailed_results`` document assembled by the
orchestrator and always emits the same four checks in the same order, using
a fixed fallback row for any stage that is absent.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Mapping, Optional

from .types import (
    CHECK_BRAND_VOCABULARY,
    CHECK_COLOR_PALETTE,
    CHECK_CONTENT_TYPE,
    CHECK_LOGO_USAGE,
    RESULT_FAIL,
    RESULT_PASS,
    RESULT_WARN,
    AggregatedReport,
    ReportItem,
)

VISUAL_UNAVAILABLE = "Visual analysis unavailable."
NO_AUDIO_CONTENT = "No audio content to analyze."
VOCABULARY_UNAVAILABLE = "Vocabulary check unavailable. Manual review recommended."
CONTENT_TYPE_UNKNOWN = "Content type could not be determined."

_VALID_RESULTS = (RESULT_PASS, RESULT_WARN, RESULT_FAIL)


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _percent(value: Any) -> int:
    return round_half_up(Decimal(str(float(value))) * 100)


def _summary(detailed_results: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    visual = detailed_results.get("visual_analysis")
    if not isinstance(visual, Mapping):
        return None
    summary = visual.get("summary")
    return summary if isinstance(summary, Mapping) else None


def _logo_usage(detailed_results: Mapping[str, Any]) -> ReportItem:
    summary = _summary(detailed_results)
    if summary is None:
        return ReportItem(CHECK_LOGO_USAGE, RESULT_WARN, VISUAL_UNAVAILABLE)

    elements = summary.get("brand_elements_detected") or {}
    appearances = int(elements.get("logo_appearances") or 0)
    if appearances > 0:
        return ReportItem(
            CHECK_LOGO_USAGE,
            RESULT_PASS,
            f"Logo detected in {appearances} frame(s). Proper brand representation.",
        )
    return ReportItem(
        CHECK_LOGO_USAGE,
        RESULT_WARN,
        "No logo detected. Consider adding brand logo for better recognition.",
    )


def _color_palette(detailed_results: Mapping[str, Any]) -> ReportItem:
    summary = _summary(detailed_results)
    if summary is None:
        return ReportItem(CHECK_COLOR_PALETTE, RESULT_WARN, VISUAL_UNAVAILABLE)

    colors = list(summary.get("dominant_colors") or [])
    if colors:
        return ReportItem(
            CHECK_COLOR_PALETTE,
            RESULT_PASS,
            f"Detected colors: {', '.join(str(color) for color in colors[:3])}",
        )
    return ReportItem(CHECK_COLOR_PALETTE, RESULT_WARN, "No dominant colors detected.")


def _content_type(detailed_results: Mapping[str, Any]) -> ReportItem:
    classification = detailed_results.get("ugc_classification")
    if not isinstance(classification, Mapping) or not classification.get("result"):
        return ReportItem(CHECK_CONTENT_TYPE, RESULT_PASS, CONTENT_TYPE_UNKNOWN)

    confidence = _percent(classification.get("confidence") or 0.0)
    return ReportItem(
        CHECK_CONTENT_TYPE,
        RESULT_PASS,
        f"Classified as {classification['result']} content with {confidence}% confidence.",
    )


def render_citation(citation: Mapping[str, Any]) -> str:
    timestamp = citation.get("timestamp_ms")
    if timestamp is None:
        return f"'{citation.get('spoken_text', '')}'"
    return f"'{citation.get('spoken_text', '')}' at {float(timestamp) / 1000:.1f}s"


def _transcript_available(detailed_results: Mapping[str, Any]) -> bool:
    transcription = detailed_results.get("transcription")
    if not isinstance(transcription, Mapping):
        return False
    return int(transcription.get("text_length") or 0) > 0


def _brand_vocabulary(detailed_results: Mapping[str, Any]) -> ReportItem:
    vocabulary = detailed_results.get("vocabulary_compliance")
    if isinstance(vocabulary, Mapping) and vocabulary.get("status") in _VALID_RESULTS:
        details = vocabulary.get("notes") or "No issues found."
        citations = vocabulary.get("citations") or []
        if citations:
            rendered = ", ".join(render_citation(citation) for citation in citations)
            details = f"{details} Issues found: {rendered}"
        return ReportItem(CHECK_BRAND_VOCABULARY, vocabulary["status"], details)

    if _transcript_available(detailed_results):
        return ReportItem(CHECK_BRAND_VOCABULARY, RESULT_WARN, VOCABULARY_UNAVAILABLE)
    return ReportItem(CHECK_BRAND_VOCABULARY, RESULT_PASS, NO_AUDIO_CONTENT)


def calculate_overall_status(report: Iterable[ReportItem]) -> str:
    results = [item.result for item in report]
    if RESULT_FAIL in results:
        return RESULT_FAIL
    if RESULT_WARN in results:
        return RESULT_WARN
    return RESULT_PASS


def calculate_compliance_score(report: Iterable[ReportItem]) -> int:
    items = list(report)
    if not items:
        return 0
    passed = sum(1 for item in items if item.result == RESULT_PASS)
    return round_half_up(Decimal(100 * passed) / Decimal(len(items)))


def aggregate(detailed_results: Mapping[str, Any]) -> AggregatedReport:
    report = (
        _logo_usage(detailed_results),
        _color_palette(detailed_results),
        _content_type(detailed_results),
        _brand_vocabulary(detailed_results),
    )
    return AggregatedReport(
        frontend_report=report,
        overall_status=calculate_overall_status(report),
        compliance_score=calculate_compliance_score(report),
    )


__all__ = [
    "NO_AUDIO_CONTENT",
    "VISUAL_UNAVAILABLE",
    "VOCABULARY_UNAVAILABLE",
    "aggregate",
    "calculate_compliance_score",
    "calculate_overall_status",
    "render_citation",
    "round_half_up",
]
