"""Report aggregation, status derivation and scoring."""

from __future__ import annotations

from decimal import Decimal
from itertools import product

import pytest

from app.pipelines.compliance.report import (
    NO_AUDIO_CONTENT,
    VISUAL_UNAVAILABLE,
    VOCABULARY_UNAVAILABLE,
    aggregate,
    calculate_compliance_score,
    calculate_overall_status,
    render_citation,
    round_half_up,
)
from app.pipelines.compliance.types import REPORT_CHECKS, ReportItem


def _report(*results: str) -> list[ReportItem]:
    return [ReportItem(f"check-{i}", result, "") for i, result in enumerate(results)]


def _visual(logo_appearances: int = 1, colors=("#FF0000", "#FFFFFF")) -> dict:
    return {
        "frames_analyzed": [],
        "summary": {
            "total_frames": 1,
            "brand_elements_detected": {
                "logo_appearances": logo_appearances,
                "brand_color_appearances": 0,
                "product_appearances": 0,
            },
            "dominant_colors": list(colors),
            "text_detected": [],
        },
    }


@pytest.mark.parametrize("results", list(product(["pass", "warn", "fail"], repeat=3)))
def test_overall_status_is_fail_then_warn_then_pass(results):
    status = calculate_overall_status(_report(*results))

    if "fail" in results:
        assert status == "fail"
    elif "warn" in results:
        assert status == "warn"
    else:
        assert status == "pass"


def test_three_of_four_passing_scores_75():
    assert calculate_compliance_score(_report("pass", "pass", "pass", "warn")) == 75


def test_score_rounds_half_up():
    assert round_half_up(Decimal("62.5")) == 63
    assert round_half_up(Decimal("12.5")) == 13
    # 1 of 8 passing is 12.5
    assert calculate_compliance_score(_report("pass", *["warn"] * 7)) == 13
    # 2 of 3 passing is 66.67
    assert calculate_compliance_score(_report("pass", "pass", "fail")) == 67


def test_empty_detailed_results_still_yields_four_checks():
    result = aggregate({})

    assert tuple(item.check_name for item in result.frontend_report) == REPORT_CHECKS
    by_name = {item.check_name: item for item in result.frontend_report}
    assert by_name["Logo Usage"].result == "warn"
    assert by_name["Logo Usage"].details == VISUAL_UNAVAILABLE
    assert by_name["Color Palette"].details == VISUAL_UNAVAILABLE
    assert by_name["Content Type"].result == "pass"
    assert by_name["Brand Vocabulary"].result == "pass"
    assert by_name["Brand Vocabulary"].details == NO_AUDIO_CONTENT
    assert result.overall_status == "warn"
    assert result.compliance_score == 50


@pytest.mark.parametrize(
    "visual, classification, transcription, vocabulary",
    list(
        product(
            [None, _visual(), _visual(0, ())],
            [None, {"result": "Produced", "confidence": 0.4}],
            [None, {"text_length": 12}],
            [None, {"status": "fail", "notes": "Banned.", "citations": []}],
        )
    ),
)
def test_every_stage_combination_has_the_same_shape(visual, classification, transcription, vocabulary):
    result = aggregate(
        {
            "visual_analysis": visual,
            "ugc_classification": classification,
            "transcription": transcription,
            "vocabulary_compliance": vocabulary,
        }
    )

    assert tuple(item.check_name for item in result.frontend_report) == REPORT_CHECKS
    assert 0 <= result.compliance_score <= 100


def test_clean_visual_results_pass_every_check():
    result = aggregate(
        {
            "visual_analysis": _visual(),
            "ugc_classification": {"result": "UGC", "confidence": 1.0},
        }
    )

    assert [item.result for item in result.frontend_report] == ["pass"] * 4
    assert result.frontend_report[0].details == (
        "Logo detected in 1 frame(s). Proper brand representation."
    )
    assert result.frontend_report[1].details == "Detected colors: #FF0000, #FFFFFF"
    assert result.frontend_report[2].details == "Classified as UGC content with 100% confidence."
    assert result.overall_status == "pass"
    assert result.compliance_score == 100


def test_color_details_list_at_most_three_colors():
    result = aggregate({"visual_analysis": _visual(colors=("#111111", "#222222", "#333333", "#444444"))})

    assert result.frontend_report[1].details == "Detected colors: #111111, #222222, #333333"


def test_no_logo_and_no_colors_warn():
    result = aggregate({"visual_analysis": _visual(0, ())})

    assert result.frontend_report[0].result == "warn"
    assert result.frontend_report[0].details.startswith("No logo detected.")
    assert result.frontend_report[1].result == "warn"
    assert result.frontend_report[1].details == "No dominant colors detected."


def test_brand_vocabulary_mirrors_compliance_and_renders_citations():
    result = aggregate(
        {
            "transcription": {"text_length": 40},
            "vocabulary_compliance": {
                "status": "fail",
                "notes": "Banned term used.",
                "citations": [
                    {"type": "banned_word", "spoken_text": "cheap", "timestamp_ms": 2500, "confidence": 0.9},
                    {"type": "mispronunciation", "spoken_text": "fizzle cola", "timestamp_ms": 12340, "confidence": 0.95},
                ],
            },
        }
    )

    vocabulary = result.frontend_report[3]
    assert vocabulary.result == "fail"
    assert vocabulary.details == (
        "Banned term used. Issues found: 'cheap' at 2.5s, 'fizzle cola' at 12.3s"
    )
    assert result.overall_status == "fail"


def test_transcript_without_compliance_result_warns():
    result = aggregate({"transcription": {"text_length": 25}})

    assert result.frontend_report[3].result == "warn"
    assert result.frontend_report[3].details == VOCABULARY_UNAVAILABLE


def test_render_citation_without_timestamp():
    assert render_citation({"spoken_text": "cheap", "timestamp_ms": None}) == "'cheap'"


def test_content_type_rounds_confidence_half_up():
    result = aggregate({"ugc_classification": {"result": "Produced", "confidence": 0.345}})

    assert result.frontend_report[2].details == "Classified as Produced content with 35% confidence."
