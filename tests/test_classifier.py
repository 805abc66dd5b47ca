"""Authenticity classifier weights, votes and the zero-frame prior."""

from __future__ import annotations

import pytest

from app.pipelines.compliance.classifier import AuthenticityClassifier, score_frame
from app.pipelines.compliance.types import UgcIndicators


@pytest.mark.parametrize(
    "indicators, expected",
    [
        (UgcIndicators(), 0.5),
        (UgcIndicators(handheld_camera=True), 0.75),
        (UgcIndicators(handheld_camera=True, casual_setting=True, authentic_feel=True), 1.0),
        (UgcIndicators(studio_setup=True), 0.25),
        (UgcIndicators(professional_lighting=True, studio_setup=True), 0.1),
        (UgcIndicators(handheld_camera=True, professional_lighting=True), 0.6),
    ],
)
def test_score_frame(indicators, expected):
    assert score_frame(indicators) == pytest.approx(expected)


def test_neutral_frame_is_not_a_ugc_vote():
    result = AuthenticityClassifier().classify([UgcIndicators()])

    assert result.creative_type == "Produced"
    assert result.votes.ugc_frames == 0
    assert result.votes.produced_frames == 1
    assert result.confidence == pytest.approx(0.5)


def test_majority_of_ugc_votes_wins():
    frames = [
        UgcIndicators(handheld_camera=True, casual_setting=True),
        UgcIndicators(authentic_feel=True),
        UgcIndicators(studio_setup=True, professional_lighting=True),
    ]

    result = AuthenticityClassifier().classify(frames)

    assert result.creative_type == "UGC"
    assert result.votes.total_frames == 3
    assert result.votes.ugc_frames == 2
    assert result.confidence == pytest.approx((1.0 + 0.75 + 0.1) / 3)
    assert result.fallback is False


def test_even_split_is_produced():
    frames = [UgcIndicators(handheld_camera=True), UgcIndicators(studio_setup=True)]

    assert AuthenticityClassifier().classify(frames).creative_type == "Produced"


def test_zero_frames_returns_configured_default():
    result = AuthenticityClassifier().classify([])

    assert result.creative_type == "UGC"
    assert result.confidence == pytest.approx(0.7)
    assert result.fallback is True
    assert result.votes.to_dict() == {
        "total_frames": 1,
        "ugc_frames": 1,
        "produced_frames": 0,
        "confidence_scores": [0.7],
    }


def test_default_can_be_produced():
    result = AuthenticityClassifier(default_type="Produced", default_confidence=0.6).classify([])

    assert result.creative_type == "Produced"
    assert result.votes.produced_frames == 1
    assert result.confidence == pytest.approx(0.6)
