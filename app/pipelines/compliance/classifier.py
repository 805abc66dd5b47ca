"""Authenticity classifier: UGC versus Produced.

Each frame's indicators are weighted, shifted by 0.5 and clamped into [0, 1].
A frame scoring above 0.5 is a UGC vote; the asset is UGC when more than half
of the frames vote UGC. Confidence is the mean frame score.
"""

from __future__ import annotations

from typing import Sequence

from app.domain.models import CreativeType

from .types import Classification, UgcIndicators, UgcVotes

INDICATOR_WEIGHTS = {
    "handheld_camera": 0.25,
    "casual_setting": 0.25,
    "authentic_feel": 0.25,
    "professional_lighting": -0.15,
    "studio_setup": -0.25,
}

UGC_THRESHOLD = 0.5


def score_frame(indicators: UgcIndicators) -> float:
    """Return the normalised UGC score of one frame."""

    total = sum(
        weight
        for name, weight in INDICATOR_WEIGHTS.items()
        if getattr(indicators, name)
    )
    return max(0.0, min(1.0, total + 0.5))


class AuthenticityClassifier:
    def __init__(
        self,
        default_type: str = CreativeType.UGC.value,
        default_confidence: float = 0.7,
    ) -> None:
        self._default_type = CreativeType(default_type).value
        self._default_confidence = default_confidence

    def default(self) -> Classification:
        """Prior used when no frame could be analysed."""

        is_ugc = self._default_type == CreativeType.UGC.value
        votes = UgcVotes(
            total_frames=1,
            ugc_frames=1 if is_ugc else 0,
            produced_frames=0 if is_ugc else 1,
            confidence_scores=(self._default_confidence,),
        )
        return Classification(
            creative_type=self._default_type,
            confidence=self._default_confidence,
            votes=votes,
            fallback=True,
        )

    def classify(self, indicators_per_frame: Sequence[UgcIndicators]) -> Classification:
        if not indicators_per_frame:
            return self.default()

        scores = tuple(score_frame(indicators) for indicators in indicators_per_frame)
        ugc_frames = sum(1 for score in scores if score > UGC_THRESHOLD)
        total = len(scores)
        votes = UgcVotes(
            total_frames=total,
            ugc_frames=ugc_frames,
            produced_frames=total - ugc_frames,
            confidence_scores=scores,
        )
        creative_type = (
            CreativeType.UGC.value
            if ugc_frames / total > UGC_THRESHOLD
            else CreativeType.PRODUCED.value
        )
        return Classification(
            creative_type=creative_type,
            confidence=sum(scores) / total,
            votes=votes,
        )


__all__ = ["AuthenticityClassifier", "INDICATOR_WEIGHTS", "score_frame"]
