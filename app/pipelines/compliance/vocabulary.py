"""Vocabulary and pronunciation compliance stage."""

from __future__ import annotations

import logging

from app.domain.models import BrandConfig
from app.services.llm_client import LlmInvocationError
from app.services.response_contract import (
    CitationPayload,
    ResponseContractError,
    VocabularyCheckResponse,
)

from .capabilities import LanguageCapability
from .errors import ComplianceCheckError
from .prompts import build_vocabulary_prompt
from .types import (
    CITATION_MISPRONUNCIATION,
    RESULT_WARN,
    Citation,
    ComplianceResult,
    Transcript,
)

logger = logging.getLogger("app.pipelines.compliance")

MANUAL_REVIEW_NOTE = "manual review recommended"


def _truncate(value: str, max_length: int = 500) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


def filter_citations(
    citations: list[CitationPayload],
    threshold: float,
) -> tuple[Citation, ...]:
    """Drop mispronunciations at or below ``threshold``; banned words always stay."""

    kept = []
    for citation in citations:
        if (
            citation.type == CITATION_MISPRONUNCIATION
            and citation.confidence is not None
            and citation.confidence <= threshold
        ):
            continue
        kept.append(
            Citation(
                type=citation.type,
                spoken_text=citation.spoken_text,
                timestamp_ms=citation.timestamp,
                confidence=citation.confidence,
            )
        )
    return tuple(kept)


class VocabularyComplianceStage:
    def __init__(
        self,
        language: LanguageCapability,
        *,
        confidence_threshold: float = 0.8,
        max_json_retries: int = 1,
        max_words_in_prompt: int = 100,
    ) -> None:
        self._language = language
        self._threshold = confidence_threshold
        self._max_json_retries = max_json_retries
        self._max_words = max_words_in_prompt

    async def check(self, transcript: Transcript, brand_config: BrandConfig) -> ComplianceResult:
        prompt = build_vocabulary_prompt(
            transcript, brand_config, max_words=self._max_words
        )

        for attempt in range(self._max_json_retries + 1):
            try:
                raw_response = await self._language.complete(prompt)
            except LlmInvocationError as exc:
                raise ComplianceCheckError(f"Language capability failed: {exc}") from exc

            logger.info(
                "Vocabulary check raw response brand=%s attempt=%s: %s",
                brand_config.brand_name,
                attempt + 1,
                _truncate(raw_response or "", 500),
            )

            try:
                parsed = VocabularyCheckResponse.from_json(raw_response or "")
            except ResponseContractError as exc:
                logger.warning(
                    "Vocabulary check returned an invalid payload attempt=%s: %s",
                    attempt + 1,
                    exc,
                )
                continue

            citations = filter_citations(parsed.citations, self._threshold)
            dropped = len(parsed.citations) - len(citations)
            if dropped:
                logger.info("Dropped %s low-confidence mispronunciation citation(s)", dropped)
            return ComplianceResult(
                status=parsed.status,
                notes=parsed.notes,
                citations=citations,
            )

        logger.warning(
            "Vocabulary check unparseable after %s attempt(s); degrading to warn",
            self._max_json_retries + 1,
        )
        return ComplianceResult(
            status=RESULT_WARN,
            notes=MANUAL_REVIEW_NOTE,
            citations=(),
            degraded=True,
        )


__all__ = ["MANUAL_REVIEW_NOTE", "VocabularyComplianceStage", "filter_citations"]
