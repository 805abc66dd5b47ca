"""Pydantic models for validating LLM JSON responses.

The vocabulary compliance stage runs the language model output through these
schemas so that downstream code receives normalized, type-safe objects.
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class ResponseContractError(RuntimeError):
    """Raised when the LLM response contract cannot be validated."""


class CitationPayload(BaseModel):
    type: Literal["banned_word", "mispronunciation"]
    spoken_text: str = Field(alias="spokenText")
    timestamp: Optional[float] = None
    confidence: Optional[float] = None

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @field_validator("confidence")
    @classmethod
    def clamp_confidence(cls, value: Optional[float]) -> Optional[float]:
        if value is None:
            return None
        return max(0.0, min(1.0, float(value)))

    @field_validator("timestamp")
    @classmethod
    def non_negative_timestamp(cls, value: Optional[float]) -> Optional[float]:
        if value is None:
            return None
        return max(0.0, float(value))


class VocabularyCheckResponse(BaseModel):
    status: Literal["pass", "warn", "fail"]
    notes: str = ""
    citations: List[CitationPayload] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    @field_validator("status", mode="before")
    @classmethod
    def lowercase_status(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("notes", mode="before")
    @classmethod
    def default_notes(cls, value):
        return value or ""

    @field_validator("citations", mode="before")
    @classmethod
    def drop_unrecognised_citations(cls, value: Any):
        if value is None:
            return []
        if not isinstance(value, list):
            return value
        citations = []
        for item in value:
            try:
                citations.append(CitationPayload.model_validate(item))
            except ValidationError as exc:
                logger.warning(
                    "Skipping unrecognised citation %r: %s",
                    item,
                    exc.errors()[0]["msg"],
                )
        return citations

    @classmethod
    def from_json(cls, payload: str) -> "VocabularyCheckResponse":
        cleaned = _clean_json_payload(payload)
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise ResponseContractError(f"Invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ResponseContractError("Expected a JSON object.")
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ResponseContractError(str(exc)) from exc


def _clean_json_payload(payload: str) -> str:
    """Strip Markdown code blocks and find the first/last brace to extract JSON."""
    if not payload:
        return ""

    cleaned = payload.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]

    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]

    cleaned = cleaned.strip()

    start = cleaned.find("{")
    end = cleaned.rfind("}")

    if start != -1 and end != -1 and end > start:
        cleaned = cleaned[start : end + 1]

    return cleaned


__all__ = [
    "CitationPayload",
    "ResponseContractError",
    "VocabularyCheckResponse",
]
