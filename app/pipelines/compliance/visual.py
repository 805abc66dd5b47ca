"""Visual analysis stage.

Sends one frame to the vision capability and turns the free-text answer into
a :class:`FrameAnalysis`. Indicator extraction is delegated to an
``IndicatorExtractor`` so the heuristics can be replaced without touching the
stage itself.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Protocol

from app.services.llm_client import LlmInvocationError

from .capabilities import VisionCapability
from .errors import VisualAnalysisError
from .prompts import VISION_PROMPT
from .types import BrandElements, DetectedElements, FrameAnalysis, UgcIndicators

logger = logging.getLogger("app.pipelines.compliance")

_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{6}|[0-9a-fA-F]{3})\b")
_INTEGER = re.compile(r"\d+")
_LIST_SPLIT = re.compile(r"[,;]")
_BULLET_PREFIX = re.compile(r"^\s*(?:[-*•]|\d+[.)])?\s*")
_EMPTY_VALUES = frozenset({"", "none", "n/a", "na", "no", "nothing", "-"})
_YES_VALUES = ("yes", "true", "y")

# label -> attribute on the extraction result
_LIST_LABELS = {
    "logos": "logos",
    "text": "text",
    "objects": "objects",
    "scenes": "scenes",
}
_BOOLEAN_LABELS = {
    "logo visible": "logo_visible",
    "brand colors present": "brand_colors_present",
    "brand colours present": "brand_colors_present",
    "product visible": "product_visible",
    "handheld camera": "handheld_camera",
    "handheld": "handheld_camera",
    "casual setting": "casual_setting",
    "authentic feel": "authentic_feel",
    "professional lighting": "professional_lighting",
    "studio setup": "studio_setup",
}

# Fallback evidence when the model skipped a labelled answer: any of the
# groups matching (all words of a group present) sets the indicator.
_KEYWORD_FALLBACK: dict[str, tuple[tuple[str, ...], ...]] = {
    "logo_visible": (("logo",),),
    "brand_colors_present": (("brand color",), ("brand colour",)),
    "product_visible": (("product",),),
    "handheld_camera": (("handheld",), ("shaky",)),
    "casual_setting": (("home",), ("casual",)),
    "authentic_feel": (("authentic",), ("candid",)),
    "professional_lighting": (("professional", "lighting"),),
    "studio_setup": (("studio",),),
}


@dataclass(frozen=True)
class ExtractedIndicators:
    description: str
    detected_elements: DetectedElements
    brand_elements: BrandElements
    ugc_indicators: UgcIndicators


class IndicatorExtractor(Protocol):
    def extract(self, response_text: str) -> ExtractedIndicators:
        ...


def _split_list(value: str) -> tuple[str, ...]:
    items = []
    for raw in _LIST_SPLIT.split(value):
        item = raw.strip().strip(".").strip()
        if item.lower() in _EMPTY_VALUES:
            continue
        if item not in items:
            items.append(item)
    return tuple(items)


def _parse_colors(value: str) -> tuple[str, ...]:
    hex_codes = []
    for match in _HEX_COLOR.findall(value):
        code = match.upper()
        if code not in hex_codes:
            hex_codes.append(code)
    if hex_codes:
        return tuple(hex_codes)
    return _split_list(value)


def _parse_people(value: str) -> int:
    match = _INTEGER.search(value)
    return int(match.group()) if match else 0


def _parse_answer(value: str) -> bool:
    return value.strip().lower().startswith(_YES_VALUES)


class KeywordIndicatorExtractor:
    """Deterministic extraction from the labelled-line answer format.

    Labelled yes/no answers win; unanswered indicators fall back to keyword
    matching over the unlabelled prose. Every indicator ends up ``True`` or
    ``False``.
    """

    def extract(self, response_text: str) -> ExtractedIndicators:
        lists: dict[str, tuple[str, ...]] = {}
        answers: dict[str, bool] = {}
        colors: tuple[str, ...] = ()
        people = 0
        description = ""
        prose: list[str] = []

        for raw_line in (response_text or "").splitlines():
            line = _BULLET_PREFIX.sub("", raw_line).strip()
            if not line:
                continue
            label, sep, value = line.partition(":")
            key = label.strip().strip("*").strip().lower()
            if not sep:
                prose.append(line)
                continue

            if key == "description":
                description = value.strip()
                prose.append(description)
            elif key in _LIST_LABELS:
                lists[_LIST_LABELS[key]] = _split_list(value)
            elif key in ("colors", "colours"):
                colors = _parse_colors(value)
            elif key == "people":
                people = _parse_people(value)
            elif key in _BOOLEAN_LABELS:
                answers.setdefault(_BOOLEAN_LABELS[key], _parse_answer(value))
            else:
                prose.append(line)

        haystack = " ".join(prose).lower()

        def indicator(name: str) -> bool:
            if name in answers:
                return answers[name]
            return any(
                all(word in haystack for word in group)
                for group in _KEYWORD_FALLBACK[name]
            )

        detected = DetectedElements(
            logos=lists.get("logos", ()),
            text=lists.get("text", ()),
            colors=colors,
            objects=lists.get("objects", ()),
            people=people,
            scenes=lists.get("scenes", ()),
        )
        brand = BrandElements(
            logo_visible=indicator("logo_visible"),
            brand_colors_present=indicator("brand_colors_present"),
            product_visible=indicator("product_visible"),
        )
        ugc = UgcIndicators(
            handheld_camera=indicator("handheld_camera"),
            casual_setting=indicator("casual_setting"),
            authentic_feel=indicator("authentic_feel"),
            professional_lighting=indicator("professional_lighting"),
            studio_setup=indicator("studio_setup"),
        )
        return ExtractedIndicators(
            description=description or (response_text or "").strip(),
            detected_elements=detected,
            brand_elements=brand,
            ugc_indicators=ugc,
        )


class VisualAnalysisStage:
    """Run one frame through the vision capability."""

    def __init__(
        self,
        vision: VisionCapability,
        extractor: Optional[IndicatorExtractor] = None,
        *,
        frame_interval_ms: int = 1000,
    ) -> None:
        self._vision = vision
        self._extractor = extractor or KeywordIndicatorExtractor()
        self._frame_interval_ms = frame_interval_ms

    async def analyze(
        self,
        image_bytes: bytes,
        mime_type: str,
        frame_index: int = 0,
    ) -> FrameAnalysis:
        if not image_bytes:
            raise VisualAnalysisError("Image payload is empty.")

        try:
            response_text = await self._vision.describe_image(
                image_bytes, mime_type, prompt=VISION_PROMPT
            )
        except LlmInvocationError as exc:
            raise VisualAnalysisError(f"Vision capability failed: {exc}") from exc

        if not isinstance(response_text, str) or not response_text.strip():
            raise VisualAnalysisError("Vision capability returned an empty response.")

        extracted = self._extractor.extract(response_text)
        logger.debug(
            "Frame %s analysed: logo=%s colors=%s",
            frame_index,
            extracted.brand_elements.logo_visible,
            len(extracted.detected_elements.colors),
        )
        return FrameAnalysis(
            frame_number=frame_index,
            timestamp_ms=frame_index * self._frame_interval_ms,
            visual_description=extracted.description,
            detected_elements=extracted.detected_elements,
            brand_elements=extracted.brand_elements,
            ugc_indicators=extracted.ugc_indicators,
        )


__all__ = [
    "ExtractedIndicators",
    "IndicatorExtractor",
    "KeywordIndicatorExtractor",
    "VisualAnalysisStage",
]
