"""Prompt construction for the vision and language capabilities.

The vision prompt asks for labelled lines so the keyword extractor in
``visual`` can read answers deterministically. The vocabulary prompt keeps
the product policy: strict on banned terms, lenient on pronunciation.
"""

from __future__ import annotations

import json
from typing import Sequence

from app.domain.models import BrandConfig

from .types import Transcript

VISION_PROMPT = """Analyze this image/frame in detail. Provide a comprehensive visual analysis.

Answer using exactly these labelled lines, one per line:

Description: <what you see, in detail>
Logos: <brand logos or watermarks, comma separated, or none>
Text: <visible text, captions or labels, comma separated, or none>
Colors: <dominant colors as HEX codes, comma separated>
Objects: <products, props or items, comma separated, or none>
People: <number of people visible>
Scenes: <location, setting or environment, comma separated>
Logo visible: <yes/no>
Brand colors present: <yes/no>
Product visible: <yes/no>
Handheld camera: <yes/no, does it appear handheld or shaky rather than stabilized>
Casual setting: <yes/no, is the setting casual or at home rather than a studio>
Authentic feel: <yes/no, does it feel authentic or candid rather than staged>
Professional lighting: <yes/no, is the lighting professional rather than natural>
Studio setup: <yes/no, is there evidence of a studio setup>
"""


def _format_words(transcript: Transcript, limit: int) -> str:
    if not transcript.words or limit <= 0:
        return ""
    words = [word.to_dict() for word in transcript.words[:limit]]
    return (
        f"\nDetailed word-level data (first {limit} words, times in milliseconds):\n"
        f"{json.dumps(words, indent=2)}\n"
    )


def _format_banned_terms(terms: Sequence[str]) -> str:
    return json.dumps([term for term in terms if term and term.strip()])


def build_vocabulary_prompt(
    transcript: Transcript,
    brand: BrandConfig,
    *,
    max_words: int = 100,
) -> str:
    """Render the single compliance request sent to the language capability."""

    pronunciation = (
        f" with phonetic pronunciation '{brand.phonetic_pronunciation}'"
        if brand.phonetic_pronunciation
        else ""
    )

    return f"""You are an expert brand compliance analyst. The correct brand name is '{brand.brand_name}'{pronunciation}.

IMPORTANT: Only flag CLEAR mispronunciations where the brand name is obviously said incorrectly. Common variations, accents, or slight differences should be considered acceptable. For example:
- "Ben and Jerry's" vs "Ben & Jerry's" is acceptable
- Minor accent differences are acceptable
- If the brand name sounds correct when spoken naturally, it should pass

Banned terms to check: {_format_banned_terms(brand.banned_terms)}.

Please review the following audio transcript and identify:

1. Banned Words: Any words from the banned terms list (be strict about these)
2. Brand Name Mispronunciation: ONLY flag if the brand name is clearly mispronounced in a way that would confuse listeners about the brand identity

Here is the transcript to analyze:
{transcript.text}
{_format_words(transcript, max_words)}
Return a JSON object:
- "status": 'pass' if no issues; 'warn' for minor issues; 'fail' for major issues
- "notes": Brief explanation of your decision
- "citations": Array of issues found:
  - "type": 'banned_word' or 'mispronunciation'
  - "spoken_text": the exact problematic text
  - "timestamp": time in milliseconds
  - "confidence": your confidence level (0-1) that this is actually an issue

Only flag mispronunciations you are highly confident (>0.8) are actually wrong.

Return ONLY the JSON object."""


__all__ = ["VISION_PROMPT", "build_vocabulary_prompt"]
