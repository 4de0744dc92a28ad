"""Extraction of the structured judgement embedded in a free-text model reply."""

from __future__ import annotations

import json
import math
from typing import Any

from contentguard.moderation.domain.exceptions import ParseError
from contentguard.moderation.domain.models import TextJudgement

_DECODER = json.JSONDecoder()


def extract_json_object(content: str) -> dict[str, Any]:
    """Return the first JSON object found in ``content``.

    Handles fenced code blocks (```json ... ```) and prose surrounding the object.
    Raises :class:`ParseError` when no object can be decoded.
    """

    text = (content or "").strip()
    if not text:
        raise ParseError("empty classifier response")

    if "```" in text:
        for part in text.split("```"):
            part = part.strip()
            if part.startswith("json"):
                part = part[4:].strip()
            if part.startswith("{"):
                try:
                    value, _ = _DECODER.raw_decode(part)
                except json.JSONDecodeError:
                    continue
                if isinstance(value, dict):
                    return value

    start = text.find("{")
    while start != -1:
        try:
            value, _ = _DECODER.raw_decode(text, start)
        except json.JSONDecodeError:
            start = text.find("{", start + 1)
            continue
        if isinstance(value, dict):
            return value
        start = text.find("{", start + 1)

    raise ParseError(f"no JSON object in classifier response: {text[:200]!r}")


def parse_text_judgement(content: str) -> TextJudgement:
    """Parse ``{is_inappropriate, categories, confidence, reasoning}`` out of a model reply."""

    data = extract_json_object(content)
    flag = data.get("is_inappropriate")
    if not isinstance(flag, bool):
        raise ParseError("is_inappropriate must be a boolean")

    categories = data.get("categories") or []
    if not isinstance(categories, list) or not all(isinstance(item, str) for item in categories):
        raise ParseError("categories must be a list of strings")

    confidence = data.get("confidence")
    if confidence is not None:
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            raise ParseError("confidence must be a number")
        confidence = float(confidence)
        if not math.isfinite(confidence):
            raise ParseError("confidence must be a finite number")

    reasoning = data.get("reasoning") or ""
    if not isinstance(reasoning, str):
        raise ParseError("reasoning must be a string")

    return TextJudgement(
        is_inappropriate=flag,
        categories=frozenset(categories),
        confidence=confidence,
        reasoning=reasoning,
    )
