"""Turn raw model text into a validated ``AnalysisResult``.

Models wrap their JSON in all sorts of ways even when told not to: a
``<think>`` block from reasoning models, a fenced code block with or
without a language tag, stray whitespace. ``clean_response_text`` peels
those off in a fixed order; ``normalize`` parses and validates what is left.
"""

from __future__ import annotations

import logging
import re

from pydantic import ValidationError

from core.errors import ContractViolationError
from core.schemas import AnalysisResult
from core.settings import Language

logger = logging.getLogger("st.llm.normalizer")

_THINK_BLOCK_RE = re.compile(r"<think>.*?</think>", re.DOTALL)
_OPENING_FENCE_RE = re.compile(r"^```[\w+-]*")
_CLOSING_FENCE_RE = re.compile(r"```$")


def clean_response_text(raw_text: str) -> str:
    """Strip reasoning traces and code fences around the JSON body."""
    cleaned = (raw_text or "").strip()
    cleaned = _THINK_BLOCK_RE.sub("", cleaned).strip()
    if cleaned.startswith("```"):
        cleaned = _OPENING_FENCE_RE.sub("", cleaned, count=1)
        cleaned = _CLOSING_FENCE_RE.sub("", cleaned.rstrip(), count=1)
    return cleaned.strip()


def normalize(raw_text: str, language: Language | str = Language.EN) -> AnalysisResult:
    """Parse model output into an AnalysisResult or raise ContractViolationError."""
    cleaned = clean_response_text(raw_text)
    logger.debug("Cleaned model output (%d chars): %s", len(cleaned), cleaned)
    if not cleaned:
        raise ContractViolationError("empty response", raw_text=raw_text or "", language=language)
    try:
        return AnalysisResult.model_validate_json(cleaned)
    except ValidationError as exc:
        raise ContractViolationError(
            f"{exc.error_count()} validation error(s): {exc.errors()[0]['msg']}",
            raw_text=raw_text,
            language=language,
        ) from exc
