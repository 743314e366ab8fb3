"""
Response Normalizer - Coerce LLM completion text into parseable JSON.

Models are asked to "return ONLY JSON" but routinely wrap it in markdown
fences, use single-quoted keys, emit Python booleans or add commentary
around the payload. The normalizer tries a direct parse, then runs a fixed
pipeline of repair stages (re-parsing after each one that changed the text)
and always hands back a string that parses:

1. Strip a markdown code fence
2. Strip a single pair of backticks
3. Cut the JSON object/array span out of surrounding prose
4. Double-quote single-quoted keys
5. Lowercase Python-style booleans

If the result still does not parse, a fallback object is returned instead
(with any "feedback" text recovered from the wreckage).
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)

EMPTY_RESULT = "{}"

DEFAULT_FALLBACK: dict[str, Any] = {
    "correct": False,
    "feedback": "Unable to process response. Please try again.",
}

OPENING_FENCE_PATTERN = re.compile(r"^```[A-Za-z0-9_+-]*[ \t]*(?:\r?\n)?")
FENCE = "```"
JSON_SPAN_DELIMITERS = (("{", "}"), ("[", "]"))
SINGLE_QUOTED_KEY_PATTERN = re.compile(r"'([^']+)':")
TRUE_PATTERN = re.compile(r":\s*True")
FALSE_PATTERN = re.compile(r":\s*False")
FEEDBACK_PATTERN = re.compile(r'"feedback":\s*"([^"]*)"')


def strip_code_fence(text: str) -> str:
    """Remove an opening ``` (with optional language tag) and a closing ```."""
    text = OPENING_FENCE_PATTERN.sub("", text, count=1)
    if text.endswith(FENCE):
        text = text[: -len(FENCE)].rstrip()
    return text


def strip_backticks(text: str) -> str:
    """Remove one backtick from each end when both ends carry one."""
    if len(text) >= 2 and text.startswith("`") and text.endswith("`"):
        return text[1:-1].strip()
    return text


def extract_json_span(text: str) -> str:
    """
    Keep only the first '{'/'[' through the last '}'/']'.

    The opening character decides the closing one: an object span runs
    to the last '}', an array span to the last ']'. Whichever valid span
    starts earlier wins. No brace balancing is attempted.
    """
    best: tuple[int, int] | None = None
    for opening, closing in JSON_SPAN_DELIMITERS:
        start = text.find(opening)
        end = text.rfind(closing)
        if start == -1 or end <= start:
            continue
        if best is None or start < best[0]:
            best = (start, end)

    if best is None:
        return text
    start, end = best
    return text[start : end + 1]


def quote_single_quoted_keys(text: str) -> str:
    """Rewrite 'key': as "key":."""
    return SINGLE_QUOTED_KEY_PATTERN.sub(r'"\1":', text)


def lowercase_booleans(text: str) -> str:
    """Rewrite ': True' / ': False' as JSON booleans."""
    text = TRUE_PATTERN.sub(": true", text)
    return FALSE_PATTERN.sub(": false", text)


# Order matters: fence handling must see the raw edges of the text
REPAIR_STAGES: tuple[tuple[str, Callable[[str], str]], ...] = (
    ("stripped_code_fence", strip_code_fence),
    ("stripped_backticks", strip_backticks),
    ("extracted_json_span", extract_json_span),
    ("quoted_keys", quote_single_quoted_keys),
    ("lowercased_booleans", lowercase_booleans),
)


@dataclass
class NormalizerResult:
    """Outcome of a normalization run.

    ``text`` is always parseable JSON. ``fallback_used`` tells real model
    data apart from a placeholder substituted after the repairs failed;
    in that case ``cleaned`` holds the repaired model text that did not parse.
    """

    success: bool
    text: str
    data: Any = None
    fallback_used: bool = False
    repairs_applied: list[str] = field(default_factory=list)
    error: str | None = None
    cleaned: str | None = None


class ResponseNormalizer:
    """Extract and repair JSON from model output."""

    def __init__(self, fallback: dict[str, Any] | None = None):
        self.fallback = dict(fallback if fallback is not None else DEFAULT_FALLBACK)

    def normalize(self, raw_output: str | None) -> NormalizerResult:
        """
        Clean raw model output into parseable JSON text.

        Args:
            raw_output: Raw completion text (may be empty or None)

        Returns:
            NormalizerResult whose ``text`` always parses as JSON
        """
        if not raw_output:
            return NormalizerResult(success=True, text=EMPTY_RESULT, data={})

        cleaned = raw_output.strip()
        repairs: list[str] = []

        # Already-valid JSON is returned untouched
        result = self._try_parse(cleaned, repairs)
        if result.success:
            return result

        for name, stage in REPAIR_STAGES:
            repaired = stage(cleaned)
            if repaired == cleaned:
                continue
            repairs.append(name)
            cleaned = repaired
            result = self._try_parse(cleaned, repairs)
            if result.success:
                return result

        logger.error("Failed to parse JSON after cleaning: %s", result.error)
        logger.debug("Raw input: %r", raw_output)
        logger.debug("Cleaned output: %r", cleaned)
        return self._fallback(cleaned, repairs, result.error or "")

    def parse(self, raw_output: str | None) -> Any:
        """Normalize and return the decoded value (fallback object on failure)."""
        return self.normalize(raw_output).data

    def _try_parse(self, text: str, repairs: list[str]) -> NormalizerResult:
        """Attempt to parse text as JSON."""
        try:
            data = json.loads(text)
        except (ValueError, RecursionError) as e:
            return NormalizerResult(success=False, text=text, error=str(e))
        return NormalizerResult(
            success=True,
            text=text,
            data=data,
            repairs_applied=list(repairs),
        )

    def _fallback(self, cleaned: str, repairs: list[str], error: str) -> NormalizerResult:
        """Build the placeholder result, recovering feedback text when present."""
        data = dict(self.fallback)
        if '"feedback"' in cleaned:
            match = FEEDBACK_PATTERN.search(cleaned)
            if match:
                data["feedback"] = match.group(1)
                repairs = [*repairs, "recovered_feedback"]

        return NormalizerResult(
            success=False,
            text=json.dumps(data),
            data=data,
            fallback_used=True,
            repairs_applied=repairs,
            error=error,
            cleaned=cleaned,
        )


_default_normalizer = ResponseNormalizer()


def normalize(raw: str | None) -> str:
    """Return ``raw`` cleaned into JSON text, or the default fallback object."""
    return _default_normalizer.normalize(raw).text
