"""Turn free-form LLM output into a MatchJudgement.

Each stage is a pure function that returns a judgement, or ``None`` when
the text is inconclusive for that stage. Adapters compose the stages they
need; ``PARSE_FAILURE`` is the deterministic result when none succeeds.
"""

import json
import re

from sourcevalidator.judging.provider_base import MatchJudgement

NO_REASONING = "No reasoning provided"
PARSE_FAILURE_REASONING = "Failed to parse LLM response"
HEURISTIC_KEYWORDS = ("true", "matches", "relevant")
HEURISTIC_REASONING_CHARS = 200

_FENCE_OPEN_RE = re.compile(r"^```(?:json)?\s*")
_FENCE_CLOSE_RE = re.compile(r"\s*```$")
_MATCHES_OBJECT_RE = re.compile(r'\{[\s\S]*"matches"[\s\S]*\}')


def parse_failure() -> MatchJudgement:
    return MatchJudgement(matches=False, reasoning=PARSE_FAILURE_REASONING)


def _coerce_matches(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def judgement_from_dict(data: dict) -> MatchJudgement:
    """Build a judgement from a decoded JSON object, filling defaults."""
    reasoning = data.get("reasoning")
    return MatchJudgement(
        matches=_coerce_matches(data.get("matches", False)),
        reasoning=str(reasoning) if reasoning else NO_REASONING,
    )


def parse_strict(raw: str) -> MatchJudgement | None:
    """Parse the whole text as a JSON object.

    Markdown code fences around the object are tolerated.
    """
    cleaned = raw.strip()
    cleaned = _FENCE_OPEN_RE.sub("", cleaned)
    cleaned = _FENCE_CLOSE_RE.sub("", cleaned)
    try:
        data = json.loads(cleaned.strip())
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    return judgement_from_dict(data)


def extract_matches_object(raw: str) -> str | None:
    """Return the outermost ``{...}`` span that mentions ``"matches"``."""
    match = _MATCHES_OBJECT_RE.search(raw)
    return match.group() if match else None


def keyword_heuristic(raw: str) -> MatchJudgement:
    """Last-resort verdict from keywords in the generated text."""
    lowered = raw.lower()
    matches = any(keyword in lowered for keyword in HEURISTIC_KEYWORDS)
    return MatchJudgement(matches=matches, reasoning=raw[:HEURISTIC_REASONING_CHARS])
