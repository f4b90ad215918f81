"""Confidence scoring: retrieval quality fused with answer quality.

Why: Distance alone cannot detect a generation failure (model ignoring good
context) and self-assessment alone is unreliable; both signals have to agree
before the combined score gets high.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

HIGH_CONFIDENCE_PHRASES = (
    "according to",
    "the procedure is",
    "you must",
    "the sop states",
    "as per the",
    "the steps are",
    "is responsible for",
)

LOW_CONFIDENCE_PHRASES = (
    "i'm not sure",
    "i am not sure",
    "might be",
    "possibly",
    "unclear",
    "i don't know",
    "cannot find",
    "not available",
    "no information",
)

INSUFFICIENT_INFO_PHRASES = (
    "doesn't contain enough information",
    "does not contain enough information",
)

HEURISTIC_BASELINE = 0.7
HEURISTIC_CONFIDENT = 0.85
HEURISTIC_PENALTY = 0.15
HEURISTIC_FLOOR = 0.2
HEURISTIC_INSUFFICIENT = 0.3
SHORT_ANSWER_CHARS = 50
SHORT_ANSWER_FACTOR = 0.9

HIGH_THRESHOLD = 0.7
MEDIUM_THRESHOLD = 0.4
REVIEW_THRESHOLD = 0.3

_NUMBER = re.compile(r"\d+(?:\.\d+)?|\.\d+")


@dataclass(frozen=True)
class ConfidenceWeights:
    retrieval: float = 0.6
    llm: float = 0.4

    def __post_init__(self) -> None:
        if self.retrieval < 0 or self.llm < 0:
            raise ValueError("weights must be non-negative")
        if abs(self.retrieval + self.llm - 1.0) > 1e-9:
            raise ValueError("weights must sum to 1.0")

    @classmethod
    def from_retrieval_weight(cls, retrieval: float) -> ConfidenceWeights:
        return cls(retrieval=retrieval, llm=1.0 - retrieval)


def clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, value))


def retrieval_confidence(distances: Sequence[float]) -> float:
    """``clamp(1 - mean(distances))``; 0.0 without distances.

    Assumes cosine distance. Euclidean or inner-product distances need an
    empirically derived mapping instead.
    """
    if not distances:
        return 0.0
    return clamp(1.0 - sum(distances) / len(distances))


def parse_self_assessment(reply: str) -> float | None:
    """First numeric token of the reply; values above 1 are read as percentages."""
    match = _NUMBER.search(reply or "")
    if match is None:
        return None
    value = float(match.group(0))
    if value > 1.0:
        value /= 100.0
    return clamp(value)


def _present(text: str, phrases: Sequence[str]) -> list[str]:
    return [p for p in phrases if p in text]


def heuristic_llm_confidence(answer: str) -> float:
    lowered = answer.lower()
    high = _present(lowered, HIGH_CONFIDENCE_PHRASES)
    low = _present(lowered, LOW_CONFIDENCE_PHRASES)

    score = HEURISTIC_BASELINE
    if high and not low:
        score = HEURISTIC_CONFIDENT
    elif low:
        score = max(HEURISTIC_FLOOR, score - HEURISTIC_PENALTY * len(low))

    if len(answer.strip()) < SHORT_ANSWER_CHARS:
        score *= SHORT_ANSWER_FACTOR

    if _present(lowered, INSUFFICIENT_INFO_PHRASES):
        score = HEURISTIC_INSUFFICIENT
    return clamp(score)


def combine_confidence(
    retrieval: float, llm: float, weights: ConfidenceWeights | None = None
) -> float:
    w = weights or ConfidenceWeights()
    return clamp(clamp(retrieval) * w.retrieval + clamp(llm) * w.llm)


def confidence_level(score: float) -> str:
    if score >= HIGH_THRESHOLD:
        return "high"
    if score >= MEDIUM_THRESHOLD:
        return "medium"
    return "low"


def needs_review(score: float) -> bool:
    return score < REVIEW_THRESHOLD


def preferred_confidence(score: float, floor: float = 0.95, cap: float = 0.99) -> float:
    """Curated questions are shown with at least ``floor`` confidence, never above ``cap``."""
    return min(max(score, floor), cap)
