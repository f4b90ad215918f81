"""Pure domain functions for keyword-boost reranking.

Why: Embedding similarity often ranks a verbose, loosely related passage
above a short passage whose *title* names exactly what the user asked about.
A title-overlap boost corrects that without retraining anything.

Functions:
- question_terms: Lowercase word tokens longer than 2 characters
- keyword_boost: Additive boost for one passage
- sort_by_scores_desc: Stable descending sort by scores
- rerank_results: Boost, cap at 1.0 and re-sort
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import TypeVar

from sop_assistant.domain.models import RetrievalResult

T = TypeVar("T")

_TOKEN = re.compile(r"\w+")


@dataclass(frozen=True)
class RerankParams:
    title_boost: float = 0.15
    content_boost: float = 0.03
    min_term_length: int = 3

    def __post_init__(self) -> None:
        if self.title_boost < 0 or self.content_boost < 0:
            raise ValueError("boosts must be non-negative")


def question_terms(question: str, min_length: int = 3) -> list[str]:
    """Unique lowercase terms, in order of first appearance.

    Examples:
        >>> question_terms("How do I update the KYC status?")
        ['how', 'update', 'the', 'kyc', 'status']
    """
    seen: dict[str, None] = {}
    for token in _TOKEN.findall(question.lower()):
        if len(token) >= min_length:
            seen.setdefault(token, None)
    return list(seen)


def keyword_boost(terms: Sequence[str], title: str, content: str, p: RerankParams) -> float:
    title_lower = title.lower()
    content_lower = content.lower()
    boost = 0.0
    for term in terms:
        if term in title_lower:
            boost += p.title_boost
        elif term in content_lower:
            boost += p.content_boost
    return boost


def sort_by_scores_desc(items: Sequence[T], scores: Sequence[float]) -> list[T]:
    """Stable sort (descending) by scores, pure & deterministic.

    Examples:
        >>> sort_by_scores_desc(["a", "b", "c"], [0.2, 0.9, 0.5])
        ['b', 'c', 'a']
    """
    pairs: list[tuple[float, T]] = list(zip(scores, items, strict=True))
    pairs.sort(key=lambda p: p[0], reverse=True)
    return [it for _, it in pairs]


def rerank_results(
    question: str,
    results: Sequence[RetrievalResult],
    params: RerankParams | None = None,
) -> list[RetrievalResult]:
    """Add title/content keyword boosts to similarity and re-sort.

    Never lowers a similarity and never exceeds 1.0; ties keep input order.
    """
    p = params or RerankParams()
    terms = question_terms(question, p.min_term_length)
    boosted: list[RetrievalResult] = []
    for r in results:
        bump = keyword_boost(terms, r.metadata.title, r.content, p)
        similarity = max(r.similarity, min(1.0, r.similarity + bump))
        boosted.append(replace(r, similarity=similarity))
    return sort_by_scores_desc(boosted, [r.similarity for r in boosted])
