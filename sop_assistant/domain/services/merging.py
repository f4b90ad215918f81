# sop_assistant/domain/services/merging.py
# Pure domain services: no I/O, deterministic, no external libraries.
from __future__ import annotations

from collections.abc import Iterable, Sequence

from sop_assistant.domain.models import QueryMatch, RetrievalResult

DEDUP_PREFIX_CHARS = 200


def dedup_key(document: str, prefix_chars: int = DEDUP_PREFIX_CHARS) -> str:
    return document[:prefix_chars]


def distance_to_similarity(distance: float) -> float:
    """Cosine distance -> similarity in [0, 1]."""
    return max(0.0, min(1.0, 1.0 - distance))


def _better(candidate: QueryMatch, current: QueryMatch) -> bool:
    if candidate.distance != current.distance:
        return candidate.distance < current.distance
    return candidate.document < current.document


def merge_matches(
    results_per_variant: Iterable[Sequence[QueryMatch]],
    top_n: int,
    prefix_chars: int = DEDUP_PREFIX_CHARS,
) -> list[QueryMatch]:
    """
    Flatten hits from every variant query, keep the lowest-distance hit per
    document prefix, sort ascending by distance and truncate.

    The same chunk can come back under different store ids across variant
    queries, so the text prefix (not the id) is the correlation key.
    Output does not depend on the order of the variant lists.
    """
    if top_n <= 0:
        return []
    best: dict[str, QueryMatch] = {}
    for matches in results_per_variant:
        for match in matches:
            key = dedup_key(match.document, prefix_chars)
            current = best.get(key)
            if current is None or _better(match, current):
                best[key] = match
    ordered = sorted(best.items(), key=lambda kv: (kv[1].distance, kv[0]))
    return [m for _, m in ordered[:top_n]]


def to_retrieval_results(merged: Sequence[QueryMatch]) -> list[RetrievalResult]:
    return [
        RetrievalResult(
            id=f"result-{i}",
            content=m.document,
            metadata=m.metadata,
            similarity=distance_to_similarity(m.distance),
        )
        for i, m in enumerate(merged)
    ]


def merge_query_results(
    results_per_variant: Iterable[Sequence[QueryMatch]],
    top_n: int,
    prefix_chars: int = DEDUP_PREFIX_CHARS,
) -> list[RetrievalResult]:
    return to_retrieval_results(merge_matches(results_per_variant, top_n, prefix_chars))
