# sop_assistant/application/dto/query_dto.py
from __future__ import annotations

from dataclasses import dataclass, field

from sop_assistant.domain.models import Acronym, QueryMatch, RetrievalResult


@dataclass(frozen=True)
class AskRequest:
    """
    DTO for asking a question.

    - question: user question (non-empty)
    - user_id: requesting user, recorded in the audit trail
    - is_preferred: question was picked from the curated list
    """

    question: str
    user_id: str | None = None
    is_preferred: bool = False


@dataclass(frozen=True)
class RetrievalOutcome:
    """Merged + reranked passages for one question."""

    variants: list[str]
    merged: list[QueryMatch]
    results: list[RetrievalResult]

    @property
    def distances(self) -> list[float]:
        return [m.distance for m in self.merged]


@dataclass(frozen=True)
class RAGContext:
    retrieval: RetrievalOutcome
    passages: list[RetrievalResult]
    sop_context: str
    acronyms: list[Acronym] = field(default_factory=list)
