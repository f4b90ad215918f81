# sop_assistant/application/use_cases/build_context.py
from __future__ import annotations

import logging

from sop_assistant.application.acronym_cache import AcronymCache
from sop_assistant.application.dto.query_dto import RAGContext, RetrievalOutcome
from sop_assistant.application.prompts import format_sop_context
from sop_assistant.application.use_cases.index_acronyms import AcronymLookup
from sop_assistant.domain.errors import DomainError
from sop_assistant.domain.models import Acronym
from sop_assistant.domain.services.acronym_validation import find_acronyms

logger = logging.getLogger(__name__)


class BuildRAGContext:
    """Top-K passages + the acronyms relevant to them and to the question."""

    def __init__(
        self,
        cache: AcronymCache,
        lookup: AcronymLookup | None = None,
        top_k: int = 5,
        acronym_k: int = 5,
    ) -> None:
        self.cache = cache
        self.lookup = lookup
        self.top_k = top_k
        self.acronym_k = acronym_k

    async def _semantic_acronyms(self, question: str) -> list[Acronym]:
        if self.lookup is None:
            return []
        try:
            return await self.lookup.query(question, self.acronym_k)
        except DomainError as ex:
            # acronym context is optional
            logger.warning("Acronym lookup failed: %s", ex)
            return []

    async def execute(self, question: str, retrieval: RetrievalOutcome) -> RAGContext:
        passages = retrieval.results[: self.top_k]
        sop_context = format_sop_context(passages)

        merged: dict[str, Acronym] = {}
        for acronym in find_acronyms(sop_context, self.cache.lookup()):
            merged.setdefault(acronym.abbreviation.upper(), acronym)
        for acronym in await self._semantic_acronyms(question):
            merged.setdefault(acronym.abbreviation.upper(), acronym)

        return RAGContext(
            retrieval=retrieval,
            passages=passages,
            sop_context=sop_context,
            acronyms=list(merged.values()),
        )
