# sop_assistant/application/use_cases/retrieve_sops.py
from __future__ import annotations

import asyncio
import logging

from sop_assistant.application.dto.query_dto import RetrievalOutcome
from sop_assistant.application.fanout import gather_or_cancel
from sop_assistant.application.ports.embedding_port import EmbeddingPort
from sop_assistant.application.ports.vector_store_port import VectorIndexPort
from sop_assistant.domain.errors import IndexUnavailable, NoResults
from sop_assistant.domain.models import QueryMatch, RetrievalResult
from sop_assistant.domain.services.merging import merge_matches, to_retrieval_results
from sop_assistant.domain.services.query_expansion import QueryExpander
from sop_assistant.domain.services.reranking import RerankParams, rerank_results

logger = logging.getLogger(__name__)

LEGACY_TOP_K = 5


class RetrieveSOPs:
    """
    Multi-variant retrieval: expand -> (embed + query) per variant in
    parallel -> merge by best distance -> keyword rerank.

    Merge is keyed by content and resolved by min distance, so completion
    order of the variant queries does not matter.
    """

    def __init__(
        self,
        embedding: EmbeddingPort,
        index: VectorIndexPort,
        collection: str,
        expander: QueryExpander | None = None,
        variant_k: int = 10,
        merge_top_n: int = 10,
        rerank: RerankParams | None = None,
    ) -> None:
        self.embedding = embedding
        self.index = index
        self.collection = collection
        self.expander = expander or QueryExpander()
        self.variant_k = variant_k
        self.merge_top_n = merge_top_n
        self.rerank = rerank or RerankParams()

    async def _ensure_collection(self) -> None:
        exists = await asyncio.to_thread(self.index.collection_exists, self.collection)
        if not exists:
            raise IndexUnavailable(self.collection)

    async def _query_variant(self, variant: str, k: int) -> list[QueryMatch]:
        vector = await self.embedding.embed(variant)
        results = await asyncio.to_thread(self.index.query, self.collection, [vector], k)
        return results[0] if results else []

    async def execute(self, question: str) -> RetrievalOutcome:
        """Raises IndexUnavailable, NoResults, or the embedding client's errors."""
        await self._ensure_collection()
        variants = self.expander.expand(question)
        logger.debug("Querying %d variants for %r", len(variants), question)

        per_variant = await gather_or_cancel(
            self._query_variant(v, self.variant_k) for v in variants
        )
        merged = merge_matches(per_variant, self.merge_top_n)
        if not merged:
            raise NoResults(question)

        results = rerank_results(question, to_retrieval_results(merged), self.rerank)
        return RetrievalOutcome(variants=variants, merged=merged, results=results)

    async def query_single(self, question: str, k: int = LEGACY_TOP_K) -> list[RetrievalResult]:
        """Legacy path: one embedding, one query, no expansion or rerank."""
        await self._ensure_collection()
        matches = await self._query_variant(question, k)
        if not matches:
            raise NoResults(question)
        return to_retrieval_results(matches)
