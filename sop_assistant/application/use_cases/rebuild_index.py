# sop_assistant/application/use_cases/rebuild_index.py
from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Sequence

from sop_assistant.application.dto.index_dto import IndexSummary
from sop_assistant.application.fanout import gather_or_cancel
from sop_assistant.application.ports.audit_port import IndexBookkeepingPort
from sop_assistant.application.ports.embedding_port import EmbeddingPort
from sop_assistant.application.ports.vector_store_port import VectorIndexPort
from sop_assistant.domain.models import Chunk, SourceEntry
from sop_assistant.domain.services.chunking import ChunkingParams, chunk_entries

logger = logging.getLogger(__name__)


class RebuildIndex:
    """
    Full rebuild of the SOP collection from parsed entries.

    Order matters: every chunk is embedded before the old collection is
    dropped, so a failed embedding leaves the previous index in place.
    Errors propagate (administrative operation).
    """

    def __init__(
        self,
        embedding: EmbeddingPort,
        index: VectorIndexPort,
        collection: str,
        bookkeeping: IndexBookkeepingPort | None = None,
        params: ChunkingParams | None = None,
        batch_size: int = 10,
        batch_delay_s: float = 0.1,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be > 0")
        self.embedding = embedding
        self.index = index
        self.collection = collection
        self.bookkeeping = bookkeeping
        self.params = params or ChunkingParams()
        self.batch_size = batch_size
        self.batch_delay_s = batch_delay_s

    async def _embed_all(self, chunks: Sequence[Chunk]) -> list[list[float]]:
        vectors: list[list[float]] = []
        for start in range(0, len(chunks), self.batch_size):
            if start and self.batch_delay_s > 0:
                await asyncio.sleep(self.batch_delay_s)
            batch = chunks[start : start + self.batch_size]
            vectors.extend(
                await gather_or_cancel(self.embedding.embed(c.content) for c in batch)
            )
            logger.debug("Embedded %d/%d chunks", len(vectors), len(chunks))
        return vectors

    async def execute(self, entries: Sequence[SourceEntry]) -> IndexSummary:
        # 1) Chunk (pure)
        chunks = chunk_entries(entries, self.params)
        logger.info(
            "Rebuilding %s: %d entries -> %d chunks", self.collection, len(entries), len(chunks)
        )

        # 2) Embed everything before touching the collection
        vectors = await self._embed_all(chunks)

        # 3) Replace the collection
        if await asyncio.to_thread(self.index.collection_exists, self.collection):
            await asyncio.to_thread(self.index.delete_collection, self.collection)
        await asyncio.to_thread(self.index.create_collection, self.collection)
        if chunks:
            await asyncio.to_thread(
                self.index.add,
                self.collection,
                [f"sop-{i}" for i in range(len(chunks))],
                vectors,
                [c.content for c in chunks],
                [c.metadata.to_payload() for c in chunks],
            )

        # 4) Bookkeeping per source file
        files = dict(Counter(e.source_file or "unknown" for e in entries))
        if self.bookkeeping is not None:
            categories = {e.source_file or "unknown": e.category for e in entries}
            for source_file, count in files.items():
                self.bookkeeping.record_indexed_file(
                    source_file, categories.get(source_file), count
                )

        return IndexSummary(entry_count=len(entries), chunk_count=len(chunks), files=files)
