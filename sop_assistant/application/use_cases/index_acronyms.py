# sop_assistant/application/use_cases/index_acronyms.py
from __future__ import annotations

import asyncio
import logging
import re

from sop_assistant.application.acronym_cache import AcronymCache
from sop_assistant.application.fanout import gather_or_cancel
from sop_assistant.application.ports.embedding_port import EmbeddingPort
from sop_assistant.application.ports.vector_store_port import VectorIndexPort
from sop_assistant.domain.errors import IndexUnavailable
from sop_assistant.domain.models import Acronym

logger = logging.getLogger(__name__)

DEFAULT_ACRONYM_COLLECTION = "sop_acronyms"

_DOCUMENT = re.compile(r"^\s*([^:]+):\s*(.+?)(?:\s*\(([^()]*)\))?\s*$", re.DOTALL)


def acronym_document(acronym: Acronym) -> str:
    doc = f"{acronym.abbreviation.upper()}: {acronym.full_form}"
    if acronym.category:
        doc += f" ({acronym.category})"
    return doc


def parse_acronym_document(document: str) -> Acronym | None:
    m = _DOCUMENT.match(document or "")
    if m is None:
        return None
    return Acronym(
        abbreviation=m.group(1).strip(),
        full_form=m.group(2).strip(),
        category=(m.group(3) or "").strip(),
    )


class IndexAcronyms:
    """
    Re-read the acronym table and rebuild the acronym collection from it.

    Embeds everything first; the collection is only replaced once every
    embedding succeeded.
    """

    def __init__(
        self,
        cache: AcronymCache,
        embedding: EmbeddingPort,
        index: VectorIndexPort,
        collection: str = DEFAULT_ACRONYM_COLLECTION,
        batch_size: int = 10,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be > 0")
        self.cache = cache
        self.embedding = embedding
        self.index = index
        self.collection = collection
        self.batch_size = batch_size

    async def execute(self) -> int:
        acronyms = self.cache.reload()
        if not acronyms:
            logger.warning("No acronyms loaded; acronym collection left untouched")
            return 0

        documents = [acronym_document(a) for a in acronyms]
        embeddings: list[list[float]] = []
        for start in range(0, len(documents), self.batch_size):
            batch = documents[start : start + self.batch_size]
            embeddings.extend(await gather_or_cancel(self.embedding.embed(d) for d in batch))

        if await asyncio.to_thread(self.index.collection_exists, self.collection):
            await asyncio.to_thread(self.index.delete_collection, self.collection)
        await asyncio.to_thread(self.index.create_collection, self.collection)
        await asyncio.to_thread(
            self.index.add,
            self.collection,
            [f"acronym-{i}" for i in range(len(documents))],
            embeddings,
            documents,
            [
                {
                    "abbreviation": a.abbreviation.upper(),
                    "fullForm": a.full_form,
                    "category": a.category,
                }
                for a in acronyms
            ],
        )
        logger.info("Indexed %d acronyms into %s", len(documents), self.collection)
        return len(documents)


class AcronymLookup:
    """Semantic acronym lookup against the acronym collection."""

    def __init__(
        self,
        embedding: EmbeddingPort,
        index: VectorIndexPort,
        collection: str = DEFAULT_ACRONYM_COLLECTION,
    ) -> None:
        self.embedding = embedding
        self.index = index
        self.collection = collection

    async def query(self, text: str, k: int = 5) -> list[Acronym]:
        """Nearest acronyms to ``text``; empty when the collection is absent."""
        if not await asyncio.to_thread(self.index.collection_exists, self.collection):
            return []
        vector = await self.embedding.embed(text)
        try:
            results = await asyncio.to_thread(self.index.query, self.collection, [vector], k)
        except IndexUnavailable:
            return []
        found: list[Acronym] = []
        for match in results[0] if results else []:
            acronym = parse_acronym_document(match.document)
            if acronym is not None:
                found.append(acronym)
        return found
