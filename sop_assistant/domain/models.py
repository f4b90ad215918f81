# sop_assistant/domain/models.py
# Domain models must be pure (no I/O, no external libs)
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SourceEntry:
    """One logical unit extracted from an SOP document (task row, heading section)."""

    title: str
    content: str
    category: str = "General"
    section: str = ""
    source_file: str = ""


@dataclass(frozen=True)
class ChunkMetadata:
    """
    Fixed metadata record stored alongside every chunk in the vector index.

    - title:         chunk title (with "(Part i/N)" suffix for split entries)
    - source_file:   document the entry was parsed from
    - category:      sheet name / document name
    - section:       serial number or heading label
    - chunk_index:   0-based position within the entry (split entries only)
    - total_chunks:  number of chunks the entry was split into (split entries only)
    """

    title: str
    source_file: str = ""
    category: str = "General"
    section: str = ""
    chunk_index: int | None = None
    total_chunks: int | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "title": self.title,
            "sourceFile": self.source_file,
            "category": self.category,
            "section": self.section,
        }
        # Chroma rejects None metadata values
        if self.chunk_index is not None:
            payload["chunkIndex"] = self.chunk_index
        if self.total_chunks is not None:
            payload["totalChunks"] = self.total_chunks
        return payload

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None) -> ChunkMetadata:
        data = payload or {}
        chunk_index = data.get("chunkIndex")
        total_chunks = data.get("totalChunks")
        return cls(
            title=str(data.get("title") or ""),
            source_file=str(data.get("sourceFile") or ""),
            category=str(data.get("category") or "General"),
            section=str(data.get("section") or ""),
            chunk_index=int(chunk_index) if chunk_index is not None else None,
            total_chunks=int(total_chunks) if total_chunks is not None else None,
        )


@dataclass(frozen=True)
class Chunk:
    """Bounded-size slice of a SourceEntry; the unit stored in the vector index."""

    title: str
    content: str
    metadata: ChunkMetadata


@dataclass(frozen=True)
class QueryMatch:
    """Raw hit from one variant query (lower distance = more similar)."""

    document: str
    distance: float
    metadata: ChunkMetadata


@dataclass(frozen=True)
class RetrievalResult:
    """Merged/reranked passage; lives for one query call only."""

    id: str
    content: str
    metadata: ChunkMetadata
    similarity: float


@dataclass(frozen=True)
class Acronym:
    abbreviation: str
    full_form: str
    category: str = ""


@dataclass(frozen=True)
class ConfidenceBreakdown:
    retrieval: float
    llm: float
    combined: float
    used_self_assessment: bool = False


@dataclass(frozen=True)
class GroundingResult:
    is_grounded: bool
    confidence: float
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class AcronymValidation:
    text: str
    corrections: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Answer:
    """User-facing answer. Terminal failures degrade to confidence 0.0."""

    answer: str
    confidence: float
    sources: list[str] = field(default_factory=list)
    confidence_level: str = "low"
    corrections: list[str] = field(default_factory=list)
    grounding_warnings: list[str] = field(default_factory=list)
