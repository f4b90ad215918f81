from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from sop_assistant.domain.models import Chunk, ChunkMetadata, SourceEntry

MAX_CHUNK_WORDS = 400
OVERLAP_WORDS = 75
MIN_CHUNK_WORDS = 50

DEFAULT_TITLE = "SOP Entry"


# ---------- Params ----------


@dataclass(frozen=True)
class ChunkingParams:
    max_words: int = MAX_CHUNK_WORDS
    overlap_words: int = OVERLAP_WORDS
    min_words: int = MIN_CHUNK_WORDS

    def __post_init__(self) -> None:
        if self.max_words <= 0:
            raise ValueError("max_words must be > 0")
        if not (0 <= self.overlap_words < self.max_words):
            raise ValueError("overlap_words must be in [0, max_words)")

    @property
    def step(self) -> int:
        return self.max_words - self.overlap_words


# ---------- Window planning ----------


def plan_windows(word_count: int, p: ChunkingParams) -> list[tuple[int, int]]:
    """Return (start, end) word offsets of the sliding windows for one entry.

    The window that reaches the end of the entry is the last one, so two
    consecutive windows always share exactly ``overlap_words`` words.
    """
    windows: list[tuple[int, int]] = []
    start = 0
    while start < word_count:
        end = min(start + p.max_words, word_count)
        is_final = end >= word_count
        if end - start < p.min_words and not is_final:
            start += p.step
            continue
        windows.append((start, end))
        if is_final:
            break
        start += p.step
    return windows


def _prefixed(title: str, body: str) -> str:
    return f"{title}\n\n{body}"


def chunk_entry(entry: SourceEntry, params: ChunkingParams | None = None) -> list[Chunk]:
    p = params or ChunkingParams()
    title = entry.title if entry.title.strip() else DEFAULT_TITLE
    words = entry.content.split()
    if not words:
        return []

    if len(words) <= p.max_words:
        meta = ChunkMetadata(
            title=title,
            source_file=entry.source_file,
            category=entry.category,
            section=entry.section,
        )
        return [Chunk(title=title, content=_prefixed(title, entry.content), metadata=meta)]

    windows = plan_windows(len(words), p)
    total = len(windows)
    chunks: list[Chunk] = []
    for i, (start, end) in enumerate(windows):
        part_title = f"{title} (Part {i + 1}/{total})"
        meta = ChunkMetadata(
            title=part_title,
            source_file=entry.source_file,
            category=entry.category,
            section=entry.section,
            chunk_index=i,
            total_chunks=total,
        )
        body = " ".join(words[start:end])
        chunks.append(Chunk(title=part_title, content=_prefixed(part_title, body), metadata=meta))
    return chunks


def chunk_entries(
    entries: Iterable[SourceEntry], params: ChunkingParams | None = None
) -> list[Chunk]:
    """Pipeline: entry -> word windows -> titled chunks (order preserved)."""
    p = params or ChunkingParams()
    result: list[Chunk] = []
    for entry in entries:
        result.extend(chunk_entry(entry, p))
    return result


# Properties:
#
# - No I/O, no globals; re-run wholesale on every index rebuild.
# - Word-window overlap keeps procedure steps that straddle a boundary retrievable.
# - Title prefix on every chunk (improves attribution and title-boost reranking).
