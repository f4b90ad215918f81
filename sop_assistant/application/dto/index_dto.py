from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class IndexSummary:
    entry_count: int
    chunk_count: int
    files: dict[str, int] = field(default_factory=dict)
