"""Ports for the relational audit/bookkeeping store (external collaborator)."""

from typing import Protocol


class AuditSinkPort(Protocol):
    def record_recent(
        self, question: str, answer: str, user_id: str | None, confidence_pct: int
    ) -> None: ...

    def record_unanswered(
        self, question: str, user_id: str | None, status: str = "pending"
    ) -> None:
        """Queue a low-confidence question for human review."""
        ...


class IndexBookkeepingPort(Protocol):
    def record_indexed_file(
        self, source_file: str, category: str | None, entry_count: int
    ) -> None: ...
