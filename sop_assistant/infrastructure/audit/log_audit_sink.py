"""Audit/bookkeeping adapters that write to the application log.

The relational audit store lives outside this service; these adapters keep
the ports satisfied when it is not wired in.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("sop_assistant.audit")


class LoggingAuditSink:
    def record_recent(
        self, question: str, answer: str, user_id: str | None, confidence_pct: int
    ) -> None:
        logger.info(
            "recent question user=%s confidence=%d%% question=%r", user_id, confidence_pct, question
        )

    def record_unanswered(
        self, question: str, user_id: str | None, status: str = "pending"
    ) -> None:
        logger.warning(
            "unanswered question user=%s status=%s question=%r", user_id, status, question
        )


class LoggingIndexBookkeeping:
    def record_indexed_file(self, source_file: str, category: str | None, entry_count: int) -> None:
        logger.info("indexed file=%s category=%s entries=%d", source_file, category, entry_count)
