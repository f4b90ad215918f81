"""Candidate FAQ questions derived from document structure and LLM replies.

Structure-based questions reuse the exact wording of titles and ``Task:``
lines, so they tend to round-trip through retrieval with high confidence.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Sequence

from sop_assistant.domain.models import SourceEntry

MAX_STRUCTURE_QUESTIONS = 10
MAX_AI_QUESTIONS = 12
MAX_ADDITIONAL_QUESTIONS = 15

_TASK_LINE = re.compile(r"Task:\s*(.+?)(?:\n|$)", re.IGNORECASE)
_JSON_ARRAY = re.compile(r"\[[\s\S]*?\]")
_NUMBERED = re.compile(r"^\d+[.)]\s*")
_BULLET = re.compile(r"^[-*]\s*")


def _task_of(entry: SourceEntry) -> str | None:
    m = _TASK_LINE.search(entry.content or "")
    return m.group(1).strip() if m else None


def _append_unique(questions: list[str], question: str, limit: int) -> None:
    if question not in questions and len(questions) < limit:
        questions.append(question)


def structure_questions(
    entries: Sequence[SourceEntry], limit: int = MAX_STRUCTURE_QUESTIONS
) -> list[str]:
    questions: list[str] = []
    for entry in entries:
        title = entry.title or ""
        if 10 < len(title) < 100:
            _append_unique(questions, f"How do I {title.lower()}?", limit)
        task = _task_of(entry)
        if task and 10 < len(task) < 150:
            lowered = task.lower()
            for q in (
                f"How do I {lowered}?",
                f"What is the procedure for {lowered}?",
                f"What are the steps to {lowered}?",
            ):
                _append_unique(questions, q, limit)
    return questions[:limit]


def additional_questions(
    entries: Sequence[SourceEntry], limit: int = MAX_ADDITIONAL_QUESTIONS
) -> list[str]:
    """More specific phrasings, used when too few first-round questions pass."""
    tasks: list[str] = []
    for entry in entries:
        task = _task_of(entry) or entry.title or ""
        if 10 < len(task) < 100 and task not in tasks:
            tasks.append(task)

    questions: list[str] = []
    for task in tasks:
        lowered = task.lower()
        for q in (
            f"What is the exact procedure for {lowered}?",
            f"What are the specific steps to {lowered}?",
            f"Who is responsible for {lowered}?",
            f"What tool is used for {lowered}?",
        ):
            _append_unique(questions, q, limit)
    return questions


def content_sample(
    entries: Sequence[SourceEntry], max_entries: int = 20, max_chars: int = 3000
) -> str:
    parts: list[str] = []
    for entry in entries[:max_entries]:
        lines: list[str] = []
        if entry.title:
            lines.append(f"Title: {entry.title}")
        if entry.content:
            lines.append(" ".join(entry.content.split("\n")[:3]))
        if lines:
            parts.append("\n".join(lines))
    return "\n\n".join(parts)[:max_chars]


def questions_from_text(text: str) -> list[str]:
    """Question-like lines (plain, numbered or bulleted) from free text."""
    out: list[str] = []
    for raw in text.split("\n"):
        line = raw.strip()
        if not line.endswith("?"):
            continue
        line = _BULLET.sub("", _NUMBERED.sub("", line)).strip()
        if len(line) > 10:
            out.append(line)
    return out


def _clean(questions: Iterable[object], limit: int) -> list[str]:
    cleaned: list[str] = []
    for q in questions:
        if not isinstance(q, str) or len(q.strip()) <= 15:
            continue
        q = q.strip().strip("\"'")
        if q.endswith("?") and len(q) > 20 and q not in cleaned:
            cleaned.append(q)
    return cleaned[:limit]


def parse_ai_questions(reply: str, limit: int = MAX_AI_QUESTIONS) -> list[str]:
    """Parse the first JSON array in the reply, falling back to question-like lines."""
    m = _JSON_ARRAY.search(reply or "")
    if m:
        try:
            parsed = json.loads(m.group(0))
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return _clean(parsed, limit)
    return _clean(questions_from_text(reply or ""), limit)


def dedupe(questions: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(questions))
