from __future__ import annotations

from collections.abc import Sequence


class InMemoryQuestionStore:
    """Predefined questions per source file, kept for the process lifetime."""

    def __init__(self) -> None:
        self._questions: dict[str, list[str]] = {}
        self._categories: dict[str, str | None] = {}

    def replace_questions(
        self, source_file: str, questions: Sequence[str], category: str | None = None
    ) -> None:
        self._questions[source_file] = list(questions)
        self._categories[source_file] = category

    def questions_for(self, source_file: str) -> list[str]:
        return list(self._questions.get(source_file, []))

    def all_questions(self) -> dict[str, list[str]]:
        return {k: list(v) for k, v in self._questions.items()}
