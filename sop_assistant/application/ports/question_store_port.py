from collections.abc import Sequence
from typing import Protocol


class QuestionStorePort(Protocol):
    def replace_questions(
        self, source_file: str, questions: Sequence[str], category: str | None = None
    ) -> None:
        """Drop the file's stored predefined questions and store ``questions``."""
        ...
