from typing import Protocol

from sop_assistant.domain.models import Acronym


class AcronymSourcePort(Protocol):
    def load(self) -> list[Acronym]:
        """Read the reference table; an unreadable table yields an empty list."""
        ...
