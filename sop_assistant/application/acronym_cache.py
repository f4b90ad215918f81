from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType

from sop_assistant.application.ports.acronym_source_port import AcronymSourcePort
from sop_assistant.domain.models import Acronym

logger = logging.getLogger(__name__)


class AcronymCache:
    """Acronym list + lookup map owned by one service instance.

    Loaded lazily on first access and replaced wholesale by ``reload()``;
    concurrent readers see either the old or the new snapshot.
    """

    def __init__(self, source: AcronymSourcePort) -> None:
        self._source = source
        self._snapshot: tuple[tuple[Acronym, ...], Mapping[str, Acronym]] | None = None

    def _load(self) -> tuple[tuple[Acronym, ...], Mapping[str, Acronym]]:
        acronyms = tuple(self._source.load())
        lookup: dict[str, Acronym] = {}
        for acronym in acronyms:
            lookup[acronym.abbreviation.upper()] = acronym
        logger.info("Loaded %d acronyms", len(acronyms))
        return acronyms, MappingProxyType(lookup)

    def _current(self) -> tuple[tuple[Acronym, ...], Mapping[str, Acronym]]:
        snapshot = self._snapshot
        if snapshot is None:
            snapshot = self._load()
            self._snapshot = snapshot
        return snapshot

    def acronyms(self) -> list[Acronym]:
        return list(self._current()[0])

    def lookup(self) -> Mapping[str, Acronym]:
        return self._current()[1]

    def get(self, abbreviation: str) -> Acronym | None:
        return self.lookup().get(abbreviation.upper())

    def reload(self) -> list[Acronym]:
        self._snapshot = self._load()
        return list(self._snapshot[0])
