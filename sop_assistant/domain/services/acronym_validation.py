"""Acronym correction and expansion for generated answers.

Both passes are single left-to-right scans: match positions are taken from
the unmodified input, untouched spans are copied to an output buffer and
replacements are spliced in between. No offsets are adjusted in place.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from sop_assistant.domain.models import Acronym, AcronymValidation

COMMON_WORDS_BLACKLIST = frozenset(
    {
        # two-letter words
        "IT", "OR", "AN", "AT", "BY", "DO", "GO", "IF", "IN", "IS",
        "NO", "OF", "ON", "SO", "TO", "UP", "US", "WE",
        "AM", "PM", "OK", "BE", "HE", "ME", "MY", "AS", "VS",
        # common non-financial abbreviations
        "TV", "PC", "UK", "EU", "UN", "ID", "HR", "PR", "AI",
        # shouted words
        "THE", "AND", "FOR", "ARE", "BUT", "NOT", "YOU", "ALL",
        "CAN", "HAD", "HER", "WAS", "ONE", "OUR", "OUT",
    }
)  # fmt: skip

_DEFINED = re.compile(r"\b([A-Z]{2,6})\s*\(([^)]+)\)")
_STANDALONE = re.compile(r"\b([A-Z]{2,6})\b")


def _lookup(acronyms: Mapping[str, Acronym], token: str) -> Acronym | None:
    key = token.upper()
    if key in COMMON_WORDS_BLACKLIST:
        return None
    return acronyms.get(key)


def _overlaps(provided: str, canonical: str) -> bool:
    a, b = provided.lower(), canonical.lower()
    return a in b or b in a


def validate_acronyms_in_response(
    response: str, acronyms: Mapping[str, Acronym]
) -> AcronymValidation:
    """Rewrite ``ABBR (wrong expansion)`` to the canonical full form."""
    corrections: list[str] = []
    out: list[str] = []
    cursor = 0
    for match in _DEFINED.finditer(response):
        token = match.group(1)
        provided = match.group(2).strip()
        known = _lookup(acronyms, token)
        if known is None or _overlaps(provided, known.full_form):
            continue
        out.append(response[cursor : match.start()])
        out.append(f"{token} ({known.full_form})")
        cursor = match.end()
        corrections.append(f'{token}: "{provided}" -> "{known.full_form}"')
    if not corrections:
        return AcronymValidation(text=response, corrections=[])
    out.append(response[cursor:])
    return AcronymValidation(text="".join(out), corrections=corrections)


def expand_unexpanded_acronyms(response: str, acronyms: Mapping[str, Acronym]) -> str:
    """Append ``(full form)`` after the first bare occurrence of each known acronym."""
    seen: set[str] = set()
    out: list[str] = []
    cursor = 0
    for match in _STANDALONE.finditer(response):
        token = match.group(1)
        key = token.upper()
        if key in seen:
            continue
        known = _lookup(acronyms, token)
        if known is None:
            continue
        if response[match.end() : match.end() + 2].strip().startswith("("):
            continue
        seen.add(key)
        out.append(response[cursor : match.end()])
        out.append(f" ({known.full_form})")
        cursor = match.end()
    if cursor == 0:
        return response
    out.append(response[cursor:])
    return "".join(out)


def find_acronyms(text: str, acronyms: Mapping[str, Acronym]) -> list[Acronym]:
    """Known acronyms mentioned in ``text``, in order of first appearance."""
    found: dict[str, Acronym] = {}
    for match in _STANDALONE.finditer(text):
        known = acronyms.get(match.group(1).upper())
        if known is not None:
            found.setdefault(known.abbreviation.upper(), known)
    return list(found.values())
