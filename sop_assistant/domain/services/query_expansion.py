"""Synonym-based query expansion.

Why: Pure vector similarity under-retrieves when the user's wording differs
from the SOP wording ("check status" vs. "tracker"). Substituting known domain
synonyms is cheap and covers that failure mode without a rewriting model.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

MAX_VARIANTS = 5

# Domain acronyms, action verbs and UI nouns seen in the MF transaction SOPs.
DEFAULT_SYNONYMS: dict[str, list[str]] = {
    "sip": ["systematic investment plan"],
    "stp": ["systematic transfer plan"],
    "swp": ["systematic withdrawal plan"],
    "kyc": ["know your customer", "client verification"],
    "nav": ["net asset value"],
    "amc": ["asset management company"],
    "check status": ["tracker", "track status"],
    "status": ["tracker"],
    "refund": ["reversal", "reimbursement"],
    "redemption": ["withdrawal", "redeem"],
    "cancel": ["stop", "terminate"],
    "update": ["modify", "change"],
    "process": ["handle", "execute"],
    "approve": ["authorize", "sign off"],
    "upload": ["attach", "submit"],
    "screen": ["page", "window"],
    "button": ["option", "tab"],
    "report": ["statement", "MIS"],
}


class QueryExpander:
    """Produces up to ``max_variants`` rewordings of a question.

    The synonym table is owned by the instance and replaced wholesale by
    ``reload``; readers see either the old or the new table, never a mix.
    """

    def __init__(
        self,
        synonyms: Mapping[str, Sequence[str]] | None = None,
        max_variants: int = MAX_VARIANTS,
    ) -> None:
        if max_variants < 1:
            raise ValueError("max_variants must be >= 1")
        self.max_variants = max_variants
        self._table = self._freeze(synonyms if synonyms is not None else DEFAULT_SYNONYMS)

    @staticmethod
    def _freeze(synonyms: Mapping[str, Sequence[str]]) -> tuple[tuple[str, tuple[str, ...]], ...]:
        return tuple((key.lower(), tuple(values)) for key, values in synonyms.items() if key)

    def reload(self, synonyms: Mapping[str, Sequence[str]]) -> None:
        self._table = self._freeze(synonyms)

    def expand(self, question: str) -> list[str]:
        """Return the original question followed by synonym variants (deduplicated)."""
        variants: dict[str, None] = {question: None}
        lowered = question.lower()
        for term, synonyms in self._table:
            if term not in lowered:
                continue
            pattern = re.compile(re.escape(term), re.IGNORECASE)
            for synonym in synonyms:
                variants.setdefault(pattern.sub(lambda _m, s=synonym: s, question), None)
        return list(variants)[: self.max_variants]


def expand_query(question: str) -> list[str]:
    return QueryExpander().expand(question)
