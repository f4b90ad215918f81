"""Advisory grounding check for generated answers."""

from __future__ import annotations

import re

from sop_assistant.domain.models import GroundingResult

UNCERTAIN_PHRASES = (
    "i think",
    "probably",
    "might be",
    "could be",
    "i believe",
    "it seems",
    "possibly",
    "perhaps",
    "i'm not sure",
    "may or may not",
)

GENERALIZING_PHRASES = (
    "generally speaking",
    "in most cases",
    "typically",
    "as a general rule",
    "usually",
)

GROUNDED_PHRASES = (
    "according to the sop",
    "based on the sop",
    "the sop states",
    "as per the documentation",
)

DECLINE_PHRASES = (
    "not available in the sop",
    "not available in the current sop",
    "not covered in the sop",
    "this information is not available",
    "i don't have information",
    "no information available",
)

UNCERTAIN_PENALTY = 0.1
NUMBER_PENALTY = 0.15
GENERALIZING_PENALTY = 0.1
GROUNDED_BONUS = 0.1

_LONG_NUMBER = re.compile(r"\b\d{4,}\b")


def check_grounding(answer: str, context: str) -> GroundingResult:
    warnings: list[str] = []
    confidence = 1.0
    answer_lower = answer.lower()
    context_lower = context.lower()

    for phrase in UNCERTAIN_PHRASES:
        if phrase in answer_lower:
            warnings.append(f'Contains uncertain language: "{phrase}"')
            confidence -= UNCERTAIN_PENALTY

    for number in _LONG_NUMBER.findall(answer):
        if number not in context:
            warnings.append(f'Contains number "{number}" not found in context')
            confidence -= NUMBER_PENALTY

    for phrase in GENERALIZING_PHRASES:
        if phrase in answer_lower and phrase not in context_lower:
            warnings.append(f'Contains generalizing language not in context: "{phrase}"')
            confidence -= GENERALIZING_PENALTY

    if any(phrase in answer_lower for phrase in GROUNDED_PHRASES):
        confidence = min(1.0, confidence + GROUNDED_BONUS)

    return GroundingResult(
        is_grounded=len(warnings) < 2 and confidence > 0.5,
        confidence=max(0.0, min(1.0, confidence)),
        warnings=warnings,
    )


def is_proper_decline(answer: str) -> bool:
    """True when the answer deliberately declines because the SOPs lack the info."""
    lowered = answer.lower()
    return any(phrase in lowered for phrase in DECLINE_PHRASES)
