# sop_assistant/application/use_cases/score_confidence.py
from __future__ import annotations

import logging
from collections.abc import Sequence

from sop_assistant.application.ports.llm_port import LLMPort
from sop_assistant.domain.errors import DomainError
from sop_assistant.domain.models import ConfidenceBreakdown
from sop_assistant.domain.services.confidence import (
    ConfidenceWeights,
    combine_confidence,
    heuristic_llm_confidence,
    retrieval_confidence,
)

logger = logging.getLogger(__name__)


class ConfidenceScorer:
    """Retrieval confidence fused with the model's self-assessment (or the heuristic)."""

    def __init__(
        self,
        llm: LLMPort | None = None,
        weights: ConfidenceWeights | None = None,
        use_self_assessment: bool = True,
    ) -> None:
        self.llm = llm
        self.weights = weights or ConfidenceWeights()
        self.use_self_assessment = use_self_assessment and llm is not None

    async def _llm_score(self, question: str, answer: str, context: str) -> tuple[float, bool]:
        if self.use_self_assessment and self.llm is not None:
            try:
                return await self.llm.rate_confidence(question, answer, context), True
            except DomainError as ex:
                logger.warning("Self-assessment failed, using heuristic: %s", ex)
        return heuristic_llm_confidence(answer), False

    async def score(
        self, question: str, answer: str, distances: Sequence[float], context: str
    ) -> ConfidenceBreakdown:
        retrieval = retrieval_confidence(distances)
        llm, used_self_assessment = await self._llm_score(question, answer, context)
        return ConfidenceBreakdown(
            retrieval=retrieval,
            llm=llm,
            combined=combine_confidence(retrieval, llm, self.weights),
            used_self_assessment=used_self_assessment,
        )
