import pytest

from sop_assistant.application.use_cases.score_confidence import ConfidenceScorer
from sop_assistant.domain.errors import ParseError


class FakeLLM:
    def __init__(self, rating: float | None = None) -> None:
        self.rating = rating
        self.calls = 0

    async def generate(self, prompt, options=None) -> str:
        return ""

    async def rate_confidence(self, question, answer, context) -> float:
        self.calls += 1
        if self.rating is None:
            raise ParseError("no number")
        return self.rating


@pytest.mark.asyncio
async def test_uses_self_assessment_when_available():
    scorer = ConfidenceScorer(llm=FakeLLM(rating=0.5))
    breakdown = await scorer.score("q", "answer", [0.0, 0.0], "ctx")

    assert breakdown.used_self_assessment
    assert breakdown.retrieval == 1.0
    assert breakdown.combined == pytest.approx(0.8)


@pytest.mark.asyncio
async def test_falls_back_to_heuristic_on_domain_error():
    llm = FakeLLM(rating=None)
    scorer = ConfidenceScorer(llm=llm)
    breakdown = await scorer.score("q", "Use the tracker.", [0.5], "ctx")

    assert llm.calls == 1
    assert not breakdown.used_self_assessment
    assert breakdown.llm == pytest.approx(0.63)
    assert breakdown.combined == pytest.approx(0.6 * 0.5 + 0.4 * 0.63)


@pytest.mark.asyncio
async def test_heuristic_only_without_llm():
    breakdown = await ConfidenceScorer().score("q", "Use the tracker.", [], "ctx")
    assert breakdown.retrieval == 0.0
    assert not breakdown.used_self_assessment
