import json

import pytest

from sop_assistant.application.use_cases.validate_questions import ValidateAndStoreQuestions
from sop_assistant.domain.errors import GenerationUnavailable
from sop_assistant.domain.models import Answer, SourceEntry

ENTRIES = [
    SourceEntry(title="Process SIP cancellation", content="Task: Cancel SIP in tracker\nStep 1"),
    SourceEntry(title="Update client KYC details", content="Task: Update KYC in portal\nStep 1"),
]


class FakeAnswerer:
    def __init__(self, scores: dict[str, float], default: float = 0.0) -> None:
        self.scores = scores
        self.default = default
        self.asked: list[str] = []

    async def answer(self, question: str, is_preferred: bool = False) -> Answer:
        self.asked.append(question)
        return Answer(answer="a", confidence=self.scores.get(question, self.default), sources=["T"])


class FakeLLM:
    def __init__(self, reply: str = "[]", fail: bool = False) -> None:
        self.reply = reply
        self.fail = fail

    async def generate(self, prompt, options=None) -> str:
        if self.fail:
            raise GenerationUnavailable("down")
        return self.reply

    async def rate_confidence(self, question, answer, context) -> float:
        return 0.0


class FakeStore:
    def __init__(self) -> None:
        self.stored: dict[str, tuple[list[str], str | None]] = {}

    def replace_questions(self, source_file, questions, category=None) -> None:
        self.stored[source_file] = (list(questions), category)


@pytest.mark.asyncio
async def test_keeps_only_high_confidence_candidates():
    ai = "What is the process for cancelling a SIP in the tracker?"
    answerer = FakeAnswerer({"How do I process sip cancellation?": 0.9, ai: 0.85}, default=0.5)
    store = FakeStore()
    uc = ValidateAndStoreQuestions(answerer, FakeLLM(json.dumps([ai])), store, min_validated=2)

    stored = await uc.execute("sop.xlsx", ENTRIES, "Ops")

    assert stored == 2
    assert store.stored["sop.xlsx"] == (["How do I process sip cancellation?", ai], "Ops")


@pytest.mark.asyncio
async def test_stops_at_max_validated():
    answerer = FakeAnswerer({}, default=0.95)
    store = FakeStore()
    uc = ValidateAndStoreQuestions(answerer, FakeLLM(), store, max_validated=3)

    assert await uc.execute("sop.xlsx", ENTRIES) == 3
    assert len(answerer.asked) == 3


@pytest.mark.asyncio
async def test_second_round_runs_when_too_few_pass():
    specific = "What are the specific steps to cancel sip in tracker?"
    answerer = FakeAnswerer({specific: 0.9})
    store = FakeStore()
    uc = ValidateAndStoreQuestions(answerer, FakeLLM(), store)

    assert await uc.execute("sop.xlsx", ENTRIES) == 1
    assert store.stored["sop.xlsx"][0] == [specific]


@pytest.mark.asyncio
async def test_generation_failure_stores_structure_questions_unvalidated():
    answerer = FakeAnswerer({})
    store = FakeStore()
    uc = ValidateAndStoreQuestions(answerer, FakeLLM(fail=True), store)

    stored = await uc.execute("sop.xlsx", ENTRIES)

    assert stored == 5
    assert store.stored["sop.xlsx"][0][0] == "How do I process sip cancellation?"
    assert answerer.asked == []
