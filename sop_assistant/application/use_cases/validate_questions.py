# sop_assistant/application/use_cases/validate_questions.py
from __future__ import annotations

import logging
from collections.abc import Sequence

from sop_assistant.application.ports.llm_port import GenerationOptions, LLMPort
from sop_assistant.application.ports.question_store_port import QuestionStorePort
from sop_assistant.application.prompts import build_question_generation_prompt
from sop_assistant.application.use_cases.answer_question import AnswerQuestion
from sop_assistant.domain.errors import DomainError
from sop_assistant.domain.models import SourceEntry
from sop_assistant.domain.services.question_candidates import (
    additional_questions,
    content_sample,
    dedupe,
    parse_ai_questions,
    structure_questions,
)

logger = logging.getLogger(__name__)

CONFIDENCE_THRESHOLD = 0.8
MAX_VALIDATED = 8
MIN_VALIDATED = 5
FALLBACK_COUNT = 5

GENERATION_OPTIONS = GenerationOptions(temperature=0.5, num_predict=1000)


class ValidateAndStoreQuestions:
    """
    Generate candidate FAQ questions for one source file, keep only those the
    answer pipeline handles with high confidence, and store them.
    """

    def __init__(
        self,
        answerer: AnswerQuestion,
        llm: LLMPort,
        store: QuestionStorePort,
        threshold: float = CONFIDENCE_THRESHOLD,
        max_validated: int = MAX_VALIDATED,
        min_validated: int = MIN_VALIDATED,
    ) -> None:
        self.answerer = answerer
        self.llm = llm
        self.store = store
        self.threshold = threshold
        self.max_validated = max_validated
        self.min_validated = min_validated

    async def _ai_questions(
        self, source_file: str, entries: Sequence[SourceEntry], category: str | None
    ) -> list[str]:
        prompt = build_question_generation_prompt(source_file, category, content_sample(entries))
        reply = await self.llm.generate(prompt, GENERATION_OPTIONS)
        return parse_ai_questions(reply)

    async def _validate(self, candidates: Sequence[str], kept: list[str]) -> None:
        for question in candidates:
            if len(kept) >= self.max_validated:
                return
            if question in kept:
                continue
            result = await self.answerer.answer(question)
            logger.debug("Candidate %r scored %.2f", question, result.confidence)
            if result.confidence >= self.threshold:
                kept.append(question)

    async def execute(
        self, source_file: str, entries: Sequence[SourceEntry], category: str | None = None
    ) -> int:
        structure = structure_questions(entries)
        try:
            # Round 1: structure-based + generated
            ai_questions = await self._ai_questions(source_file, entries, category)
            candidates = dedupe([*structure, *ai_questions])
            kept: list[str] = []
            await self._validate(candidates, kept)

            # Round 2: more specific phrasings when too few passed
            if len(kept) < self.min_validated:
                logger.info("Only %d questions passed for %s, trying more", len(kept), source_file)
                await self._validate(additional_questions(entries), kept)
        except DomainError as ex:
            logger.warning(
                "Question generation failed for %s, storing unvalidated: %s", source_file, ex
            )
            kept = structure[:FALLBACK_COUNT]

        self.store.replace_questions(source_file, kept, category)
        logger.info("Stored %d questions for %s", len(kept), source_file)
        return len(kept)
