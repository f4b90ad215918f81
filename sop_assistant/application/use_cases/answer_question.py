# sop_assistant/application/use_cases/answer_question.py
from __future__ import annotations

import logging

from sop_assistant.application.acronym_cache import AcronymCache
from sop_assistant.application.dto.query_dto import AskRequest
from sop_assistant.application.ports.audit_port import AuditSinkPort
from sop_assistant.application.ports.llm_port import GenerationOptions, LLMPort
from sop_assistant.application.ports.telemetry_port import NullTelemetry, TelemetryPort
from sop_assistant.application.prompts import (
    BACKEND_DOWN_RESPONSE,
    GENERIC_ERROR_RESPONSE,
    INDEX_EMPTY_RESPONSE,
    NO_RESULTS_RESPONSE,
    build_answer_prompt,
    format_acronyms,
)
from sop_assistant.application.use_cases.build_context import BuildRAGContext
from sop_assistant.application.use_cases.retrieve_sops import RetrieveSOPs
from sop_assistant.application.use_cases.score_confidence import ConfidenceScorer
from sop_assistant.domain.errors import (
    DomainError,
    IndexUnavailable,
    NoResults,
    TransportError,
    ValidationError,
)
from sop_assistant.domain.models import Answer, RetrievalResult
from sop_assistant.domain.services.acronym_validation import (
    expand_unexpanded_acronyms,
    validate_acronyms_in_response,
)
from sop_assistant.domain.services.confidence import (
    confidence_level,
    needs_review,
    preferred_confidence,
)
from sop_assistant.domain.services.grounding import check_grounding, is_proper_decline

logger = logging.getLogger(__name__)

MAX_SOURCES = 3


def _failure(text: str) -> Answer:
    return Answer(answer=text, confidence=0.0, sources=[], confidence_level="low")


def distinct_titles(passages: list[RetrievalResult], limit: int = MAX_SOURCES) -> list[str]:
    titles: list[str] = []
    for p in passages:
        title = p.metadata.title
        if title and title not in titles:
            titles.append(title)
        if len(titles) >= limit:
            break
    return titles


class AnswerQuestion:
    """
    The question-answering pipeline:
    retrieve -> build context -> generate -> score -> correct/expand
    acronyms -> grounding check.

    ``answer()`` never raises for backend failures; they degrade to a
    zero-confidence answer. ``execute()`` adds the audit trail.
    """

    def __init__(
        self,
        retriever: RetrieveSOPs,
        context_builder: BuildRAGContext,
        llm: LLMPort,
        scorer: ConfidenceScorer,
        acronyms: AcronymCache,
        audit: AuditSinkPort | None = None,
        telemetry: TelemetryPort | None = None,
        options: GenerationOptions | None = None,
    ) -> None:
        self.retriever = retriever
        self.context_builder = context_builder
        self.llm = llm
        self.scorer = scorer
        self.acronyms = acronyms
        self.audit = audit
        self.telemetry = telemetry or NullTelemetry()
        self.options = options or GenerationOptions()

    async def answer(self, question: str, is_preferred: bool = False) -> Answer:
        try:
            result = await self._answer(question)
        except IndexUnavailable as ex:
            logger.warning("Index unavailable: %s", ex)
            result = _failure(INDEX_EMPTY_RESPONSE)
        except NoResults:
            logger.info("No results for %r", question)
            result = _failure(NO_RESULTS_RESPONSE)
        except TransportError as ex:
            logger.error("Backend unreachable: %s", ex)
            self.telemetry.incr("sop.answer.degraded", {"reason": type(ex).__name__})
            result = _failure(BACKEND_DOWN_RESPONSE)
        except DomainError as ex:
            logger.error("Answer pipeline failed: %s", ex)
            self.telemetry.incr("sop.answer.degraded", {"reason": type(ex).__name__})
            result = _failure(GENERIC_ERROR_RESPONSE)

        if is_preferred and result.sources:
            boosted = preferred_confidence(result.confidence)
            result = Answer(
                answer=result.answer,
                confidence=boosted,
                sources=result.sources,
                confidence_level=confidence_level(boosted),
                corrections=result.corrections,
                grounding_warnings=result.grounding_warnings,
            )

        self.telemetry.incr("sop.answers.total", {"level": result.confidence_level})
        self.telemetry.observe("sop.answer.confidence", result.confidence)
        return result

    async def _answer(self, question: str) -> Answer:
        # 1) Retrieve (expand, fan out, merge, rerank)
        retrieval = await self.retriever.execute(question)

        # 2) Context: top passages + acronym reference
        ctx = await self.context_builder.execute(question, retrieval)

        # 3) Generate
        prompt = build_answer_prompt(format_acronyms(ctx.acronyms), ctx.sop_context, question)
        text = await self.llm.generate(prompt, self.options)

        # 4) Confidence over all merged distances
        breakdown = await self.scorer.score(question, text, retrieval.distances, ctx.sop_context)

        # 5) Acronym correction, then first-use expansion
        lookup = self.acronyms.lookup()
        validation = validate_acronyms_in_response(text, lookup)
        if validation.corrections:
            logger.info("Corrected acronyms: %s", "; ".join(validation.corrections))
        text = expand_unexpanded_acronyms(validation.text, lookup)

        # 6) Grounding (advisory only)
        warnings: list[str] = []
        if not is_proper_decline(text):
            grounding = check_grounding(text, ctx.sop_context)
            warnings = grounding.warnings
            if not grounding.is_grounded:
                logger.warning("Answer may not be grounded: %s", "; ".join(warnings))

        return Answer(
            answer=text,
            confidence=breakdown.combined,
            sources=distinct_titles(ctx.passages),
            confidence_level=confidence_level(breakdown.combined),
            corrections=validation.corrections,
            grounding_warnings=warnings,
        )

    async def execute(self, req: AskRequest) -> Answer:
        if not req.question or not req.question.strip():
            raise ValidationError("question must not be empty")
        question = req.question.strip()

        result = await self.answer(question, is_preferred=req.is_preferred)

        if self.audit is not None:
            self.audit.record_recent(
                question, result.answer, req.user_id, round(result.confidence * 100)
            )
            if needs_review(result.confidence):
                self.audit.record_unanswered(question, req.user_id, status="pending")
        return result
