"""Composition root: settings -> adapters -> use cases.

Why: Single place for wiring; all other layers remain pure.
"""

from __future__ import annotations

from sop_assistant.application.acronym_cache import AcronymCache
from sop_assistant.application.ports.audit_port import AuditSinkPort, IndexBookkeepingPort
from sop_assistant.application.ports.embedding_port import EmbeddingPort
from sop_assistant.application.ports.llm_port import GenerationOptions
from sop_assistant.application.ports.question_store_port import QuestionStorePort
from sop_assistant.application.ports.telemetry_port import NullTelemetry, TelemetryPort
from sop_assistant.application.ports.vector_store_port import VectorIndexPort
from sop_assistant.application.use_cases.answer_question import AnswerQuestion
from sop_assistant.application.use_cases.build_context import BuildRAGContext
from sop_assistant.application.use_cases.index_acronyms import AcronymLookup, IndexAcronyms
from sop_assistant.application.use_cases.rebuild_index import RebuildIndex
from sop_assistant.application.use_cases.retrieve_sops import RetrieveSOPs
from sop_assistant.application.use_cases.score_confidence import ConfidenceScorer
from sop_assistant.application.use_cases.validate_questions import ValidateAndStoreQuestions
from sop_assistant.config.settings import AppSettings
from sop_assistant.domain.services.confidence import ConfidenceWeights
from sop_assistant.domain.services.query_expansion import QueryExpander
from sop_assistant.domain.services.reranking import RerankParams
from sop_assistant.infrastructure.acronyms.tabular_acronym_source import TabularAcronymSource
from sop_assistant.infrastructure.audit.log_audit_sink import (
    LoggingAuditSink,
    LoggingIndexBookkeeping,
)
from sop_assistant.infrastructure.embeddings.ollama_embedding_adapter import FallbackEmbeddingClient
from sop_assistant.infrastructure.llm.ollama_generation_adapter import GenerationClient
from sop_assistant.infrastructure.questions.in_memory_question_store import InMemoryQuestionStore
from sop_assistant.infrastructure.telemetry.otel_adapter import OpenTelemetryAdapter, OtelConfig
from sop_assistant.infrastructure.transports.http_transport import HttpJsonTransport
from sop_assistant.infrastructure.transports.subprocess_transport import CurlJsonTransport
from sop_assistant.infrastructure.transports.tier import TransportTier
from sop_assistant.infrastructure.vectorstore.chroma_vector_store import ChromaVectorIndexAdapter


def build_embedding(settings: AppSettings, http: HttpJsonTransport | None = None) -> EmbeddingPort:
    """HTTP first (30 s), then curl with a temp payload file (60 s)."""
    return FallbackEmbeddingClient(
        tiers=[
            TransportTier(http or HttpJsonTransport(settings.ollama_url), settings.embed_timeout_s),
            TransportTier(
                CurlJsonTransport(settings.ollama_url, executable=settings.curl_binary),
                settings.embed_fallback_timeout_s,
            ),
        ],
        model_aliases=settings.embedding_models,
    )


def build_generation_options(settings: AppSettings) -> GenerationOptions:
    return GenerationOptions(
        temperature=settings.llm_temperature,
        top_p=settings.llm_top_p,
        num_predict=settings.llm_num_predict,
    )


def build_llm(settings: AppSettings, http: HttpJsonTransport | None = None) -> GenerationClient:
    return GenerationClient(
        tiers=[
            TransportTier(http or HttpJsonTransport(settings.ollama_url), settings.llm_timeout_s),
            TransportTier(
                CurlJsonTransport(settings.ollama_url, executable=settings.curl_binary),
                settings.llm_fallback_timeout_s,
            ),
        ],
        model=settings.llm_model,
        default_options=build_generation_options(settings),
    )


def build_vector_index(settings: AppSettings) -> VectorIndexPort:
    return ChromaVectorIndexAdapter(url=settings.chroma_url)


def build_telemetry(settings: AppSettings) -> TelemetryPort:
    if not settings.telemetry_enabled:
        return NullTelemetry()
    return OpenTelemetryAdapter(
        OtelConfig(
            otlp_endpoint=settings.otlp_endpoint or None,
            environment=settings.telemetry_environment,
        )
    )


def build_rerank_params(settings: AppSettings) -> RerankParams:
    return RerankParams(
        title_boost=settings.rerank_title_boost,
        content_boost=settings.rerank_content_boost,
    )


class Container:
    """Lazily created singletons for one service instance.

    The acronym cache lives here, so every container (API process, CLI run,
    test) owns its own snapshot.
    """

    def __init__(self, settings: AppSettings | None = None) -> None:
        self.settings = settings or AppSettings()
        self._http: HttpJsonTransport | None = None
        self._embedding: EmbeddingPort | None = None
        self._llm: GenerationClient | None = None
        self._index: VectorIndexPort | None = None
        self._telemetry: TelemetryPort | None = None
        self._acronyms: AcronymCache | None = None
        self._expander: QueryExpander | None = None
        self._audit: AuditSinkPort | None = None
        self._bookkeeping: IndexBookkeepingPort | None = None
        self._questions: QuestionStorePort | None = None

    # ===== Adapters =====

    def get_http(self) -> HttpJsonTransport:
        if self._http is None:
            self._http = HttpJsonTransport(self.settings.ollama_url)
        return self._http

    def get_embedding(self) -> EmbeddingPort:
        if self._embedding is None:
            self._embedding = build_embedding(self.settings, self.get_http())
        return self._embedding

    def get_llm(self) -> GenerationClient:
        if self._llm is None:
            self._llm = build_llm(self.settings, self.get_http())
        return self._llm

    def get_vector_index(self) -> VectorIndexPort:
        if self._index is None:
            self._index = build_vector_index(self.settings)
        return self._index

    def get_telemetry(self) -> TelemetryPort:
        if self._telemetry is None:
            self._telemetry = build_telemetry(self.settings)
        return self._telemetry

    def get_acronym_cache(self) -> AcronymCache:
        if self._acronyms is None:
            self._acronyms = AcronymCache(TabularAcronymSource(self.settings.acronym_file))
        return self._acronyms

    def get_expander(self) -> QueryExpander:
        if self._expander is None:
            self._expander = QueryExpander()
        return self._expander

    def get_audit(self) -> AuditSinkPort:
        if self._audit is None:
            self._audit = LoggingAuditSink()
        return self._audit

    def get_bookkeeping(self) -> IndexBookkeepingPort:
        if self._bookkeeping is None:
            self._bookkeeping = LoggingIndexBookkeeping()
        return self._bookkeeping

    def get_question_store(self) -> QuestionStorePort:
        if self._questions is None:
            self._questions = InMemoryQuestionStore()
        return self._questions

    # ===== Use Cases =====

    def get_retriever(self) -> RetrieveSOPs:
        return RetrieveSOPs(
            embedding=self.get_embedding(),
            index=self.get_vector_index(),
            collection=self.settings.sop_collection,
            expander=self.get_expander(),
            variant_k=self.settings.query_variant_k,
            merge_top_n=self.settings.merge_top_n,
            rerank=build_rerank_params(self.settings),
        )

    def get_acronym_lookup(self) -> AcronymLookup:
        return AcronymLookup(
            embedding=self.get_embedding(),
            index=self.get_vector_index(),
            collection=self.settings.acronym_collection,
        )

    def get_answer_use_case(self) -> AnswerQuestion:
        llm = self.get_llm()
        return AnswerQuestion(
            retriever=self.get_retriever(),
            context_builder=BuildRAGContext(
                cache=self.get_acronym_cache(),
                lookup=self.get_acronym_lookup(),
                top_k=self.settings.context_top_k,
            ),
            llm=llm,
            scorer=ConfidenceScorer(
                llm=llm,
                weights=ConfidenceWeights.from_retrieval_weight(
                    self.settings.confidence_retrieval_weight
                ),
            ),
            acronyms=self.get_acronym_cache(),
            audit=self.get_audit(),
            telemetry=self.get_telemetry(),
            options=build_generation_options(self.settings),
        )

    def get_rebuild_use_case(self) -> RebuildIndex:
        return RebuildIndex(
            embedding=self.get_embedding(),
            index=self.get_vector_index(),
            collection=self.settings.sop_collection,
            bookkeeping=self.get_bookkeeping(),
            batch_size=self.settings.index_batch_size,
            batch_delay_s=self.settings.index_batch_delay_ms / 1000.0,
        )

    def get_index_acronyms_use_case(self) -> IndexAcronyms:
        return IndexAcronyms(
            cache=self.get_acronym_cache(),
            embedding=self.get_embedding(),
            index=self.get_vector_index(),
            collection=self.settings.acronym_collection,
            batch_size=self.settings.index_batch_size,
        )

    def get_validate_questions_use_case(self) -> ValidateAndStoreQuestions:
        return ValidateAndStoreQuestions(
            answerer=self.get_answer_use_case(),
            llm=self.get_llm(),
            store=self.get_question_store(),
        )

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.close()


def build_container(settings: AppSettings | None = None) -> Container:
    return Container(settings)
