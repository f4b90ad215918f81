"""Application ports package."""

from sop_assistant.application.ports.acronym_source_port import AcronymSourcePort
from sop_assistant.application.ports.audit_port import AuditSinkPort, IndexBookkeepingPort
from sop_assistant.application.ports.embedding_port import EmbeddingPort
from sop_assistant.application.ports.llm_port import GenerationOptions, LLMPort
from sop_assistant.application.ports.question_store_port import QuestionStorePort
from sop_assistant.application.ports.telemetry_port import NullTelemetry, TelemetryPort
from sop_assistant.application.ports.transport_port import JsonTransport
from sop_assistant.application.ports.vector_store_port import QueryMatch, VectorIndexPort

__all__ = [
    "AcronymSourcePort",
    "AuditSinkPort",
    "EmbeddingPort",
    "GenerationOptions",
    "IndexBookkeepingPort",
    "JsonTransport",
    "LLMPort",
    "NullTelemetry",
    "QueryMatch",
    "QuestionStorePort",
    "TelemetryPort",
    "VectorIndexPort",
]
