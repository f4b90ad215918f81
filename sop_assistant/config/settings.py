"""Application settings with environment-driven configuration.

Why: Single place where the environment is read; every other layer gets
     its values through the composition root.
"""

import os
from dataclasses import dataclass, field


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_list(name: str, default: str) -> tuple[str, ...]:
    return tuple(p.strip() for p in os.getenv(name, default).split(",") if p.strip())


@dataclass(frozen=True)
class AppSettings:
    """Application settings loaded from environment variables.

    This is the ONLY place where environment variables are read.
    All other layers receive settings via dependency injection.
    """

    # ===== Model Backend (Ollama-style HTTP API) =====
    ollama_url: str = field(
        default_factory=lambda: os.getenv("OLLAMA_URL", "http://localhost:11434")
    )
    embedding_models: tuple[str, ...] = field(
        default_factory=lambda: _env_list(
            "EMBEDDING_MODELS", "nomic-embed-text,nomic-embed-text:latest"
        )
    )
    # Tried in order per transport; covers naming drift across backend versions

    llm_model: str = field(default_factory=lambda: os.getenv("LLM_MODEL", "qwen2.5:7b-instruct"))
    llm_temperature: float = field(
        default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.3"))
    )
    llm_top_p: float = field(default_factory=lambda: float(os.getenv("LLM_TOP_P", "0.9")))
    llm_num_predict: int = field(default_factory=lambda: int(os.getenv("LLM_NUM_PREDICT", "512")))

    # ===== Timeouts (seconds, per attempt) =====
    embed_timeout_s: float = field(
        default_factory=lambda: float(os.getenv("EMBED_TIMEOUT_S", "30"))
    )
    embed_fallback_timeout_s: float = field(
        default_factory=lambda: float(os.getenv("EMBED_FALLBACK_TIMEOUT_S", "60"))
    )
    llm_timeout_s: float = field(default_factory=lambda: float(os.getenv("LLM_TIMEOUT_S", "90")))
    llm_fallback_timeout_s: float = field(
        default_factory=lambda: float(os.getenv("LLM_FALLBACK_TIMEOUT_S", "120"))
    )
    curl_binary: str = field(default_factory=lambda: os.getenv("CURL_BINARY", "curl"))

    # ===== Vector Store (Chroma server) =====
    chroma_url: str = field(
        default_factory=lambda: os.getenv("CHROMA_URL", "http://localhost:8000")
    )
    sop_collection: str = field(
        default_factory=lambda: os.getenv("SOP_COLLECTION", "sop_documents")
    )
    acronym_collection: str = field(
        default_factory=lambda: os.getenv("ACRONYM_COLLECTION", "sop_acronyms")
    )
    acronym_file: str = field(
        default_factory=lambda: os.getenv("ACRONYM_FILE", "data/Indian_Financial_Acronyms.csv")
    )

    # ===== Retrieval / Scoring =====
    confidence_retrieval_weight: float = field(
        default_factory=lambda: float(os.getenv("CONFIDENCE_RETRIEVAL_WEIGHT", "0.6"))
    )
    # LLM weight is 1 - retrieval weight

    rerank_title_boost: float = field(
        default_factory=lambda: float(os.getenv("RERANK_TITLE_BOOST", "0.15"))
    )
    rerank_content_boost: float = field(
        default_factory=lambda: float(os.getenv("RERANK_CONTENT_BOOST", "0.03"))
    )
    query_variant_k: int = field(default_factory=lambda: int(os.getenv("QUERY_VARIANT_K", "10")))
    merge_top_n: int = field(default_factory=lambda: int(os.getenv("MERGE_TOP_N", "10")))
    context_top_k: int = field(default_factory=lambda: int(os.getenv("CONTEXT_TOP_K", "5")))

    # ===== Index Rebuild =====
    index_batch_size: int = field(default_factory=lambda: int(os.getenv("INDEX_BATCH_SIZE", "10")))
    index_batch_delay_ms: int = field(
        default_factory=lambda: int(os.getenv("INDEX_BATCH_DELAY_MS", "100"))
    )

    # ===== Telemetry / Logging =====
    telemetry_enabled: bool = field(default_factory=lambda: _env_bool("TELEMETRY_ENABLED", "false"))
    otlp_endpoint: str = field(default_factory=lambda: os.getenv("OTLP_ENDPOINT", ""))
    # Empty string = no OTLP export

    telemetry_environment: str = field(
        default_factory=lambda: os.getenv("TELEMETRY_ENVIRONMENT", "production")
    )
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
