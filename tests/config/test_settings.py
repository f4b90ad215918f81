from sop_assistant.config.settings import AppSettings


def test_defaults(monkeypatch):
    for name in ("EMBEDDING_MODELS", "OLLAMA_URL", "CONFIDENCE_RETRIEVAL_WEIGHT", "TELEMETRY_ENABLED"):
        monkeypatch.delenv(name, raising=False)
    s = AppSettings()

    assert s.ollama_url == "http://localhost:11434"
    assert s.embedding_models == ("nomic-embed-text", "nomic-embed-text:latest")
    assert s.embed_timeout_s == 30.0
    assert s.llm_fallback_timeout_s == 120.0
    assert s.confidence_retrieval_weight == 0.6
    assert s.acronym_collection == "sop_acronyms"
    assert s.telemetry_enabled is False


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("EMBEDDING_MODELS", "mxbai-embed-large, nomic-embed-text ,")
    monkeypatch.setenv("RERANK_TITLE_BOOST", "0.2")
    monkeypatch.setenv("TELEMETRY_ENABLED", "TRUE")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    s = AppSettings()

    assert s.embedding_models == ("mxbai-embed-large", "nomic-embed-text")
    assert s.rerank_title_boost == 0.2
    assert s.telemetry_enabled is True
    assert s.log_level == "DEBUG"
