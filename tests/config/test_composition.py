import pytest

from sop_assistant.application.ports.telemetry_port import NullTelemetry
from sop_assistant.application.use_cases.answer_question import AnswerQuestion
from sop_assistant.config.composition import Container, build_embedding, build_llm, build_telemetry
from sop_assistant.config.settings import AppSettings
from sop_assistant.infrastructure.transports.http_transport import HttpJsonTransport
from sop_assistant.infrastructure.transports.subprocess_transport import CurlJsonTransport
from sop_assistant.infrastructure.vectorstore import chroma_vector_store


class FakeChromaClient:
    def __init__(self, host=None, port=None, ssl=None) -> None:
        self.host = host

    def list_collections(self):
        return []


class FakeChromaModule:
    HttpClient = FakeChromaClient


def test_embedding_tiers_follow_settings():
    settings = AppSettings(embed_timeout_s=5, embed_fallback_timeout_s=9, curl_binary="/usr/bin/curl")
    client = build_embedding(settings)

    assert [type(t.transport) for t in client.tiers] == [HttpJsonTransport, CurlJsonTransport]
    assert [t.timeout_s for t in client.tiers] == [5, 9]
    assert client.tiers[1].transport.executable == "/usr/bin/curl"
    assert client.model_aliases == list(settings.embedding_models)


def test_llm_uses_configured_model_and_options():
    llm = build_llm(AppSettings(llm_model="llama3", llm_temperature=0.1, llm_num_predict=256))

    assert llm.model == "llama3"
    assert llm.default_options.temperature == 0.1
    assert llm.default_options.num_predict == 256
    assert [t.timeout_s for t in llm.tiers] == [90.0, 120.0]


def test_telemetry_disabled_is_null():
    assert isinstance(build_telemetry(AppSettings(telemetry_enabled=False)), NullTelemetry)


@pytest.mark.asyncio
async def test_container_wires_singletons(monkeypatch):
    monkeypatch.setattr(chroma_vector_store, "chromadb", FakeChromaModule)
    container = Container(AppSettings(telemetry_enabled=False, chroma_url="http://chroma:8000"))

    uc = container.get_answer_use_case()

    assert isinstance(uc, AnswerQuestion)
    assert container.get_vector_index() is container.get_vector_index()
    assert container.get_acronym_cache() is uc.acronyms
    assert container.get_embedding().tiers[0].transport is container.get_http()
    assert container.get_rebuild_use_case().batch_delay_s == pytest.approx(0.1)
    await container.aclose()
