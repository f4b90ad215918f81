import pytest

from sop_assistant.application.ports.llm_port import GenerationOptions
from sop_assistant.domain.errors import (
    BackendError,
    GenerationUnavailable,
    ParseError,
    TransportError,
    TransportTimeout,
)
from sop_assistant.infrastructure.llm.ollama_generation_adapter import GenerationClient
from sop_assistant.infrastructure.transports.tier import TransportTier


class ScriptedTransport:
    def __init__(self, name: str, outcomes: list) -> None:
        self.name = name
        self.outcomes = list(outcomes)
        self.payloads: list[dict] = []
        self.timeouts: list[float] = []

    async def post_json(self, path, payload, timeout):
        self.payloads.append(payload)
        self.timeouts.append(timeout)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _client(http: ScriptedTransport, curl: ScriptedTransport) -> GenerationClient:
    return GenerationClient([TransportTier(http, 90), TransportTier(curl, 120)], model="qwen2.5:7b-instruct")


@pytest.mark.asyncio
async def test_generate_posts_options_and_strips_response():
    http = ScriptedTransport("http", [{"response": "  Step 1. Open tracker.  "}])
    client = _client(http, ScriptedTransport("curl", []))

    text = await client.generate("prompt", GenerationOptions(temperature=0.2, num_predict=64))

    assert text == "Step 1. Open tracker."
    payload = http.payloads[0]
    assert payload["model"] == "qwen2.5:7b-instruct"
    assert payload["stream"] is False
    assert payload["options"] == {"temperature": 0.2, "top_p": 0.9, "repeat_penalty": 1.1, "num_predict": 64}
    assert http.timeouts == [90]


@pytest.mark.asyncio
async def test_primary_failure_falls_back():
    http = ScriptedTransport("http", [TransportTimeout("hung")])
    curl = ScriptedTransport("curl", [{"response": "ok"}])

    assert await _client(http, curl).generate("prompt") == "ok"
    assert curl.timeouts == [120]


@pytest.mark.asyncio
async def test_final_tier_transport_failure_is_generation_unavailable():
    http = ScriptedTransport("http", [TransportError("refused")])
    curl = ScriptedTransport("curl", [TransportTimeout("slow")])

    with pytest.raises(GenerationUnavailable):
        await _client(http, curl).generate("prompt")


@pytest.mark.asyncio
async def test_final_tier_parse_and_backend_errors_propagate_unchanged():
    http = ScriptedTransport("http", [TransportError("refused")])
    curl = ScriptedTransport("curl", [{"no": "response"}])
    with pytest.raises(ParseError):
        await _client(http, curl).generate("prompt")

    http = ScriptedTransport("http", [TransportError("refused")])
    curl = ScriptedTransport("curl", [BackendError("model missing", status_code=404)])
    with pytest.raises(BackendError):
        await _client(http, curl).generate("prompt")


@pytest.mark.asyncio
async def test_rate_confidence_parses_number():
    http = ScriptedTransport("http", [{"response": "0.82"}])
    client = _client(http, ScriptedTransport("curl", []))

    score = await client.rate_confidence("q", "a" * 400, "c" * 900)

    assert score == pytest.approx(0.82)
    assert http.payloads[0]["options"]["temperature"] == 0.0
    assert "a" * 301 not in http.payloads[0]["prompt"]


@pytest.mark.asyncio
async def test_rate_confidence_without_number_is_parse_error():
    http = ScriptedTransport("http", [{"response": "very confident"}])
    with pytest.raises(ParseError):
        await _client(http, ScriptedTransport("curl", [])).rate_confidence("q", "a", "c")
