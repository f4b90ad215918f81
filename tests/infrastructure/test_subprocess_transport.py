import asyncio
import json
import os

import pytest

from sop_assistant.domain.errors import BackendError, TransportError, TransportTimeout
from sop_assistant.infrastructure.transports import subprocess_transport
from sop_assistant.infrastructure.transports.subprocess_transport import CurlJsonTransport


class FakeProcess:
    def __init__(self, stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0, delay: float = 0) -> None:
        self._stdout = stdout
        self._stderr = stderr
        self.returncode = returncode
        self.delay = delay
        self.killed = False
        self.started = asyncio.Event()

    async def communicate(self):
        self.started.set()
        if self.delay:
            await asyncio.sleep(self.delay)
        return self._stdout, self._stderr

    def kill(self) -> None:
        self.killed = True

    async def wait(self) -> int:
        return self.returncode


def _install(monkeypatch, proc: FakeProcess | None = None, error: Exception | None = None) -> dict:
    seen: dict = {}

    async def fake_exec(*cmd, **kwargs):
        seen["cmd"] = list(cmd)
        payload_arg = next(a for a in cmd if str(a).startswith("@"))
        seen["payload_path"] = payload_arg[1:]
        with open(seen["payload_path"], encoding="utf-8") as fh:
            seen["payload"] = json.load(fh)
        if error is not None:
            raise error
        return proc

    monkeypatch.setattr(subprocess_transport.asyncio, "create_subprocess_exec", fake_exec)
    return seen


@pytest.mark.asyncio
async def test_payload_goes_through_temp_file_which_is_removed(monkeypatch):
    seen = _install(monkeypatch, FakeProcess(stdout=b'{"response": "ok"}'))
    transport = CurlJsonTransport("http://ollama:11434", executable="curl")

    data = await transport.post_json("/api/generate", {"prompt": "hi"}, 5)

    assert data == {"response": "ok"}
    assert seen["payload"] == {"prompt": "hi"}
    assert seen["cmd"][0] == "curl"
    assert "http://ollama:11434/api/generate" in seen["cmd"]
    assert not os.path.exists(seen["payload_path"])


@pytest.mark.asyncio
async def test_nonzero_exit_is_transport_error_and_cleans_up(monkeypatch):
    seen = _install(monkeypatch, FakeProcess(stderr=b"connection refused", returncode=7))

    with pytest.raises(TransportError, match="connection refused"):
        await CurlJsonTransport("http://x").post_json("/api/generate", {}, 5)
    assert not os.path.exists(seen["payload_path"])


@pytest.mark.asyncio
async def test_timeout_kills_process(monkeypatch):
    proc = FakeProcess(stdout=b"{}", delay=1)
    seen = _install(monkeypatch, proc)

    with pytest.raises(TransportTimeout):
        await CurlJsonTransport("http://x").post_json("/api/generate", {}, 0.01)
    assert proc.killed
    assert not os.path.exists(seen["payload_path"])


@pytest.mark.asyncio
async def test_cancelled_request_kills_process(monkeypatch):
    proc = FakeProcess(stdout=b"{}", delay=30)
    seen = _install(monkeypatch, proc)

    task = asyncio.create_task(CurlJsonTransport("http://x").post_json("/api/generate", {}, 60))
    await proc.started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert proc.killed
    assert not os.path.exists(seen["payload_path"])


@pytest.mark.asyncio
async def test_backend_error_payload_and_missing_binary(monkeypatch):
    _install(monkeypatch, FakeProcess(stdout=b'{"error": "model not found"}'))
    with pytest.raises(BackendError):
        await CurlJsonTransport("http://x").post_json("/api/embeddings", {}, 5)

    seen = _install(monkeypatch, error=FileNotFoundError("curl"))
    with pytest.raises(TransportError, match="cannot start"):
        await CurlJsonTransport("http://x").post_json("/api/embeddings", {}, 5)
    assert not os.path.exists(seen["payload_path"])
