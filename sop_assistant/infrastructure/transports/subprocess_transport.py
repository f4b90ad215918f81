"""Fallback JSON transport: ``curl`` reading the payload from a temp file.

Why: Some backend versions hang or 404 on the pooled HTTP client while a
plain one-shot request succeeds. Writing the payload to a file keeps large
prompts out of the argument list.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
import tempfile
from typing import Any

from sop_assistant.domain.errors import TransportError, TransportTimeout
from sop_assistant.infrastructure.transports.http_transport import decode_json_object

logger = logging.getLogger(__name__)

STDOUT_LIMIT_BYTES = 10 * 1024 * 1024


async def _kill(proc: asyncio.subprocess.Process) -> None:
    with contextlib.suppress(ProcessLookupError):
        proc.kill()
    await proc.wait()


class CurlJsonTransport:
    name = "curl"

    def __init__(
        self,
        base_url: str,
        executable: str = "curl",
        max_output_bytes: int = STDOUT_LIMIT_BYTES,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.executable = executable
        self.max_output_bytes = max_output_bytes

    def _command(self, url: str, payload_path: str) -> list[str]:
        return [
            self.executable,
            "-s",
            "-S",
            "-X",
            "POST",
            url,
            "-H",
            "Content-Type: application/json",
            "--data-binary",
            f"@{payload_path}",
        ]

    async def _run(self, cmd: list[str], timeout: float) -> bytes:
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=self.max_output_bytes,
            )
        except OSError as ex:
            raise TransportError(f"cannot start {self.executable}: {ex}") from ex

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError as ex:
            await _kill(proc)
            raise TransportTimeout(f"{self.executable} timed out after {timeout}s") from ex
        except asyncio.CancelledError:
            await _kill(proc)
            raise

        if proc.returncode != 0:
            msg = stderr.decode("utf-8", errors="replace").strip()
            raise TransportError(f"{self.executable} exited with {proc.returncode}: {msg}")
        if len(stdout) > self.max_output_bytes:
            raise TransportError(f"{self.executable} output exceeds {self.max_output_bytes} bytes")
        return stdout

    async def post_json(self, path: str, payload: dict[str, Any], timeout: float) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        fd, payload_path = tempfile.mkstemp(prefix="sop-payload-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh)
            stdout = await self._run(self._command(url, payload_path), timeout)
            return decode_json_object(stdout.decode("utf-8", errors="replace"))
        finally:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(payload_path)
