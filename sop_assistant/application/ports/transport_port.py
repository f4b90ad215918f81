"""Transport port: one way of delivering a JSON request to a backend.

Why: The embedding and generation clients try an ordered list of
transports behind this single interface instead of nesting try/except
blocks per strategy.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class JsonTransport(Protocol):
    name: str

    async def post_json(
        self, path: str, payload: dict[str, Any], timeout: float
    ) -> dict[str, Any]:
        """POST ``payload`` to ``{base}{path}`` and return the decoded JSON object.

        Raises:
            TransportTimeout: attempt exceeded ``timeout`` seconds
            TransportError: network/process failure
            BackendError: backend answered with an error status or payload
            ParseError: body is not a JSON object
        """
        ...
