from __future__ import annotations

from dataclasses import dataclass

from sop_assistant.application.ports.transport_port import JsonTransport


@dataclass(frozen=True)
class TransportTier:
    """One transport plus the per-attempt timeout it is tried with."""

    transport: JsonTransport
    timeout_s: float
