from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from sop_assistant.domain.errors import (
    BackendError,
    DomainError,
    EmbeddingUnavailable,
    ParseError,
    TransportTimeout,
)
from sop_assistant.infrastructure.transports.tier import TransportTier

logger = logging.getLogger(__name__)

EMBEDDINGS_PATH = "/api/embeddings"
DEFAULT_MODEL_ALIASES = ("nomic-embed-text", "nomic-embed-text:latest")


def _retryable(ex: DomainError) -> bool:
    """Timeouts and unknown-model replies move on to the next alias."""
    if isinstance(ex, TransportTimeout):
        return True
    return isinstance(ex, BackendError) and ex.not_found


def _parse_embedding(data: dict[str, Any]) -> list[float]:
    vector = data.get("embedding")
    if not isinstance(vector, list) or not vector:
        raise ParseError("response has no embedding")
    try:
        return [float(v) for v in vector]
    except (TypeError, ValueError) as ex:
        raise ParseError(f"embedding contains non-numeric values: {ex}") from ex


class FallbackEmbeddingClient:
    """
    Embeds text through an ordered list of transports, trying each model
    alias per transport. Only raises once every tier is exhausted.
    """

    def __init__(
        self, tiers: Sequence[TransportTier], model_aliases: Sequence[str] = DEFAULT_MODEL_ALIASES
    ) -> None:
        if not tiers:
            raise ValueError("at least one transport tier is required")
        if not model_aliases:
            raise ValueError("at least one model alias is required")
        self.tiers = list(tiers)
        self.model_aliases = list(model_aliases)

    async def _try_tier(self, tier: TransportTier, text: str) -> list[float]:
        last: DomainError | None = None
        for model in self.model_aliases:
            try:
                data = await tier.transport.post_json(
                    EMBEDDINGS_PATH, {"model": model, "prompt": text}, tier.timeout_s
                )
                return _parse_embedding(data)
            except DomainError as ex:
                logger.warning(
                    "Embedding via %s with %s failed: %s", tier.transport.name, model, ex
                )
                last = ex
                if not _retryable(ex):
                    break
        assert last is not None
        raise last

    async def embed(self, text: str) -> list[float]:
        last: DomainError | None = None
        for tier in self.tiers:
            try:
                return await self._try_tier(tier, text)
            except DomainError as ex:
                last = ex
        raise EmbeddingUnavailable(f"all embedding transports failed: {last}") from last
