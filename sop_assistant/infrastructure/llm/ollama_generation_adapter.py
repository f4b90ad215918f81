from __future__ import annotations

import logging
from collections.abc import Sequence

from sop_assistant.application.ports.llm_port import GenerationOptions
from sop_assistant.application.prompts import build_confidence_prompt
from sop_assistant.domain.errors import (
    BackendError,
    DomainError,
    GenerationUnavailable,
    ParseError,
    TransportError,
)
from sop_assistant.domain.services.confidence import parse_self_assessment
from sop_assistant.infrastructure.transports.tier import TransportTier

logger = logging.getLogger(__name__)

GENERATE_PATH = "/api/generate"
SELF_ASSESSMENT_OPTIONS = GenerationOptions(temperature=0.0, num_predict=10)


class GenerationClient:
    """Text generation with a primary tier and ordered fallbacks (single model)."""

    def __init__(
        self,
        tiers: Sequence[TransportTier],
        model: str,
        default_options: GenerationOptions | None = None,
    ) -> None:
        if not tiers:
            raise ValueError("at least one transport tier is required")
        self.tiers = list(tiers)
        self.model = model
        self.default_options = default_options or GenerationOptions()

    async def _generate_once(
        self, tier: TransportTier, prompt: str, options: GenerationOptions
    ) -> str:
        data = await tier.transport.post_json(
            GENERATE_PATH,
            {
                "model": self.model,
                "prompt": prompt,
                "stream": False,
                "options": options.to_payload(),
            },
            tier.timeout_s,
        )
        text = data.get("response")
        if not isinstance(text, str):
            raise ParseError("response has no 'response' text")
        return text.strip()

    async def generate(self, prompt: str, options: GenerationOptions | None = None) -> str:
        opts = options or self.default_options
        *fallible, final = self.tiers
        for tier in fallible:
            try:
                return await self._generate_once(tier, prompt, opts)
            except DomainError as ex:
                logger.warning(
                    "Generation via %s failed, falling back: %s", tier.transport.name, ex
                )

        try:
            return await self._generate_once(final, prompt, opts)
        except (ParseError, BackendError):
            raise
        except TransportError as ex:
            raise GenerationUnavailable(f"all generation transports failed: {ex}") from ex

    async def rate_confidence(self, question: str, answer: str, context: str) -> float:
        reply = await self.generate(
            build_confidence_prompt(question, answer, context), SELF_ASSESSMENT_OPTIONS
        )
        score = parse_self_assessment(reply)
        if score is None:
            raise ParseError(f"no confidence number in reply: {reply[:50]!r}")
        return score
