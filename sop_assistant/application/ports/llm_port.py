from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class GenerationOptions:
    temperature: float = 0.3
    top_p: float = 0.9
    repeat_penalty: float = 1.1
    num_predict: int = 512

    def to_payload(self) -> dict[str, Any]:
        return {
            "temperature": self.temperature,
            "top_p": self.top_p,
            "repeat_penalty": self.repeat_penalty,
            "num_predict": self.num_predict,
        }


class LLMPort(Protocol):
    async def generate(self, prompt: str, options: GenerationOptions | None = None) -> str: ...

    async def rate_confidence(self, question: str, answer: str, context: str) -> float:
        """Self-assessment hook: the model rates an answer in [0, 1].

        Raises:
            DomainError: transport failure or unparsable reply; callers fall
                back to heuristic scoring.
        """
        ...
