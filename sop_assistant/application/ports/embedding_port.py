from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbeddingPort(Protocol):
    async def embed(self, text: str) -> list[float]:
        """Raises EmbeddingUnavailable only after every transport path failed."""
        ...
