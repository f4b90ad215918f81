"""Domain errors (typed).

Why: Every external-call boundary maps low-level failures (httpx, curl,
json, chromadb) to one of these kinds before they reach pipeline logic.
"""


class DomainError(Exception):
    """Base class for domain-specific errors."""


class ValidationError(DomainError):
    """Invalid input/domain state."""


class TransportError(DomainError):
    """Network or process failure reaching an external service."""


class TransportTimeout(TransportError):
    """A single transport attempt exceeded its timeout."""


class EmbeddingUnavailable(TransportError):
    """All embedding transports and model aliases were exhausted."""


class GenerationUnavailable(TransportError):
    """All generation transports were exhausted."""


class BackendError(DomainError):
    """External service was reachable but returned an error payload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def not_found(self) -> bool:
        return self.status_code == 404 or "not found" in self.message.lower()


class ParseError(DomainError):
    """Malformed response body (terminal for that call)."""


class IndexUnavailable(DomainError):
    """The named vector collection does not exist; rebuild the index."""

    def __init__(self, collection: str) -> None:
        super().__init__(f"collection '{collection}' does not exist")
        self.collection = collection


class NoResults(DomainError):
    """Query succeeded but returned no passages."""


class VectorStoreError(DomainError):
    """Vector store backend failed or is misconfigured."""
