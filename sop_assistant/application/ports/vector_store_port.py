from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from sop_assistant.domain.models import QueryMatch

__all__ = ["QueryMatch", "VectorIndexPort"]


@runtime_checkable
class VectorIndexPort(Protocol):
    """Named-collection vector index; embeddings are always supplied by the caller."""

    def list_collections(self) -> list[str]: ...

    def collection_exists(self, name: str) -> bool: ...

    def create_collection(self, name: str, metadata: Mapping[str, Any] | None = None) -> None: ...

    def delete_collection(self, name: str) -> None: ...

    def count(self, name: str) -> int: ...

    def add(
        self,
        name: str,
        ids: Sequence[str],
        embeddings: Sequence[Sequence[float]],
        documents: Sequence[str],
        metadatas: Sequence[Mapping[str, Any]],
    ) -> None: ...

    def query(
        self, name: str, query_embeddings: Sequence[Sequence[float]], n_results: int
    ) -> list[list[QueryMatch]]:
        """One result list per query embedding.

        Raises:
            IndexUnavailable: the collection does not exist (not retried)
        """
        ...
