from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, cast
from urllib.parse import urlparse

from sop_assistant.domain.errors import IndexUnavailable, VectorStoreError
from sop_assistant.domain.models import ChunkMetadata, QueryMatch

try:  # pragma: no cover - exercised via tests with monkeypatch
    import chromadb
except Exception:  # noqa: BLE001
    chromadb = None

COSINE_SPACE = {"hnsw:space": "cosine"}


def _is_missing(ex: Exception) -> bool:
    # chromadb raises ValueError / NotFoundError depending on version
    text = str(ex).lower()
    return "does not exist" in text or "not found" in text


class ChromaVectorIndexAdapter:
    """Chroma server client; embeddings are always supplied by the caller."""

    def __init__(self, url: str = "http://localhost:8000", client: Any | None = None) -> None:
        self.url = url
        self._http_client = client

    @property
    def _client(self) -> Any:
        # created on first use; HttpClient connects eagerly and fails when the server is down
        if self._http_client is None:
            if chromadb is None:
                raise VectorStoreError("chromadb not installed.")
            parsed = urlparse(self.url)
            try:
                self._http_client = chromadb.HttpClient(
                    host=parsed.hostname or "localhost",
                    port=parsed.port or 8000,
                    ssl=parsed.scheme == "https",
                )
            except Exception as ex:  # noqa: BLE001
                raise VectorStoreError(
                    f"Failed to connect to Chroma at '{self.url}': {ex}"
                ) from ex
        return self._http_client

    def _get(self, name: str) -> Any:
        try:
            return self._client.get_collection(name=name)
        except Exception as ex:  # noqa: BLE001
            if _is_missing(ex):
                raise IndexUnavailable(name) from ex
            raise VectorStoreError(f"Failed to open collection '{name}': {ex}") from ex

    def list_collections(self) -> list[str]:
        try:
            collections = self._client.list_collections()
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Listing collections failed: {ex}") from ex
        # newer clients return names, older ones Collection objects
        return [c if isinstance(c, str) else c.name for c in collections]

    def collection_exists(self, name: str) -> bool:
        return name in self.list_collections()

    def create_collection(self, name: str, metadata: Mapping[str, Any] | None = None) -> None:
        try:
            self._client.create_collection(name=name, metadata={**COSINE_SPACE, **(metadata or {})})
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Failed to create collection '{name}': {ex}") from ex

    def delete_collection(self, name: str) -> None:
        try:
            self._client.delete_collection(name=name)
        except Exception as ex:  # noqa: BLE001
            if _is_missing(ex):
                raise IndexUnavailable(name) from ex
            raise VectorStoreError(f"Failed to delete collection '{name}': {ex}") from ex

    def count(self, name: str) -> int:
        coll = self._get(name)
        try:
            return int(coll.count())
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Count failed: {ex}") from ex

    def add(
        self,
        name: str,
        ids: Sequence[str],
        embeddings: Sequence[Sequence[float]],
        documents: Sequence[str],
        metadatas: Sequence[Mapping[str, Any]],
    ) -> None:
        coll = self._get(name)
        try:
            coll.add(
                ids=list(ids),
                embeddings=[list(vec) for vec in embeddings],
                documents=list(documents),
                metadatas=[dict(m) for m in metadatas],
            )
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Add failed: {ex}") from ex

    def query(
        self, name: str, query_embeddings: Sequence[Sequence[float]], n_results: int
    ) -> list[list[QueryMatch]]:
        coll = self._get(name)
        try:
            result = cast(
                dict[str, list[list[Any]]],
                coll.query(
                    query_embeddings=[list(vec) for vec in query_embeddings],
                    n_results=n_results,
                    include=["documents", "distances", "metadatas"],
                ),
            )
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Search failed: {ex}") from ex

        all_docs = result.get("documents") or []
        all_dists = result.get("distances") or []
        all_metas = result.get("metadatas") or []

        out: list[list[QueryMatch]] = []
        for q in range(len(query_embeddings)):
            docs = all_docs[q] if q < len(all_docs) else []
            dists = all_dists[q] if q < len(all_dists) else []
            metas = all_metas[q] if q < len(all_metas) else []
            matches: list[QueryMatch] = []
            for idx, doc in enumerate(docs):
                if doc is None:
                    continue
                matches.append(
                    QueryMatch(
                        document=str(doc),
                        # cosine distance, lower is closer
                        distance=float(dists[idx]) if idx < len(dists) else 1.0,
                        metadata=ChunkMetadata.from_payload(
                            metas[idx] if idx < len(metas) else None
                        ),
                    )
                )
            out.append(matches)
        return out
