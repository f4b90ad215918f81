import pytest

from sop_assistant.domain.errors import IndexUnavailable, VectorStoreError
from sop_assistant.infrastructure.vectorstore import chroma_vector_store
from sop_assistant.infrastructure.vectorstore.chroma_vector_store import ChromaVectorIndexAdapter


class FakeCollection:
    def __init__(self, name: str, metadata: dict | None = None) -> None:
        self.name = name
        self.metadata = metadata
        self.rows: dict = {}
        self.last_query: dict = {}

    def add(self, ids, embeddings, documents, metadatas) -> None:
        self.rows = {"ids": ids, "embeddings": embeddings, "documents": documents, "metadatas": metadatas}

    def count(self) -> int:
        return len(self.rows.get("ids", []))

    def query(self, query_embeddings, n_results, include):
        self.last_query = {"n_results": n_results, "include": include}
        return {
            "ids": [["sop-0", "sop-1"]],
            "documents": [["Cancel SIP\n\nOpen tracker", None]],
            "distances": [[0.12, 0.5]],
            "metadatas": [[{"title": "Cancel SIP", "sourceFile": "a.xlsx", "chunkIndex": 0, "totalChunks": 2}, None]],
        }


class FakeClient:
    def __init__(self, host=None, port=None, ssl=None) -> None:
        self.conn = (host, port, ssl)
        self.collections: dict[str, FakeCollection] = {}
        self.names_only = True

    def list_collections(self):
        if self.names_only:
            return list(self.collections)
        return list(self.collections.values())

    def get_collection(self, name):
        if name not in self.collections:
            raise ValueError(f"Collection {name} does not exist.")
        return self.collections[name]

    def create_collection(self, name, metadata=None):
        self.collections[name] = FakeCollection(name, metadata)
        return self.collections[name]

    def delete_collection(self, name):
        if name not in self.collections:
            raise ValueError(f"Collection {name} does not exist.")
        del self.collections[name]


class FakeChromaModule:
    HttpClient = FakeClient


def test_http_client_built_from_url(monkeypatch):
    monkeypatch.setattr(chroma_vector_store, "chromadb", FakeChromaModule)
    adapter = ChromaVectorIndexAdapter(url="https://chroma.internal:8443")
    assert adapter._client.conn == ("chroma.internal", 8443, True)


def test_missing_chromadb_is_vector_store_error(monkeypatch):
    monkeypatch.setattr(chroma_vector_store, "chromadb", None)
    adapter = ChromaVectorIndexAdapter(url="http://localhost:8000")
    with pytest.raises(VectorStoreError):
        adapter.list_collections()


class UnreachableChromaModule:
    attempts = 0

    @classmethod
    def HttpClient(cls, host=None, port=None, ssl=None):  # noqa: N802
        cls.attempts += 1
        raise ConnectionError("Could not connect to a Chroma server")


def test_unreachable_server_fails_on_first_use_not_on_construction(monkeypatch):
    UnreachableChromaModule.attempts = 0
    monkeypatch.setattr(chroma_vector_store, "chromadb", UnreachableChromaModule)

    adapter = ChromaVectorIndexAdapter(url="http://127.0.0.1:9")
    assert UnreachableChromaModule.attempts == 0

    with pytest.raises(VectorStoreError, match="127.0.0.1:9"):
        adapter.collection_exists("sop_documents")

    # the next call tries to connect again
    monkeypatch.setattr(chroma_vector_store, "chromadb", FakeChromaModule)
    assert adapter.collection_exists("sop_documents") is False


def test_collection_lifecycle_uses_cosine_space():
    client = FakeClient()
    adapter = ChromaVectorIndexAdapter(client=client)

    adapter.create_collection("sop_documents")
    assert adapter.collection_exists("sop_documents")
    assert client.collections["sop_documents"].metadata == {"hnsw:space": "cosine"}

    client.names_only = False
    assert adapter.list_collections() == ["sop_documents"]

    adapter.add("sop_documents", ["sop-0"], [[0.1, 0.2]], ["doc"], [{"title": "T"}])
    assert adapter.count("sop_documents") == 1

    adapter.delete_collection("sop_documents")
    assert not adapter.collection_exists("sop_documents")


def test_query_maps_rows_to_matches():
    client = FakeClient()
    adapter = ChromaVectorIndexAdapter(client=client)
    adapter.create_collection("sop_documents")

    results = adapter.query("sop_documents", [[0.1, 0.2]], 10)

    assert len(results) == 1
    (match,) = results[0]
    assert match.document == "Cancel SIP\n\nOpen tracker"
    assert match.distance == 0.12
    assert match.metadata.title == "Cancel SIP"
    assert match.metadata.chunk_index == 0
    assert client.collections["sop_documents"].last_query["include"] == ["documents", "distances", "metadatas"]


def test_missing_collection_is_index_unavailable():
    adapter = ChromaVectorIndexAdapter(client=FakeClient())

    with pytest.raises(IndexUnavailable) as exc:
        adapter.query("sop_documents", [[0.1]], 5)
    assert exc.value.collection == "sop_documents"
