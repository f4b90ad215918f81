"""Tests for the domain error taxonomy."""

from sop_assistant.domain.errors import (
    BackendError,
    DomainError,
    EmbeddingUnavailable,
    GenerationUnavailable,
    IndexUnavailable,
    TransportError,
    TransportTimeout,
)


def test_transport_failures_share_a_base():
    for cls in (TransportTimeout, EmbeddingUnavailable, GenerationUnavailable):
        assert issubclass(cls, TransportError)
        assert issubclass(cls, DomainError)


def test_backend_error_not_found_by_status_or_message():
    assert BackendError("boom", status_code=404).not_found
    assert BackendError('model "x" not found, try pulling it first').not_found
    assert not BackendError("internal", status_code=500).not_found


def test_index_unavailable_names_collection():
    err = IndexUnavailable("sop_documents")
    assert err.collection == "sop_documents"
    assert "sop_documents" in str(err)
