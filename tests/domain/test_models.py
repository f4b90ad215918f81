import dataclasses

import pytest

from sop_assistant.domain.models import ChunkMetadata, SourceEntry


def test_metadata_payload_omits_unset_chunk_fields():
    meta = ChunkMetadata(title="T", source_file="a.csv", category="Ops", section="3")
    assert meta.to_payload() == {"title": "T", "sourceFile": "a.csv", "category": "Ops", "section": "3"}


def test_metadata_payload_roundtrip_with_chunk_fields():
    meta = ChunkMetadata(title="T (Part 1/2)", chunk_index=0, total_chunks=2)
    assert ChunkMetadata.from_payload(meta.to_payload()) == meta


def test_metadata_from_missing_payload_uses_defaults():
    meta = ChunkMetadata.from_payload(None)
    assert meta.title == ""
    assert meta.category == "General"


def test_models_are_frozen():
    entry = SourceEntry(title="T", content="c")
    with pytest.raises(dataclasses.FrozenInstanceError):
        entry.title = "X"  # type: ignore[misc]
