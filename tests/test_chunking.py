from __future__ import annotations

import pytest

from webrag.errors import ValidationError
from webrag.models.rag import Document
from webrag.services.chunking import TextChunker


def test_windows_overlap_when_no_whitespace_is_available():
    chunker = TextChunker(max_chunk_size=1000, overlap=200)
    text = "".join(chr(ord("a") + i % 26) for i in range(2500))

    pieces = chunker.split_text(text)

    assert [len(p) for p in pieces] == [1000, 1000, 900]
    assert pieces[0][-200:] == pieces[1][:200]
    assert pieces[1][-200:] == pieces[2][:200]


def test_windows_break_on_whitespace():
    chunker = TextChunker(max_chunk_size=50, overlap=10)
    text = " ".join(f"word{i:02d}" for i in range(30))

    pieces = chunker.split_text(text)

    assert len(pieces) > 1
    assert all(len(p) <= 50 for p in pieces)
    # No word is cut in half at a chunk boundary.
    for piece in pieces[:-1]:
        assert piece.split()[-1].startswith("word")
        assert len(piece.split()[-1]) == 6


def test_chunks_inherit_document_metadata():
    chunker = TextChunker(max_chunk_size=100, overlap=20)
    doc = Document(
        id="doc1",
        content="lorem ipsum " * 30,
        metadata={"url": "https://example.com", "title": "Lorem"},
    )

    chunks = chunker.chunk_documents([doc])

    assert len(chunks) > 1
    assert [c.metadata["chunk_index"] for c in chunks] == list(range(len(chunks)))
    assert all(c.metadata["url"] == "https://example.com" for c in chunks)
    assert all(c.document_id == "doc1" for c in chunks)
    assert chunks[0].id == "doc1_chunk_0"
    assert "chunk_index" not in doc.metadata


def test_empty_documents_produce_no_chunks():
    assert TextChunker().chunk_documents([Document(id="d", content="   ")]) == []


def test_overlap_must_be_smaller_than_chunk_size():
    with pytest.raises(ValidationError):
        TextChunker(max_chunk_size=100, overlap=100)
