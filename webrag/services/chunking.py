from __future__ import annotations

from collections.abc import Sequence

from webrag.errors import ValidationError
from webrag.models.rag import Chunk, Document


class TextChunker:
    """Splits documents into overlapping character windows."""

    def __init__(self, max_chunk_size: int = 1000, overlap: int = 200):
        if max_chunk_size < 1:
            raise ValidationError("max_chunk_size must be positive")
        if overlap < 0 or overlap >= max_chunk_size:
            raise ValidationError("overlap must be in [0, max_chunk_size)")
        self.max_chunk_size = max_chunk_size
        self.overlap = overlap

    def split_text(self, text: str) -> list[str]:
        text = text.strip()
        if not text:
            return []

        pieces: list[str] = []
        start = 0
        length = len(text)
        while start < length:
            end = min(start + self.max_chunk_size, length)
            if end < length:
                # Prefer a whitespace break that still leaves room for progress.
                space = text.rfind(" ", start + self.overlap + 1, end)
                if space != -1:
                    end = space
            piece = text[start:end].strip()
            if piece:
                pieces.append(piece)
            if end >= length:
                break
            start = end - self.overlap
        return pieces

    def chunk_documents(self, documents: Sequence[Document]) -> list[Chunk]:
        chunks: list[Chunk] = []
        for document in documents:
            for index, piece in enumerate(self.split_text(document.content)):
                chunks.append(
                    Chunk(
                        id=f"{document.id}_chunk_{index}",
                        document_id=document.id,
                        content=piece,
                        metadata={**document.metadata, "chunk_index": index},
                    )
                )
        return chunks
