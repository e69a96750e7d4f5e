from __future__ import annotations

import asyncio
import math
from collections import Counter
from collections.abc import Sequence

from webrag.errors import ValidationError
from webrag.models.rag import Chunk, ScoredChunk, SourceStats, VectorStoreStats


class InMemoryVectorStore:
    """Process-local chunk store with brute-force cosine search."""

    def __init__(self, dimensions: int = 768):
        self.dimensions = dimensions
        self._chunks: dict[str, Chunk] = {}
        self._lock = asyncio.Lock()

    async def add_chunks(self, chunks: Sequence[Chunk]) -> int:
        for chunk in chunks:
            if chunk.embedding is None:
                raise ValidationError(f"Chunk {chunk.id} has no embedding")
            if len(chunk.embedding) != self.dimensions:
                raise ValidationError(
                    f"Chunk {chunk.id} has {len(chunk.embedding)} dimensions, "
                    f"store expects {self.dimensions}"
                )
        async with self._lock:
            for chunk in chunks:
                self._chunks[chunk.id] = chunk
        return len(chunks)

    async def search(
        self,
        query_vector: Sequence[float],
        top_k: int = 5,
        threshold: float = 0.0,
    ) -> list[ScoredChunk]:
        hits: list[ScoredChunk] = []
        for chunk in list(self._chunks.values()):
            score = _cosine_similarity(query_vector, chunk.embedding or [])
            if score >= threshold:
                hits.append(ScoredChunk(chunk=chunk, similarity=score))
        hits.sort(key=lambda hit: (-hit.similarity, hit.chunk.id))
        return hits[: max(int(top_k), 1)]

    async def remove_by_source(self, source: str) -> int:
        async with self._lock:
            doomed = [cid for cid, chunk in self._chunks.items() if chunk.source == source]
            for cid in doomed:
                del self._chunks[cid]
        return len(doomed)

    async def clear(self) -> None:
        async with self._lock:
            self._chunks.clear()

    async def get_stats(self) -> VectorStoreStats:
        counts = Counter(chunk.source for chunk in self._chunks.values())
        return VectorStoreStats(
            total_chunks=len(self._chunks),
            dimensions=self.dimensions,
            sources=[SourceStats(source=s, chunks=n) for s, n in counts.items()],
        )


def _cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    if len(a) != len(b) or not a:
        return 0.0
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)
