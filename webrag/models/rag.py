from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from webrag.models.web_search import TopicAnalysis


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def source_key(metadata: dict[str, Any]) -> str:
    """Identity used to group and remove stored chunks: URL, else title."""
    return str(metadata.get("url") or metadata.get("title") or metadata.get("source") or "unknown")


@dataclass(slots=True)
class Document:
    id: str
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class Chunk:
    id: str
    document_id: str
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
    embedding: list[float] | None = None

    @property
    def source(self) -> str:
        return source_key(self.metadata)


@dataclass(slots=True)
class ScoredChunk:
    chunk: Chunk
    similarity: float


@dataclass(slots=True)
class SourceRef:
    content: str
    metadata: dict[str, Any]
    similarity: float

    def to_dict(self) -> dict[str, Any]:
        metadata = {
            key: value.isoformat() if isinstance(value, datetime) else value
            for key, value in self.metadata.items()
        }
        return {"content": self.content, "metadata": metadata, "similarity": self.similarity}


@dataclass(slots=True)
class SearchQuery:
    query: str
    top_k: int | None = None
    threshold: float | None = None
    include_web_search: bool = False
    web_search_results: int | None = None


@dataclass(slots=True)
class RAGResponse:
    answer: str
    sources: list[SourceRef]
    query: str
    timestamp: datetime = field(default_factory=_utc_now)

    @property
    def source_urls(self) -> list[str]:
        urls = [s.metadata.get("url") for s in self.sources]
        return list(dict.fromkeys(url for url in urls if url))


@dataclass(slots=True)
class IngestionResult:
    documents_added: int
    topic_analysis: TopicAnalysis | None = None
    search_variants: list[str] = field(default_factory=list)


@dataclass(slots=True)
class GatedAnswer:
    """Final answer plus what the sufficiency gate decided on the way."""
    response: RAGResponse
    enriched: bool
    reasons: tuple[str, ...] = ()
    ingestion: IngestionResult | None = None
    enrichment_error: str | None = None


@dataclass(slots=True)
class SourceStats:
    source: str
    chunks: int


@dataclass(slots=True)
class VectorStoreStats:
    total_chunks: int
    dimensions: int
    sources: list[SourceStats] = field(default_factory=list)
