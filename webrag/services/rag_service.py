"""RAG orchestration: web acquisition, ingestion, retrieval and answering."""
from __future__ import annotations

import asyncio
import re
import time
import unicodedata
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import asdict
from typing import Any

from loguru import logger

from webrag.config import settings
from webrag.errors import FetchError, ModelError, NoResultsError, WebRagError
from webrag.models.rag import (
    Document,
    GatedAnswer,
    IngestionResult,
    RAGResponse,
    SearchQuery,
    SourceRef,
)
from webrag.models.web_search import ExtractedContent
from webrag.services.chunking import TextChunker
from webrag.services.logger import log_event
from webrag.services.ollama_client import OllamaClient
from webrag.services.sufficiency import NO_INFORMATION_ANSWER, assess_sufficiency
from webrag.services.vector_store import InMemoryVectorStore
from webrag.services.web_search import WebSearch

MIN_INGEST_CHARS = 100
MAX_WEB_TOP_UP = 3


def normalize_text(text: str) -> str:
    """Lowercase, strip accents and punctuation, collapse whitespace."""
    decomposed = unicodedata.normalize("NFD", text.lower())
    without_accents = "".join(c for c in decomposed if not unicodedata.combining(c))
    return re.sub(r"\s+", " ", re.sub(r"[^\w\s]", " ", without_accents)).strip()


def ingestion_topic_options() -> dict[str, Any]:
    return {
        "language": settings.topic_language,
        "min_word_length": settings.topic_min_word_length,
        "max_topics": settings.topic_max_topics,
        "preserve_capitalized": True,
    }


class RAGService:
    def __init__(
        self,
        *,
        web_search: WebSearch | None = None,
        ollama: OllamaClient | None = None,
        vector_store: InMemoryVectorStore | None = None,
        chunker: TextChunker | None = None,
    ):
        self.web_search = web_search or WebSearch()
        self.ollama = ollama or OllamaClient()
        self.vector_store = vector_store or InMemoryVectorStore(settings.vector_dimensions)
        self.chunker = chunker or TextChunker(settings.chunk_max_size, settings.chunk_overlap)
        self.top_k = settings.retrieval_top_k
        self.threshold = settings.retrieval_threshold

    async def initialize(self) -> None:
        if not await self.ollama.is_available():
            raise ModelError(
                f"Ollama is not available at {self.ollama.base_url}. Is the service running?"
            )
        logger.info(f"RAG initialized with model {self.ollama.model}")

    async def add_from_web_search(
        self,
        query: str,
        max_results: int = 5,
        use_smart_search: bool = True,
    ) -> IngestionResult:
        topic_analysis = None
        if use_smart_search:
            smart = await self.web_search.smart_search(
                query, "duckduckgo", topic_options=ingestion_topic_options()
            )
            contents = smart.results
            topic_analysis = smart.topic_analysis
            logger.info(
                f"Topics: {', '.join(smart.topics)} | removed: {', '.join(topic_analysis.removed_words)}"
            )
        else:
            contents = await self.web_search.search_and_extract(query)

        documents = self._ingestible_documents(contents, max_results)
        await self.add_documents(documents)
        log_event("web_ingestion", f"Added {len(documents)} documents", query=query)
        return IngestionResult(documents_added=len(documents), topic_analysis=topic_analysis)

    async def add_from_comprehensive_search(
        self,
        query: str,
        max_results: int = 8,
        max_variants: int = 3,
        topic_options: Mapping[str, Any] | None = None,
    ) -> IngestionResult:
        options = {**ingestion_topic_options(), **(topic_options or {})}
        result = await self.web_search.comprehensive_search(
            query,
            "duckduckgo",
            max_variants=max_variants,
            topic_options=options,
        )

        documents = self._ingestible_documents(result.all_results, max_results)
        await self.add_documents(documents)
        variants = [variant.query for variant in result.results_by_variant]
        log_event(
            "comprehensive_ingestion",
            f"Added {len(documents)} documents",
            query=query,
            variants=variants,
        )
        return IngestionResult(
            documents_added=len(documents),
            topic_analysis=result.topic_analysis,
            search_variants=variants,
        )

    async def add_documents(self, documents: Sequence[Document]) -> int:
        """Chunk, embed and store documents. Returns the number of chunks stored."""
        chunks = self.chunker.chunk_documents(documents)
        if not chunks:
            return 0

        embeddings = await self.ollama.embed_texts([chunk.content for chunk in chunks])
        for chunk, embedding in zip(chunks, embeddings):
            chunk.embedding = embedding
        return await self.vector_store.add_chunks(chunks)

    async def search(self, search_query: SearchQuery) -> RAGResponse:
        started = time.monotonic()
        query_vector = await self.ollama.embed_text(normalize_text(search_query.query))

        top_k = search_query.top_k or self.top_k
        threshold = self.threshold if search_query.threshold is None else search_query.threshold

        hits = await self.vector_store.search(query_vector, top_k, threshold)

        if search_query.include_web_search and len(hits) < top_k:
            await self._top_up_from_web(search_query, top_k - len(hits))
            hits = await self.vector_store.search(query_vector, top_k, threshold)

        if not hits:
            return RAGResponse(answer=NO_INFORMATION_ANSWER, sources=[], query=search_query.query)

        answer = await self.ollama.generate_answer(
            search_query.query, [hit.chunk.content for hit in hits]
        )
        elapsed_ms = int((time.monotonic() - started) * 1000)
        logger.info(f"RAG search finished in {elapsed_ms}ms with {len(hits)} sources")

        return RAGResponse(
            answer=answer,
            sources=[
                SourceRef(
                    content=hit.chunk.content,
                    metadata=dict(hit.chunk.metadata),
                    similarity=hit.similarity,
                )
                for hit in hits
            ],
            query=search_query.query,
        )

    async def answer(self, query: str) -> GatedAnswer:
        """Answer from local knowledge, enriching from the web once if it falls short."""
        initial = await self.search(SearchQuery(query=query))
        decision = assess_sufficiency(
            initial.answer,
            len(initial.sources),
            min_sources=settings.enrichment_min_sources,
            min_answer_length=settings.enrichment_min_answer_chars,
        )
        if not decision.needs_enrichment:
            return GatedAnswer(response=initial, enriched=False)

        logger.info(f"Local knowledge insufficient ({'; '.join(decision.reasons)}), enriching")
        try:
            ingestion = await self.add_from_comprehensive_search(
                query,
                max_results=settings.enrichment_max_results,
                max_variants=settings.enrichment_max_variants,
            )
        except (NoResultsError, FetchError) as e:
            logger.warning(f"Enrichment failed for '{query}': {e}")
            return GatedAnswer(
                response=initial,
                enriched=False,
                reasons=decision.reasons,
                enrichment_error=str(e),
            )

        final = await self.search(SearchQuery(query=query))
        return GatedAnswer(
            response=final,
            enriched=True,
            reasons=decision.reasons,
            ingestion=ingestion,
        )

    async def get_stats(self) -> dict[str, Any]:
        vector_stats, available = await asyncio.gather(
            self.vector_store.get_stats(),
            self.ollama.is_available(),
        )
        return {
            "vector_store": asdict(vector_stats),
            "config": {
                "chunk_max_size": self.chunker.max_chunk_size,
                "chunk_overlap": self.chunker.overlap,
                "top_k": self.top_k,
                "threshold": self.threshold,
            },
            "ollama": {"model": self.ollama.model, "available": available},
        }

    async def remove_source(self, source: str) -> int:
        removed = await self.vector_store.remove_by_source(source)
        logger.info(f"Removed {removed} chunks from source {source}")
        return removed

    async def clear(self) -> None:
        await self.vector_store.clear()

    async def list_available_models(self) -> list[str]:
        return await self.ollama.list_models()

    async def diagnose(self) -> dict[str, Any]:
        available, models, embedding_test, vector_stats = await asyncio.gather(
            self.ollama.is_available(),
            self._models_or_empty(),
            self.ollama.test_embedding(),
            self.vector_store.get_stats(),
        )
        return {
            "ollama": {
                "available": available,
                "models": models,
                "embedding_test": embedding_test,
            },
            "vector_store": {
                "chunks": vector_stats.total_chunks,
                "sources": len(vector_stats.sources),
            },
        }

    async def _models_or_empty(self) -> list[str]:
        try:
            return await self.ollama.list_models()
        except ModelError:
            return []

    async def _top_up_from_web(self, search_query: SearchQuery, missing: int) -> None:
        wanted = search_query.web_search_results or min(missing, MAX_WEB_TOP_UP)
        logger.info(f"Web top-up: {wanted} results for '{search_query.query}'")
        try:
            await self.add_from_web_search(search_query.query, wanted, use_smart_search=True)
        except WebRagError as e:
            # Answer from whatever is already stored.
            logger.warning(f"Web top-up failed: {e}")

    @staticmethod
    def _ingestible_documents(
        contents: Sequence[ExtractedContent], max_results: int
    ) -> list[Document]:
        usable = [c for c in contents if c.success and len(c.content) > MIN_INGEST_CHARS]
        usable = usable[:max_results]
        if not usable:
            raise NoResultsError("No usable content found in web results")

        batch = uuid.uuid4().hex[:8]
        return [
            Document(
                id=f"web_{batch}_{index}",
                content=content.content,
                metadata={
                    "url": content.url,
                    "title": content.title,
                    "source": "websearch",
                    "timestamp": content.extracted_at,
                },
            )
            for index, content in enumerate(usable)
        ]
