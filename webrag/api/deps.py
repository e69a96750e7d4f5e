from __future__ import annotations

from webrag.services.rag_service import RAGService

# Singleton
_rag_service: RAGService | None = None


def get_rag_service() -> RAGService:
    """Get or create the process-wide RAG service."""
    global _rag_service
    if _rag_service is None:
        _rag_service = RAGService()
    return _rag_service
