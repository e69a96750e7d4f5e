from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException

from webrag.api.deps import get_rag_service
from webrag.errors import (
    FetchError,
    ModelError,
    NoResultsError,
    ValidationError,
    WebRagError,
)
from webrag.models.rag import Document, RAGResponse, SearchQuery
from webrag.models.schemas import (
    AddDocumentRequest,
    AddDocumentResponse,
    AddWebContentRequest,
    AddWebContentResponse,
    ModelsResponse,
    RemoveSourceResponse,
    SearchRequest,
    SearchResponse,
    SourceResponse,
)
from webrag.services.rag_service import RAGService

router = APIRouter(prefix="/api", tags=["rag"])


def _status_for(error: WebRagError) -> int:
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, NoResultsError):
        return 404
    if isinstance(error, (FetchError, ModelError)):
        return 502
    return 500


def _http_error(error: WebRagError) -> HTTPException:
    return HTTPException(status_code=_status_for(error), detail=str(error))


def _to_search_response(
    response: RAGResponse,
    *,
    enriched: bool = False,
    reasons: tuple[str, ...] = (),
) -> SearchResponse:
    return SearchResponse(
        answer=response.answer,
        sources=[SourceResponse(**source.to_dict()) for source in response.sources],
        query=response.query,
        timestamp=response.timestamp,
        enriched=enriched,
        enrichment_reasons=list(reasons),
    )


@router.post("/search", response_model=SearchResponse)
async def search(body: SearchRequest, rag: RAGService = Depends(get_rag_service)):
    """Answer a question from stored knowledge, enriching from the web when needed."""
    if not body.query.strip():
        raise HTTPException(status_code=400, detail="Query must not be empty")
    try:
        if body.enrich:
            gated = await rag.answer(body.query)
            return _to_search_response(gated.response, enriched=gated.enriched, reasons=gated.reasons)
        response = await rag.search(
            SearchQuery(
                query=body.query,
                top_k=body.top_k,
                threshold=body.threshold,
                include_web_search=body.include_web_search,
                web_search_results=body.web_search_results,
            )
        )
        return _to_search_response(response)
    except WebRagError as e:
        raise _http_error(e)


@router.post("/add-web-content", response_model=AddWebContentResponse)
async def add_web_content(body: AddWebContentRequest, rag: RAGService = Depends(get_rag_service)):
    try:
        if body.comprehensive:
            result = await rag.add_from_comprehensive_search(
                body.query,
                max_results=body.max_results,
                max_variants=body.max_variants,
            )
        else:
            result = await rag.add_from_web_search(body.query, max_results=body.max_results)
    except WebRagError as e:
        raise _http_error(e)

    topics = list(result.topic_analysis.topics) if result.topic_analysis else []
    return AddWebContentResponse(
        documents_added=result.documents_added,
        topics=topics,
        search_variants=result.search_variants,
    )


@router.post("/add-document", response_model=AddDocumentResponse)
async def add_document(body: AddDocumentRequest, rag: RAGService = Depends(get_rag_service)):
    if not body.content.strip():
        raise HTTPException(status_code=400, detail="Document content must not be empty")

    document_id = f"upload_{uuid.uuid4().hex[:12]}"
    metadata = {"source": "upload", "title": body.title or document_id}
    if body.url:
        metadata["url"] = body.url
    try:
        chunks = await rag.add_documents(
            [Document(id=document_id, content=body.content, metadata=metadata)]
        )
    except WebRagError as e:
        raise _http_error(e)
    return AddDocumentResponse(document_id=document_id, chunks_added=chunks)


@router.get("/stats")
async def stats(rag: RAGService = Depends(get_rag_service)):
    return await rag.get_stats()


@router.delete("/source/{source:path}", response_model=RemoveSourceResponse)
async def remove_source(source: str, rag: RAGService = Depends(get_rag_service)):
    removed = await rag.remove_source(source)
    return RemoveSourceResponse(source=source, chunks_removed=removed)


@router.delete("/clear")
async def clear(rag: RAGService = Depends(get_rag_service)):
    await rag.clear()
    return {"status": "cleared"}


@router.get("/models", response_model=ModelsResponse)
async def list_models(rag: RAGService = Depends(get_rag_service)):
    """List the models installed on the Ollama server."""
    try:
        models = await rag.list_available_models()
    except WebRagError as e:
        raise _http_error(e)
    return ModelsResponse(models=models)


@router.get("/diagnose")
async def diagnose(rag: RAGService = Depends(get_rag_service)):
    return await rag.diagnose()
