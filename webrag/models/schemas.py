from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


# --- Requests ---


class SearchRequest(BaseModel):
    query: str
    top_k: int | None = Field(default=None, ge=1)
    threshold: float | None = Field(default=None, ge=0.0, le=1.0)
    include_web_search: bool = False
    web_search_results: int | None = Field(default=None, ge=1)
    enrich: bool = True


class AddWebContentRequest(BaseModel):
    query: str
    max_results: int = Field(default=5, ge=1)
    comprehensive: bool = False
    max_variants: int = Field(default=3, ge=1)


class AddDocumentRequest(BaseModel):
    content: str
    title: str | None = None
    url: str | None = None


# --- Responses ---


class SourceResponse(BaseModel):
    content: str
    metadata: dict[str, Any]
    similarity: float


class SearchResponse(BaseModel):
    answer: str
    sources: list[SourceResponse]
    query: str
    timestamp: datetime
    enriched: bool = False
    enrichment_reasons: list[str] = []


class AddWebContentResponse(BaseModel):
    documents_added: int
    topics: list[str] = []
    search_variants: list[str] = []


class AddDocumentResponse(BaseModel):
    document_id: str
    chunks_added: int


class RemoveSourceResponse(BaseModel):
    source: str
    chunks_removed: int


class ModelsResponse(BaseModel):
    models: list[str]
