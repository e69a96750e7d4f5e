from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Literal

RelevanceCategory = Literal["high", "medium", "low"]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class TopicStats:
    original_word_count: int
    final_word_count: int
    stop_words_removed: int


@dataclass(frozen=True, slots=True)
class TopicAnalysis:
    topics: tuple[str, ...]
    cleaned_query: str
    removed_words: tuple[str, ...]
    stats: TopicStats


@dataclass(frozen=True, slots=True)
class RelevanceEntry:
    topic: str
    relevance_score: float
    category: RelevanceCategory


@dataclass(frozen=True, slots=True)
class SearchPlanStep:
    query: str
    reason: str
    optional: bool = False
    limit: int | None = None


@dataclass(slots=True)
class SearchResult:
    """One hit parsed from a search engine result page."""
    title: str
    url: str
    snippet: str
    rank: int


@dataclass(slots=True)
class PageMetadata:
    description: str | None = None
    keywords: str | None = None
    author: str | None = None
    publish_date: str | None = None
    language: str | None = None

    def to_dict(self) -> dict[str, str]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


@dataclass(slots=True)
class ExtractedContent:
    url: str
    title: str
    content: str
    headings: list[str] = field(default_factory=list)
    links: list[str] = field(default_factory=list)
    metadata: PageMetadata = field(default_factory=PageMetadata)
    extracted_at: datetime = field(default_factory=_utc_now)
    success: bool = True
    error: str | None = None

    @classmethod
    def failure(cls, url: str, error: str) -> ExtractedContent:
        return cls(url=url, title="", content="", success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "url": self.url,
            "title": self.title,
            "content": self.content,
            "headings": list(self.headings),
            "links": list(self.links),
            "metadata": self.metadata.to_dict(),
            "extracted_at": self.extracted_at.isoformat(),
            "success": self.success,
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload


@dataclass(slots=True)
class StepOutcome:
    step: SearchPlanStep
    results: list[ExtractedContent] = field(default_factory=list)
    failures: list[ExtractedContent] = field(default_factory=list)
    error: str | None = None


@dataclass(slots=True)
class SearchRunResult:
    results: list[ExtractedContent] = field(default_factory=list)
    executed_queries: list[str] = field(default_factory=list)
    step_results: list[StepOutcome] = field(default_factory=list)
    failed_queries: list[str] = field(default_factory=list)


@dataclass(slots=True)
class SmartSearchResult:
    results: list[ExtractedContent]
    topic_analysis: TopicAnalysis
    topics: list[str]
    executed_queries: list[str]


@dataclass(slots=True)
class VariantResults:
    query: str
    results: list[ExtractedContent]


@dataclass(slots=True)
class ComprehensiveSearchResult:
    all_results: list[ExtractedContent]
    results_by_variant: list[VariantResults]
    topic_analysis: TopicAnalysis
    executed_queries: list[str]
