"""Web search acquisition: query analysis, planned search, fetch and extract."""
from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from loguru import logger

from webrag.config import Settings, settings as default_settings
from webrag.errors import FetchError, NoResultsError, ValidationError
from webrag.models.web_search import (
    ComprehensiveSearchResult,
    ExtractedContent,
    SearchPlanStep,
    SearchRunResult,
    SmartSearchResult,
    TopicAnalysis,
    VariantResults,
)
from webrag.services.search_executor import filter_new_results, run_search_plan
from webrag.services.search_planner import (
    REASON_COMBINED_VARIANT,
    build_search_plan,
    topic_limit,
)
from webrag.services.topics import (
    TopicExtractionOptions,
    analyze_topic_relevance,
    extract_topics,
    generate_search_variants,
)
from webrag.tools.fetcher import ContentFetcher
from webrag.tools.page_extractor import PageExtractor
from webrag.tools.search_provider import SUPPORTED_ENGINES, SearchBackend, WebSearchBackend
from webrag.tools.web_utils import is_valid_url

# Topic extraction used by the planned search modes, before caller overrides.
SEARCH_TOPIC_OPTIONS = TopicExtractionOptions(
    language="both",
    min_word_length=3,
    max_topics=8,
    preserve_capitalized=True,
)

MIN_COMPREHENSIVE_RESULTS = 10


@dataclass(frozen=True, slots=True)
class WebSearchConfig:
    max_results: int = 10
    timeout_ms: int = 15000
    retry_attempts: int = 3
    retry_delay_ms: int = 1000
    min_content_length: int = 200
    exclude_domains: tuple[str, ...] = ()
    include_domains: tuple[str, ...] = ()
    max_parallel_fetches: int = 8
    user_agent: str = default_settings.web_user_agent

    @classmethod
    def from_settings(cls, s: Settings) -> WebSearchConfig:
        return cls(
            max_results=s.web_max_results,
            timeout_ms=s.web_timeout_ms,
            retry_attempts=s.web_retry_attempts,
            retry_delay_ms=s.web_retry_delay_ms,
            min_content_length=s.web_min_content_length,
            exclude_domains=tuple(s.exclude_domain_list),
            include_domains=tuple(s.include_domain_list),
            max_parallel_fetches=s.web_max_parallel_fetches,
            user_agent=s.web_user_agent,
        )


class WebSearch:
    """Entry point of the acquisition pipeline.

    `smart_search` and `comprehensive_search` are the planned modes used by
    ingestion. `get_top_urls`, `extract_contents` and `search_and_extract`
    are the single-query building blocks they run per plan step.
    """

    def __init__(
        self,
        config: WebSearchConfig | None = None,
        *,
        fetcher: ContentFetcher | None = None,
        extractor: PageExtractor | None = None,
        backend: SearchBackend | None = None,
    ):
        self.config = config or WebSearchConfig.from_settings(default_settings)
        self.fetcher = fetcher or ContentFetcher(
            timeout_ms=self.config.timeout_ms,
            retry_attempts=self.config.retry_attempts,
            retry_delay_ms=self.config.retry_delay_ms,
            user_agent=self.config.user_agent,
        )
        self.extractor = extractor or PageExtractor(
            min_content_length=self.config.min_content_length,
        )
        self.backend: SearchBackend = backend or WebSearchBackend(
            self.fetcher,
            include_domains=self.config.include_domains,
            exclude_domains=self.config.exclude_domains,
        )

    async def get_top_urls(
        self,
        query: str,
        engine: str = "duckduckgo",
        limit: int | None = None,
    ) -> list[str]:
        _validate_query(query)
        result_limit = limit if limit is not None else self.config.max_results
        results = await self.backend.search(query.strip(), engine, result_limit)
        return [result.url for result in results]

    async def extract_contents(self, urls: Sequence[str]) -> list[ExtractedContent]:
        """Fetch and extract every URL; one record per URL, in input order."""
        _validate_urls(urls)

        semaphore = asyncio.Semaphore(max(self.config.max_parallel_fetches, 1))

        async def run_one(url: str) -> ExtractedContent:
            async with semaphore:
                raw_html = await self.fetcher.fetch(url)
            return self.extractor.extract(url, raw_html)

        settled = await asyncio.gather(
            *(run_one(url) for url in urls),
            return_exceptions=True,
        )

        contents: list[ExtractedContent] = []
        for url, item in zip(urls, settled):
            if isinstance(item, BaseException):
                logger.warning(f"Extraction failed for {url}: {item}")
                contents.append(ExtractedContent.failure(url, str(item) or type(item).__name__))
            else:
                contents.append(item)
        return contents

    async def search_and_extract(
        self,
        query: str,
        engine: str = "duckduckgo",
        limit: int | None = None,
    ) -> list[ExtractedContent]:
        urls = await self.get_top_urls(query, engine, limit)
        if not urls:
            return []
        return await self.extract_contents(urls)

    async def smart_search(
        self,
        query: str,
        engine: str = "duckduckgo",
        topic_options: Mapping[str, Any] | None = None,
        max_results: int | None = None,
    ) -> SmartSearchResult:
        _validate_query(query)
        _validate_engine(engine)
        desired = max(1, max_results if max_results is not None else self.config.max_results)

        topic_analysis = extract_topics(query, SEARCH_TOPIC_OPTIONS.merged(topic_options))
        logger.info(
            f"Query analysis for '{query}': topics={list(topic_analysis.topics)} "
            f"removed={list(topic_analysis.removed_words)}"
        )

        high_topics = [
            entry.topic
            for entry in analyze_topic_relevance(topic_analysis.topics)
            if entry.category == "high"
        ]
        plan = build_search_plan(
            query,
            topic_analysis,
            high_topics,
            desired,
            min(2, len(high_topics)),
        )
        _log_plan(plan)

        run = await self._run(plan, engine, desired)
        return SmartSearchResult(
            results=run.results,
            topic_analysis=topic_analysis,
            topics=list(topic_analysis.topics),
            executed_queries=run.executed_queries,
        )

    async def comprehensive_search(
        self,
        query: str,
        engine: str = "duckduckgo",
        max_variants: int = 3,
        topic_options: Mapping[str, Any] | None = None,
        max_results: int | None = None,
    ) -> ComprehensiveSearchResult:
        _validate_query(query)
        _validate_engine(engine)
        default_desired = max(self.config.max_results, MIN_COMPREHENSIVE_RESULTS)
        desired = max(1, max_results if max_results is not None else default_desired)

        topic_analysis = extract_topics(query, SEARCH_TOPIC_OPTIONS.merged(topic_options))
        prioritized = [entry.topic for entry in analyze_topic_relevance(topic_analysis.topics)]
        priority_cap = min(max_variants, len(prioritized))

        plan = build_search_plan(query, topic_analysis, prioritized, desired, priority_cap)
        plan.extend(_variant_steps(topic_analysis, plan, max_variants - priority_cap, desired))
        _log_plan(plan)

        run = await self._run(plan, engine, desired)
        all_results = filter_new_results(run.results, set())
        logger.info(f"Comprehensive search for '{query}': {len(all_results)} unique results")

        return ComprehensiveSearchResult(
            all_results=all_results,
            results_by_variant=[
                VariantResults(query=outcome.step.query, results=outcome.results)
                for outcome in run.step_results
            ],
            topic_analysis=topic_analysis,
            executed_queries=run.executed_queries,
        )

    async def _run(
        self,
        plan: list[SearchPlanStep],
        engine: str,
        desired: int,
    ) -> SearchRunResult:
        async def search_step(step_query: str, limit: int) -> list[ExtractedContent]:
            return await self.search_and_extract(step_query, engine, limit)

        run = await run_search_plan(plan, search_step, desired)

        if run.executed_queries:
            logger.info(f"Executed queries: {' | '.join(run.executed_queries)}")

        if not run.results:
            if run.executed_queries and len(run.failed_queries) == len(run.executed_queries):
                raise FetchError(
                    f"Search backend unreachable for all {len(run.failed_queries)} queries"
                )
            raise NoResultsError(
                f"No content found for {len(run.executed_queries)} executed queries"
            )
        return run


def _variant_steps(
    topic_analysis: TopicAnalysis,
    plan: list[SearchPlanStep],
    budget: int,
    desired: int,
) -> list[SearchPlanStep]:
    existing = {step.query for step in plan}
    variants = [v for v in generate_search_variants(topic_analysis.topics) if v not in existing]
    return [
        SearchPlanStep(
            query=variant,
            reason=REASON_COMBINED_VARIANT,
            optional=True,
            limit=topic_limit(desired),
        )
        for variant in variants[: max(0, budget)]
    ]


def _log_plan(plan: list[SearchPlanStep]) -> None:
    logger.info("Search plan: " + " | ".join(f'{s.reason} -> "{s.query}"' for s in plan))


def _validate_query(query: str) -> None:
    if not isinstance(query, str) or not query.strip():
        raise ValidationError("Search query must not be empty")
    if len(query.strip()) < 2:
        raise ValidationError("Search query must be at least 2 characters long")


def _validate_engine(engine: str) -> None:
    if (engine or "").lower().strip() not in SUPPORTED_ENGINES:
        raise ValidationError(f"Unsupported search engine: {engine}")


def _validate_urls(urls: Sequence[str]) -> None:
    if isinstance(urls, str) or not urls:
        raise ValidationError("URL list must not be empty")
    for url in urls:
        if not isinstance(url, str):
            raise ValidationError("Every URL must be a string")
        if not is_valid_url(url):
            raise ValidationError(f"Invalid URL: {url}")
