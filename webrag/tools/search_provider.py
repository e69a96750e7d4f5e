from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from loguru import logger

from webrag.errors import ValidationError
from webrag.models.web_search import SearchResult
from webrag.tools import duckduckgo_search
from webrag.tools.fetcher import ContentFetcher
from webrag.tools.web_utils import domain_matches, extract_domain

SUPPORTED_ENGINES = ("duckduckgo", "google", "bing")


class SearchBackend(Protocol):
    async def search(
        self,
        query: str,
        engine: str = "duckduckgo",
        result_limit: int = 10,
    ) -> list[SearchResult]: ...


class WebSearchBackend:
    """Search engine dispatch plus include/exclude domain filtering."""

    def __init__(
        self,
        fetcher: ContentFetcher,
        *,
        include_domains: Sequence[str] = (),
        exclude_domains: Sequence[str] = (),
    ):
        self.fetcher = fetcher
        self.include_domains = tuple(d.lower() for d in include_domains if d)
        self.exclude_domains = tuple(d.lower() for d in exclude_domains if d)

    async def search(
        self,
        query: str,
        engine: str = "duckduckgo",
        result_limit: int = 10,
    ) -> list[SearchResult]:
        engine = (engine or "duckduckgo").lower().strip()
        if engine not in SUPPORTED_ENGINES:
            raise ValidationError(f"Unsupported search engine: {engine}")

        if engine != "duckduckgo":
            # No scraping-friendly endpoint for these; DuckDuckGo serves them.
            logger.info(f"Search engine '{engine}' served by duckduckgo")

        results = await duckduckgo_search.search(self.fetcher, query)
        filtered = self.filter_results(results)
        logger.debug(
            f"Search '{query}': {len(results)} parsed, {len(filtered)} after domain filters"
        )
        return filtered[: max(result_limit, 0)]

    def filter_results(self, results: list[SearchResult]) -> list[SearchResult]:
        kept: list[SearchResult] = []
        for result in results:
            domain = extract_domain(result.url)
            if self.exclude_domains and domain_matches(domain, self.exclude_domains):
                continue
            if self.include_domains and not domain_matches(domain, self.include_domains):
                continue
            kept.append(result)
        return kept
