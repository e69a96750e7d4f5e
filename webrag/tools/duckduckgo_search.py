from __future__ import annotations

from urllib.parse import quote_plus

from bs4 import BeautifulSoup

from webrag.models.web_search import SearchResult
from webrag.tools.fetcher import ContentFetcher
from webrag.tools.web_utils import clean_result_url, clean_text, is_valid_url

DUCKDUCKGO_HTML_URL = "https://html.duckduckgo.com/html/"


def build_search_url(query: str) -> str:
    return f"{DUCKDUCKGO_HTML_URL}?q={quote_plus(query)}"


def parse_results(raw_html: str) -> list[SearchResult]:
    """Parse a DuckDuckGo HTML result page.

    A block needs a title link, an href and a snippet to count. Rank is the
    1-based position of the block on the page, so skipped blocks leave gaps.
    """
    soup = BeautifulSoup(raw_html, "html.parser")
    results: list[SearchResult] = []

    for index, block in enumerate(soup.select(".result__body")):
        link = block.select_one(".result__title a")
        snippet_el = block.select_one(".result__snippet")
        if link is None or snippet_el is None:
            continue

        title = clean_text(link.get_text(" "))
        href = link.get("href")
        snippet = clean_text(snippet_el.get_text(" "))
        if not title or not isinstance(href, str) or not href.strip() or not snippet:
            continue

        url = clean_result_url(href)
        if not is_valid_url(url):
            continue

        results.append(SearchResult(title=title, url=url, snippet=snippet, rank=index + 1))

    return results


async def search(fetcher: ContentFetcher, query: str) -> list[SearchResult]:
    """Run a DuckDuckGo HTML search through the shared fetcher."""
    raw_html = await fetcher.fetch(build_search_url(query))
    return parse_results(raw_html)
