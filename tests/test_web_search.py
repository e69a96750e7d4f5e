from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from webrag.errors import FetchError, NoResultsError, ValidationError
from webrag.models.web_search import SearchResult
from webrag.services.web_search import WebSearch, WebSearchConfig

ARTICLE_HTML = (
    "<html><head><title>Article</title></head><body><article>"
    + " ".join(["Useful paragraph about the topic at hand."] * 10)
    + "</article></body></html>"
)


class FakeBackend:
    """Returns `per_query` distinct results for every query."""

    def __init__(self, per_query: int = 2, error: Exception | None = None):
        self.per_query = per_query
        self.error = error
        self.calls: list[tuple[str, str, int]] = []

    async def search(self, query, engine="duckduckgo", result_limit=10):
        self.calls.append((query, engine, result_limit))
        if self.error is not None:
            raise self.error
        slug = query.lower().replace(" ", "-")
        results = [
            SearchResult(title=f"{query} {i}", url=f"https://{slug}.example/{i}", snippet="s", rank=i + 1)
            for i in range(self.per_query)
        ]
        return results[:result_limit]


class FakeFetcher:
    def __init__(self, failing: set[str] | None = None):
        self.failing = failing or set()
        self.fetched: list[str] = []

    async def fetch(self, url: str) -> str:
        self.fetched.append(url)
        if url in self.failing:
            raise FetchError("HTTP 500: Internal Server Error", url=url, status_code=500)
        return ARTICLE_HTML


def _web_search(backend=None, fetcher=None, **config) -> WebSearch:
    return WebSearch(
        WebSearchConfig(**config),
        fetcher=fetcher or FakeFetcher(),
        backend=backend or FakeBackend(),
    )


@pytest.mark.asyncio
async def test_extract_contents_rejects_malformed_url_before_any_fetch():
    fetcher = MagicMock()
    fetcher.fetch = AsyncMock(return_value=ARTICLE_HTML)
    ws = _web_search(fetcher=fetcher)

    with pytest.raises(ValidationError):
        await ws.extract_contents(["https://ok.example/a", "not-a-url"])

    fetcher.fetch.assert_not_awaited()


@pytest.mark.asyncio
async def test_extract_contents_rejects_empty_list():
    with pytest.raises(ValidationError):
        await _web_search().extract_contents([])


@pytest.mark.asyncio
async def test_extract_contents_settles_every_url_in_input_order():
    fetcher = FakeFetcher(failing={"https://b.example/"})
    ws = _web_search(fetcher=fetcher)
    urls = ["https://a.example/", "https://b.example/", "https://c.example/"]

    contents = await ws.extract_contents(urls)

    assert [c.url for c in contents] == urls
    assert [c.success for c in contents] == [True, False, True]
    assert "HTTP 500" in (contents[1].error or "")
    assert contents[1].content == ""
    assert sorted(fetcher.fetched) == sorted(urls)


@pytest.mark.asyncio
async def test_extract_contents_keeps_empty_page_as_success():
    fetcher = MagicMock()
    fetcher.fetch = AsyncMock(return_value="")
    ws = _web_search(fetcher=fetcher)

    contents = await ws.extract_contents(["https://example.com/empty"])

    assert contents[0].success is True
    assert contents[0].error is None
    assert contents[0].content == ""


@pytest.mark.asyncio
async def test_get_top_urls_uses_configured_limit():
    backend = FakeBackend(per_query=5)
    ws = _web_search(backend=backend, max_results=3)

    urls = await ws.get_top_urls("python asyncio")

    assert len(urls) == 3
    assert backend.calls == [("python asyncio", "duckduckgo", 3)]


@pytest.mark.asyncio
async def test_smart_search_runs_plan_until_desired_results():
    backend = FakeBackend(per_query=5)
    ws = _web_search(backend=backend)

    result = await ws.smart_search("python asyncio tutorial", max_results=2)

    assert len(result.results) == 2
    assert result.topics == ["python", "asyncio", "tutorial"]
    assert result.executed_queries == ["python asyncio tutorial"]
    assert backend.calls[0][2] == 2


@pytest.mark.asyncio
async def test_smart_search_explicit_zero_max_results_means_one():
    backend = FakeBackend(per_query=5)
    ws = _web_search(backend=backend, max_results=10)

    result = await ws.smart_search("python asyncio tutorial", max_results=0)

    assert len(result.results) == 1
    assert backend.calls[0][2] == 1


@pytest.mark.asyncio
async def test_smart_search_topic_options_override_defaults():
    ws = _web_search()

    result = await ws.smart_search(
        "python asyncio tutorial",
        topic_options={"max_topics": 1},
        max_results=1,
    )

    assert result.topics == ["python"]


@pytest.mark.asyncio
async def test_smart_search_raises_no_results_when_nothing_found():
    ws = _web_search(backend=FakeBackend(per_query=0))

    with pytest.raises(NoResultsError):
        await ws.smart_search("python asyncio tutorial")


@pytest.mark.asyncio
async def test_smart_search_raises_fetch_error_when_backend_unreachable():
    backend = FakeBackend(error=FetchError("Timed out after 15000ms"))
    ws = _web_search(backend=backend)

    with pytest.raises(FetchError):
        await ws.smart_search("the best Python frameworks for web development")

    assert len(backend.calls) >= 2


@pytest.mark.asyncio
async def test_smart_search_validates_query_and_engine():
    ws = _web_search()

    with pytest.raises(ValidationError):
        await ws.smart_search(" a ")
    with pytest.raises(ValidationError):
        await ws.smart_search("python", engine="altavista")


@pytest.mark.asyncio
async def test_comprehensive_search_appends_combined_variants():
    backend = FakeBackend(per_query=2)
    ws = _web_search(backend=backend)

    result = await ws.comprehensive_search(
        "Python asyncio tutorial",
        max_variants=5,
        max_results=12,
    )

    assert result.executed_queries == [
        "Python asyncio tutorial",
        "Python",
        "tutorial",
        "asyncio",
        "Python asyncio",
        "Python tutorial",
    ]
    assert len(result.all_results) == 12
    assert len({c.url for c in result.all_results}) == 12
    assert [v.query for v in result.results_by_variant] == result.executed_queries
    assert all(len(v.results) == 2 for v in result.results_by_variant)


@pytest.mark.asyncio
async def test_comprehensive_search_defaults_to_at_least_ten_results():
    backend = FakeBackend(per_query=20)
    ws = _web_search(backend=backend, max_results=4)

    result = await ws.comprehensive_search("Python asyncio tutorial")

    assert len(result.all_results) == 10
    assert backend.calls[0][2] == 10


@pytest.mark.asyncio
async def test_comprehensive_search_explicit_zero_max_results_means_one():
    backend = FakeBackend(per_query=20)
    ws = _web_search(backend=backend)

    result = await ws.comprehensive_search("Python asyncio tutorial", max_results=0)

    assert len(result.all_results) == 1
    assert backend.calls[0][2] == 1


def test_config_from_settings_copies_web_fields():
    from webrag.config import Settings

    s = Settings(
        _env_file=None,
        web_max_results=7,
        web_exclude_domains="Pinterest.com, quora.com",
    )

    config = WebSearchConfig.from_settings(s)

    assert config.max_results == 7
    assert config.exclude_domains == ("pinterest.com", "quora.com")
    assert config.include_domains == ()
