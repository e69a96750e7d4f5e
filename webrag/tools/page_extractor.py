from __future__ import annotations

from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag

from webrag.models.web_search import ExtractedContent, PageMetadata
from webrag.tools.web_utils import clean_text

NON_CONTENT_SELECTOR = (
    "script, style, noscript, nav, header, footer, .advertisement, .ads, .social-share"
)

# Tried in order; the first region with enough text wins.
CONTENT_SELECTORS = (
    "article",
    '[role="main"]',
    ".content",
    ".post-content",
    ".entry-content",
    ".article-body",
    "main",
    ".main-content",
)

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]

# (selector, attribute) alternatives per metadata field, first non-empty wins.
METADATA_SOURCES: dict[str, tuple[tuple[str, str], ...]] = {
    "description": (
        ('meta[name="description"]', "content"),
        ('meta[property="og:description"]', "content"),
    ),
    "keywords": (('meta[name="keywords"]', "content"),),
    "author": (
        ('meta[name="author"]', "content"),
        ('meta[property="article:author"]', "content"),
    ),
    "publish_date": (
        ('meta[property="article:published_time"]', "content"),
        ('meta[name="date"]', "content"),
        ("time[datetime]", "datetime"),
    ),
    "language": (
        ("html[lang]", "lang"),
        ('meta[http-equiv="content-language"]', "content"),
    ),
}


class PageExtractor:
    """Turns raw HTML into title, main text, headings, links and metadata."""

    def __init__(self, *, min_content_length: int = 200, max_links: int = 50):
        self.min_content_length = min_content_length
        self.max_links = max_links

    def extract(self, url: str, raw_html: str) -> ExtractedContent:
        soup = BeautifulSoup(raw_html, "html.parser")

        # Metadata lives in <head>/<html>, read it before any node is removed.
        metadata = self._extract_metadata(soup)

        for node in soup.select(NON_CONTENT_SELECTOR):
            node.decompose()

        return ExtractedContent(
            url=url,
            title=self._extract_title(soup),
            content=self._extract_main_content(soup),
            headings=self._extract_headings(soup),
            links=self._extract_links(soup, url),
            metadata=metadata,
        )

    def _extract_main_content(self, soup: BeautifulSoup) -> str:
        for selector in CONTENT_SELECTORS:
            elements = soup.select(selector)
            if not elements:
                continue
            text = clean_text(" ".join(el.get_text(" ") for el in elements))
            if len(text) >= self.min_content_length:
                return text

        root = soup.body or soup
        return clean_text(root.get_text(" "))

    @staticmethod
    def _extract_title(soup: BeautifulSoup) -> str:
        if soup.title:
            title = clean_text(soup.title.get_text())
            if title:
                return title
        h1 = soup.find("h1")
        if isinstance(h1, Tag):
            return clean_text(h1.get_text(" "))
        return ""

    @staticmethod
    def _extract_headings(soup: BeautifulSoup) -> list[str]:
        headings: list[str] = []
        for element in soup.find_all(HEADING_TAGS):
            text = clean_text(element.get_text(" "))
            if text:
                headings.append(text)
        return headings

    def _extract_links(self, soup: BeautifulSoup, base_url: str) -> list[str]:
        links: list[str] = []
        seen: set[str] = set()
        for anchor in soup.select("a[href]"):
            href = anchor.get("href")
            if not isinstance(href, str) or not href.strip():
                continue
            try:
                absolute = urljoin(base_url, href.strip())
                scheme = urlparse(absolute).scheme
            except ValueError:
                continue
            if scheme not in ("http", "https") or absolute in seen:
                continue
            seen.add(absolute)
            links.append(absolute)
            if len(links) >= self.max_links:
                break
        return links

    @staticmethod
    def _extract_metadata(soup: BeautifulSoup) -> PageMetadata:
        values: dict[str, str] = {}
        for field_name, sources in METADATA_SOURCES.items():
            for selector, attribute in sources:
                element = soup.select_one(selector)
                if element is None:
                    continue
                raw = element.get(attribute)
                if isinstance(raw, str) and raw.strip():
                    values[field_name] = raw.strip()
                    break
        return PageMetadata(**values)
