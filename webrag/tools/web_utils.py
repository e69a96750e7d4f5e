from __future__ import annotations

import re
from urllib.parse import parse_qsl, unquote, urlencode, urlparse, urlsplit, urlunsplit

TRACKING_PARAMS = frozenset(
    {"utm_source", "utm_medium", "utm_campaign", "utm_content", "utm_term", "fbclid", "gclid"}
)

_UDDG = re.compile(r"uddg=([^&]+)")


def is_valid_url(url: str) -> bool:
    """Basic URL validation."""
    try:
        result = urlparse(url)
        return all([result.scheme in ("http", "https"), result.netloc])
    except Exception:
        return False


def clean_text(text: str) -> str:
    """Collapse all whitespace runs to single spaces."""
    return re.sub(r"\s+", " ", text).strip()


def extract_domain(url: str) -> str:
    """Lowercased hostname, or an empty string for unparsable URLs."""
    try:
        return (urlparse(url).hostname or "").lower()
    except Exception:
        return ""


def strip_tracking_params(url: str) -> str:
    parsed = urlsplit(url)
    if not parsed.query:
        return url
    kept = [
        (key, value)
        for key, value in parse_qsl(parsed.query, keep_blank_values=True)
        if key not in TRACKING_PARAMS
    ]
    return urlunsplit(
        (parsed.scheme, parsed.netloc, parsed.path, urlencode(kept), parsed.fragment)
    )


def clean_result_url(url: str) -> str:
    """Normalize a URL taken from a search result page.

    Unwraps DuckDuckGo `uddg=` redirects, upgrades protocol-relative URLs to
    https and drops common tracking parameters. Site-relative URLs are
    returned unchanged.
    """
    url = url.strip()
    if "duckduckgo.com/l/?" in url and "uddg=" in url:
        match = _UDDG.search(url)
        if match:
            url = unquote(match.group(1))

    if url.startswith("//"):
        url = "https:" + url
    elif url.startswith("/"):
        return url

    return strip_tracking_params(url)


def domain_matches(domain: str, patterns: list[str] | tuple[str, ...]) -> bool:
    return any(pattern in domain for pattern in patterns)
