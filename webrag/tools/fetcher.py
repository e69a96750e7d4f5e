from __future__ import annotations

import asyncio

import httpx
from loguru import logger

from webrag.config import settings
from webrag.errors import FetchError

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "fr-FR,fr;q=0.9,en;q=0.8",
    "Accept-Encoding": "gzip, deflate",
    "Cache-Control": "no-cache",
}


class ContentFetcher:
    """HTTP GET with a per-attempt timeout and linear retry backoff."""

    def __init__(
        self,
        *,
        timeout_ms: int = 15000,
        retry_attempts: int = 3,
        retry_delay_ms: int = 1000,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout_ms = max(int(timeout_ms), 1)
        self.retry_attempts = max(int(retry_attempts), 1)
        self.retry_delay_ms = max(int(retry_delay_ms), 0)
        self.user_agent = user_agent or settings.web_user_agent
        self._transport = transport

    @property
    def headers(self) -> dict[str, str]:
        return {"User-Agent": self.user_agent, **DEFAULT_HEADERS}

    async def fetch(self, url: str) -> str:
        """Return the response body of `url` or raise the last `FetchError`."""
        timeout_s = self.timeout_ms / 1000
        attempts = max(self.retry_attempts, 1)

        async with httpx.AsyncClient(
            timeout=timeout_s,
            follow_redirects=True,
            headers=self.headers,
            transport=self._transport,
        ) as client:
            for attempt in range(1, attempts + 1):
                try:
                    return await asyncio.wait_for(self._get(client, url), timeout=timeout_s)
                except FetchError as e:
                    error = e
                except (asyncio.TimeoutError, httpx.TimeoutException):
                    error = FetchError(
                        f"Timed out after {self.timeout_ms}ms", url=url
                    )
                except httpx.HTTPError as e:
                    error = FetchError(f"{type(e).__name__}: {e}", url=url)

                logger.debug(
                    f"Fetch attempt {attempt}/{attempts} failed for {url}: {error}"
                )
                if attempt == attempts:
                    raise error
                await asyncio.sleep(self.retry_delay_ms * attempt / 1000)

        raise FetchError(f"No fetch attempt made for {url}", url=url)

    async def _get(self, client: httpx.AsyncClient, url: str) -> str:
        response = await client.get(url)
        if not response.is_success:
            raise FetchError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                url=url,
                status_code=response.status_code,
            )
        return response.text
