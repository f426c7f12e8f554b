"""HTTP client factory and README fetcher.

All network I/O goes through one httpx.AsyncClient shared by the fetcher and
the GraphQL client. The lifespan owns the client lifecycle; components receive
it via constructor injection.
"""

from __future__ import annotations

import httpx
import structlog

from readmehub import __version__
from readmehub.config import EnrichmentSettings
from readmehub.errors import FetchError

log = structlog.get_logger()


def build_http_client(settings: EnrichmentSettings | None = None) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once at startup."""
    settings = settings or EnrichmentSettings()
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=httpx.Timeout(settings.request_timeout_seconds, connect=5.0),
        headers={"User-Agent": f"readmehub/{__version__}"},
        limits=httpx.Limits(
            max_connections=settings.max_concurrency + 2,
            max_keepalive_connections=settings.max_concurrency,
        ),
    )


class ReadmeFetcher:
    """Downloads the raw README markdown."""

    def __init__(self, client: httpx.AsyncClient, url: str) -> None:
        self._client = client
        self.url = url

    async def fetch(self) -> str:
        """Return the README text.

        Raises FetchError on network errors, non-2xx responses and empty bodies.
        """
        try:
            response = await self._client.get(self.url)
        except httpx.HTTPError as exc:
            raise FetchError(f"Network error fetching {self.url}: {exc}") from exc

        if not response.is_success:
            raise FetchError(
                f"HTTP {response.status_code} fetching {self.url}",
                recoverable=response.status_code >= 500 or response.status_code in {408, 429},
            )

        text = response.text
        if not text.strip():
            raise FetchError(f"Empty body fetching {self.url}", recoverable=False)

        log.info(
            "readme_fetch_complete",
            url=self.url,
            status_code=response.status_code,
            content_length=len(text),
        )
        return text
