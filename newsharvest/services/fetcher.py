from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx
from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..config import Settings, get_settings
from ..exceptions import FetchError, ParseError
from ..http_client import get_http_client

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DocumentFetcher:
    """Single point of network I/O and HTML parsing for source-site pages."""

    settings: Settings | None = None
    client: httpx.AsyncClient | None = None

    def __post_init__(self) -> None:
        if self.settings is None:
            self.settings = get_settings()

    async def fetch(self, url: str) -> BeautifulSoup:
        client = self.client or await get_http_client()
        try:
            response = await self._get(client, url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise FetchError(url, exc) from exc

        try:
            return BeautifulSoup(response.text, "lxml")
        except ParserRejectedMarkup as exc:
            raise ParseError(url, exc) from exc

    async def _get(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        # Only transport failures are retried; an HTTP status is the site's answer.
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.settings.fetch_attempts),
            wait=wait_exponential(min=0.5, max=4),
            retry=retry_if_exception_type(httpx.TransportError),
            before_sleep=lambda state: logger.warning(
                "Retrying %s after %s (attempt %d)",
                url,
                state.outcome.exception(),
                state.attempt_number,
            ),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                response = await client.get(url)
        return response
