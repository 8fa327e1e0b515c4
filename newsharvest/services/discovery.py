from __future__ import annotations

import logging
from dataclasses import dataclass, field
from urllib.parse import urljoin, urlsplit

from bs4 import Tag
from soupsieve import SelectorSyntaxError

from ..exceptions import ParseError
from ..models.news import SelectorConfig
from .fetcher import DocumentFetcher

logger = logging.getLogger(__name__)


def resolve_href(base_url: str, href: str) -> str:
    if urlsplit(href).scheme:
        return href
    return urljoin(base_url, href)


def _item_href(node: Tag) -> str | None:
    anchor = node if node.name == "a" and node.get("href") else node.find("a", href=True)
    if anchor is None:
        return None
    href = anchor.get("href")
    if isinstance(href, list):
        href = " ".join(href)
    href = (href or "").strip()
    return href or None


@dataclass(slots=True)
class ListingDiscoverer:
    fetcher: DocumentFetcher = field(default_factory=DocumentFetcher)

    async def discover(self, config: SelectorConfig) -> set[str]:
        """Resolve the listing page into the set of absolute detail-page URLs.

        A failure to fetch the listing propagates; there is nothing to ingest
        without it.
        """
        document = await self.fetcher.fetch(config.listing_url)
        try:
            nodes = document.select(config.item_selector)
        except SelectorSyntaxError as exc:
            raise ParseError(config.listing_url, exc) from exc

        urls: set[str] = set()
        for node in nodes:
            href = _item_href(node)
            if href is None:
                logger.debug("Item node without href on %s", config.listing_url)
                continue
            urls.add(resolve_href(config.base_url, href))

        logger.info(
            "Discovered %d detail pages from %d item nodes on %s",
            len(urls),
            len(nodes),
            config.listing_url,
        )
        return urls
