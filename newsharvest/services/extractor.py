from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, tzinfo

from bs4 import BeautifulSoup
from dateutil import parser as date_parser
from dateutil import tz
from soupsieve import SelectorSyntaxError

from ..exceptions import FetchError, ParseError
from ..models.news import (
    BAD_TIMESTAMP,
    MISSING_FIELD,
    Accepted,
    ExtractionOutcome,
    Failed,
    NewsRecord,
    Rejected,
    SelectorConfig,
)
from .fetcher import DocumentFetcher

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ItemExtractor:
    fetcher: DocumentFetcher = field(default_factory=DocumentFetcher)
    local_tz: tzinfo = field(default_factory=tz.tzlocal)

    async def extract(self, url: str, config: SelectorConfig) -> ExtractionOutcome:
        try:
            document = await self.fetcher.fetch(url)
        except FetchError as exc:
            logger.warning("Failed to fetch detail page %s: %s", url, exc.cause)
            return Failed(url, exc)
        try:
            return self.parse(url, document, config)
        except SelectorSyntaxError as exc:
            return Failed(url, ParseError(url, exc))

    def parse(
        self, url: str, document: BeautifulSoup, config: SelectorConfig
    ) -> Accepted | Rejected:
        headline = select_text(document, config.headline_selector)
        description = select_text(document, config.description_selector)
        raw_time = select_attribute(
            document,
            config.publication_time_selector,
            config.publication_time_attribute,
        )
        if not headline or not description or not raw_time:
            logger.debug(
                "Empty fields on %s: headline=%r description=%r time=%r",
                url,
                headline[:40],
                description[:40],
                raw_time,
            )
            return Rejected(url, MISSING_FIELD)

        published = parse_timestamp(raw_time, self.local_tz)
        if published is None:
            logger.debug("Unparseable timestamp %r on %s", raw_time, url)
            return Rejected(url, BAD_TIMESTAMP)

        record = NewsRecord(
            headline=headline,
            description=description,
            publication_time=published,
        )
        return Accepted(url, record)


def select_text(document: BeautifulSoup, selector: str) -> str:
    text = " ".join(node.get_text(" ") for node in document.select(selector))
    return " ".join(text.split())


def select_attribute(document: BeautifulSoup, selector: str, attribute: str) -> str:
    for node in document.select(selector):
        value = node.get(attribute)
        if isinstance(value, list):
            value = " ".join(value)
        if value is not None:
            return value.strip()
    return ""


def parse_timestamp(value: str, local_tz: tzinfo) -> datetime | None:
    """Parse an ISO-8601 timestamp carrying an offset and move it to local time.

    Offset-less values are refused; their instant is ambiguous.
    """
    try:
        parsed = date_parser.isoparse(value)
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is None or parsed.utcoffset() is None:
        return None
    return parsed.astimezone(local_tz)
