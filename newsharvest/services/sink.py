from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any, Protocol

import httpx
from dateutil import parser as date_parser

from ..config import Settings, get_settings
from ..exceptions import DeliveryError, SinkError
from ..http_client import get_http_client
from ..models.news import NewsRecord

logger = logging.getLogger(__name__)


class NewsSink(Protocol):
    async def create(self, record: NewsRecord) -> NewsRecord: ...

    async def delete_before(self, moment: datetime) -> None: ...

    async def query(self, start: datetime, end: datetime) -> list[NewsRecord]: ...


def _epoch_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


@dataclass(slots=True)
class HttpNewsSink:
    """Client for the news storage REST service.

    The service speaks local wall-clock date-times without an offset, and
    epoch milliseconds in query parameters.
    """

    settings: Settings | None = None
    client: httpx.AsyncClient | None = None
    local_tz: tzinfo | None = None

    def __post_init__(self) -> None:
        if self.settings is None:
            self.settings = get_settings()
        if self.local_tz is None:
            self.local_tz = self.settings.local_tz()

    @property
    def api_url(self) -> str:
        return str(self.settings.news_api_url)

    async def create(self, record: NewsRecord) -> NewsRecord:
        client = self.client or await get_http_client()
        try:
            response = await client.post(self.api_url, json=self._to_payload(record))
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise DeliveryError(record, exc) from exc
        if not response.content:
            return record
        try:
            return self._from_payload(response.json())
        except (ValueError, TypeError, KeyError):
            logger.warning("Unexpected create response for %r", record.headline)
            return record

    async def delete_before(self, moment: datetime) -> None:
        client = self.client or await get_http_client()
        try:
            response = await client.delete(
                self.api_url, params={"time": _epoch_millis(moment)}
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise SinkError(f"delete before {moment.isoformat()} failed: {exc}") from exc

    async def query(self, start: datetime, end: datetime) -> list[NewsRecord]:
        client = self.client or await get_http_client()
        try:
            response = await client.get(
                self.api_url,
                params={"start": _epoch_millis(start), "end": _epoch_millis(end)},
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise SinkError(f"query {start.isoformat()}..{end.isoformat()} failed: {exc}") from exc
        if payload is None:
            payload = []
        if not isinstance(payload, list):
            raise SinkError(f"query returned {type(payload).__name__}, expected a list")

        records: list[NewsRecord] = []
        for item in payload:
            # Stored rows are not guaranteed to pass NewsRecord validation.
            try:
                records.append(self._from_payload(item))
            except (KeyError, TypeError, ValueError, OverflowError) as exc:
                logger.warning("Skipping unreadable stored record %r: %s", item, exc)
        return records

    def _to_payload(self, record: NewsRecord) -> dict[str, Any]:
        local_time = record.publication_time.astimezone(self.local_tz)
        return {
            "headline": record.headline,
            "description": record.description,
            "publicationTime": local_time.replace(tzinfo=None).isoformat(),
        }

    def _from_payload(self, payload: dict[str, Any]) -> NewsRecord:
        published = date_parser.isoparse(payload["publicationTime"])
        if published.tzinfo is None:
            published = published.replace(tzinfo=self.local_tz)
        return NewsRecord(
            id=payload.get("id"),
            headline=payload["headline"],
            description=payload["description"],
            publication_time=published,
        )


@dataclass(slots=True)
class InMemoryNewsSink:
    """Process-local sink used for dry runs and tests."""

    records: list[NewsRecord] = field(default_factory=list)
    created: list[NewsRecord] = field(default_factory=list)
    deletions: list[datetime] = field(default_factory=list)
    _ids: Any = field(default_factory=lambda: itertools.count(1))

    async def create(self, record: NewsRecord) -> NewsRecord:
        stored = record.model_copy(update={"id": next(self._ids)})
        self.created.append(record)
        self.records.append(stored)
        return stored

    async def delete_before(self, moment: datetime) -> None:
        self.deletions.append(moment)
        self.records = [r for r in self.records if r.publication_time > moment]

    async def query(self, start: datetime, end: datetime) -> list[NewsRecord]:
        return [r for r in self.records if start <= r.publication_time <= end]


def build_sink(
    settings: Settings, client: httpx.AsyncClient | None = None
) -> NewsSink:
    if settings.sink_backend == "memory":
        return InMemoryNewsSink()
    return HttpNewsSink(settings=settings, client=client)
