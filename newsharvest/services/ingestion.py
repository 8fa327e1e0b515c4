from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime

import httpx

from ..config import Settings, get_settings
from ..exceptions import DeliveryError, FetchError, SinkError
from ..models.news import (
    OUTSIDE_WINDOW,
    Accepted,
    ExtractionOutcome,
    Failed,
    NewsRecord,
    Rejected,
    SelectorConfig,
)
from ..models.reports import IngestionReport, ItemFailure
from .discovery import ListingDiscoverer
from .extractor import ItemExtractor
from .fetcher import DocumentFetcher
from .sink import NewsSink
from .window import AcceptanceWindow, accept

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class IngestionService:
    """Runs listing discovery, extraction and delivery for one window.

    Listing failures propagate. Everything per item is isolated and folded
    into the returned report.
    """

    sink: NewsSink
    settings: Settings | None = None
    client: httpx.AsyncClient | None = None
    discoverer: ListingDiscoverer | None = None
    extractor: ItemExtractor | None = None

    def __post_init__(self) -> None:
        if self.settings is None:
            self.settings = get_settings()
        fetcher = DocumentFetcher(settings=self.settings, client=self.client)
        if self.discoverer is None:
            self.discoverer = ListingDiscoverer(fetcher=fetcher)
        if self.extractor is None:
            self.extractor = ItemExtractor(
                fetcher=fetcher, local_tz=self.settings.local_tz()
            )

    async def run(
        self,
        config: SelectorConfig,
        window: AcceptanceWindow,
        cancel: asyncio.Event | None = None,
    ) -> IngestionReport:
        local_tz = self.settings.local_tz()
        report = IngestionReport(
            started_at=datetime.now(local_tz),
            window_start=window.start,
            window_end=window.end,
        )

        urls = sorted(await self.discoverer.discover(config))
        report.discovered = len(urls)

        semaphore = asyncio.Semaphore(self.settings.ingest_concurrency)
        tasks = [
            self._process(url, config, window, semaphore, cancel) for url in urls
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        accepted: list[NewsRecord] = []
        for url, result in zip(urls, results, strict=True):
            if result is None:
                continue
            if isinstance(result, BaseException):
                logger.error("Unexpected error processing %s", url, exc_info=result)
                result = Failed(url, result)
            if isinstance(result, Accepted):
                accepted.append(result.record)
            elif isinstance(result, Rejected):
                report.rejected += 1
            else:
                report.failed.append(ItemFailure.from_exception(result.error, url))

        report.accepted = _unique(accepted)
        await self._deliver(report, cancel)

        report.cancelled = cancel is not None and cancel.is_set()
        report.finished_at = datetime.now(local_tz)
        logger.info(
            "Ingestion run finished: discovered=%d accepted=%d rejected=%d failed=%d "
            "delivered=%d duplicates=%d undelivered=%d cancelled=%s",
            report.discovered,
            len(report.accepted),
            report.rejected,
            len(report.failed),
            report.delivered,
            report.duplicates,
            len(report.undelivered),
            report.cancelled,
        )
        return report

    async def _process(
        self,
        url: str,
        config: SelectorConfig,
        window: AcceptanceWindow,
        semaphore: asyncio.Semaphore,
        cancel: asyncio.Event | None,
    ) -> ExtractionOutcome | None:
        async with semaphore:
            if cancel is not None and cancel.is_set():
                return None
            timeout = self.settings.item_timeout
            try:
                outcome = await asyncio.wait_for(
                    self.extractor.extract(url, config), timeout=timeout
                )
            except TimeoutError:
                logger.warning("Detail page %s timed out after %.1fs", url, timeout)
                return Failed(url, FetchError(url, f"timed out after {timeout:.1f}s"))

        if isinstance(outcome, Accepted) and not accept(outcome.record, window):
            logger.debug("Outside window: %s at %s", url, outcome.record.publication_time)
            return Rejected(url, OUTSIDE_WINDOW)
        return outcome

    async def _deliver(
        self, report: IngestionReport, cancel: asyncio.Event | None
    ) -> None:
        pending = report.accepted
        if pending and self.settings.ingest_dedupe:
            pending = await self._drop_known(pending)
            report.duplicates = len(report.accepted) - len(pending)

        for record in pending:
            if cancel is not None and cancel.is_set():
                break
            try:
                await self.sink.create(record)
            except DeliveryError as exc:
                logger.warning("Could not deliver %r: %s", record.headline, exc.cause)
                report.undelivered.append(ItemFailure.from_exception(exc))
            else:
                report.delivered += 1

    async def _drop_known(self, records: list[NewsRecord]) -> list[NewsRecord]:
        start = min(r.publication_time for r in records)
        end = max(r.publication_time for r in records)
        try:
            existing = await self.sink.query(start, end)
        except SinkError as exc:
            logger.warning("Duplicate check unavailable, delivering all: %s", exc)
            return records
        known = {_key(r) for r in existing}
        return [r for r in records if _key(r) not in known]


def _key(record: NewsRecord) -> tuple[str, float]:
    return record.headline, record.publication_time.timestamp()


def _unique(records: list[NewsRecord]) -> list[NewsRecord]:
    seen: set[tuple[str, float]] = set()
    unique: list[NewsRecord] = []
    for record in records:
        key = _key(record)
        if key in seen:
            continue
        seen.add(key)
        unique.append(record)
    return unique
