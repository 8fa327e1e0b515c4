from __future__ import annotations

from typing import Any


class NewsHarvestError(Exception):
    """Base class for pipeline errors."""


class FetchError(NewsHarvestError):
    """A page could not be retrieved or turned into a document."""

    def __init__(self, url: str, cause: BaseException | str) -> None:
        self.url = url
        self.cause = cause
        super().__init__(f"{url}: {cause}")


class ParseError(FetchError):
    """The page body could not be parsed into a document."""


class DeliveryError(NewsHarvestError):
    """The sink rejected or could not be reached for a single record."""

    def __init__(self, record: Any, cause: BaseException | str) -> None:
        self.record = record
        self.cause = cause
        super().__init__(f"delivery failed for {getattr(record, 'headline', record)!r}: {cause}")


class SinkError(NewsHarvestError):
    """A sink call other than create failed."""


class SweepError(NewsHarvestError):
    """The retention delete instruction failed."""
