from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from .news import NewsRecord


class ItemFailure(BaseModel):
    url: str | None = Field(default=None, description="Detail page the failure belongs to")
    error_type: str
    message: str

    @classmethod
    def from_exception(cls, exc: BaseException, url: str | None = None) -> "ItemFailure":
        return cls(url=url, error_type=type(exc).__name__, message=str(exc))


class IngestionReport(BaseModel):
    started_at: datetime
    finished_at: datetime | None = None
    window_start: datetime
    window_end: datetime | None = None
    discovered: int = 0
    accepted: list[NewsRecord] = Field(default_factory=list)
    rejected: int = 0
    failed: list[ItemFailure] = Field(default_factory=list)
    delivered: int = 0
    duplicates: int = 0
    undelivered: list[ItemFailure] = Field(default_factory=list)
    cancelled: bool = False


class SweepReport(BaseModel):
    cutoff: datetime
    finished_at: datetime
