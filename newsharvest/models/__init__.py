from .news import (
    BAD_TIMESTAMP,
    MISSING_FIELD,
    OUTSIDE_WINDOW,
    Accepted,
    ExtractionOutcome,
    Failed,
    NewsRecord,
    Rejected,
    SelectorConfig,
)
from .reports import IngestionReport, ItemFailure, SweepReport

__all__ = [
    "Accepted",
    "BAD_TIMESTAMP",
    "ExtractionOutcome",
    "Failed",
    "IngestionReport",
    "ItemFailure",
    "MISSING_FIELD",
    "NewsRecord",
    "OUTSIDE_WINDOW",
    "Rejected",
    "SelectorConfig",
    "SweepReport",
]
