from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, tzinfo

from ..models.news import NewsRecord

_END_OF_MINUTE = {"second": 59, "microsecond": 999999}

DAY_PARTS: dict[str, tuple[time, time]] = {
    "morning": (time(0, 0), time(11, 59, **_END_OF_MINUTE)),
    "afternoon": (time(12, 0), time(17, 59, **_END_OF_MINUTE)),
    "evening": (time(18, 0), time(23, 59, **_END_OF_MINUTE)),
}


@dataclass(frozen=True, slots=True)
class AcceptanceWindow:
    """Inclusive ``[start, end]`` range; ``end=None`` leaves it open-ended."""

    start: datetime
    end: datetime | None = None

    def __post_init__(self) -> None:
        if self.start.tzinfo is None:
            raise ValueError("window start must be timezone-aware")
        if self.end is not None:
            if self.end.tzinfo is None:
                raise ValueError("window end must be timezone-aware")
            if self.end < self.start:
                raise ValueError("window end precedes start")

    def contains(self, moment: datetime) -> bool:
        if moment < self.start:
            return False
        return self.end is None or moment <= self.end

    @classmethod
    def since_midnight(cls, now: datetime) -> "AcceptanceWindow":
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        return cls(start=midnight)

    @classmethod
    def day_part(cls, name: str, day: date, local_tz: tzinfo) -> "AcceptanceWindow":
        try:
            start, end = DAY_PARTS[name]
        except KeyError:
            raise ValueError(f"unknown day part: {name!r}") from None
        return cls(
            start=datetime.combine(day, start, tzinfo=local_tz),
            end=datetime.combine(day, end, tzinfo=local_tz),
        )

    @classmethod
    def between(cls, start: datetime, end: datetime) -> "AcceptanceWindow":
        return cls(start=start, end=end)


def accept(record: NewsRecord, window: AcceptanceWindow) -> bool:
    return window.contains(record.publication_time)
