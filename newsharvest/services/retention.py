from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from ..config import Settings, get_settings
from ..exceptions import SinkError, SweepError
from ..models.reports import SweepReport
from .sink import NewsSink

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RetentionSweeper:
    sink: NewsSink
    settings: Settings | None = None

    def __post_init__(self) -> None:
        if self.settings is None:
            self.settings = get_settings()

    async def sweep(self, now: datetime | None = None) -> SweepReport:
        """Ask the sink to drop every record published at or before ``now``."""
        local_tz = self.settings.local_tz()
        cutoff = now or datetime.now(local_tz)
        logger.info("Deleting news published at or before %s", cutoff.isoformat())
        try:
            await self.sink.delete_before(cutoff)
        except SinkError as exc:
            raise SweepError(str(exc)) from exc
        return SweepReport(cutoff=cutoff, finished_at=datetime.now(local_tz))
