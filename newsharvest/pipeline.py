from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime

import httpx

from .config import Settings, get_settings
from .models.reports import IngestionReport, SweepReport
from .scheduler import CronJob, Scheduler
from .services.ingestion import IngestionService
from .services.retention import RetentionSweeper
from .services.sink import NewsSink, build_sink
from .services.window import AcceptanceWindow

INGEST_JOB = "ingest"
RETENTION_JOB = "retention"


@dataclass(slots=True)
class Pipeline:
    """Wires settings, sink and services into the two scheduled jobs."""

    settings: Settings | None = None
    client: httpx.AsyncClient | None = None
    sink: NewsSink | None = None
    ingestion: IngestionService | None = None
    sweeper: RetentionSweeper | None = None
    stopping: bool = field(default=False, init=False)
    _active_runs: set[asyncio.Event] = field(default_factory=set, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.settings is None:
            self.settings = get_settings()
        if self.sink is None:
            self.sink = build_sink(self.settings, self.client)
        if self.ingestion is None:
            self.ingestion = IngestionService(
                sink=self.sink, settings=self.settings, client=self.client
            )
        if self.sweeper is None:
            self.sweeper = RetentionSweeper(sink=self.sink, settings=self.settings)

    async def ingest(self, window: AcceptanceWindow | None = None) -> IngestionReport:
        if window is None:
            window = AcceptanceWindow.since_midnight(
                datetime.now(self.settings.local_tz())
            )
        cancel = asyncio.Event()
        if self.stopping:
            cancel.set()
        self._active_runs.add(cancel)
        try:
            return await self.ingestion.run(
                self.settings.selector_config(), window, cancel=cancel
            )
        finally:
            self._active_runs.discard(cancel)

    def cancel_runs(self) -> None:
        """Cancel in-flight ingestion runs and any started afterwards."""
        self.stopping = True
        for cancel in self._active_runs:
            cancel.set()

    async def sweep(self, now: datetime | None = None) -> SweepReport:
        return await self.sweeper.sweep(now)

    def scheduler(self) -> Scheduler:
        local_tz = self.settings.local_tz()
        return Scheduler(
            [
                CronJob(INGEST_JOB, self.settings.ingest_cron, self.ingest, local_tz),
                CronJob(RETENTION_JOB, self.settings.retention_cron, self.sweep, local_tz),
            ]
        )
