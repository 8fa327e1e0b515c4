from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any

from croniter import croniter
from dateutil import tz

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[Any]]
Clock = Callable[[tzinfo], datetime]


@dataclass(slots=True)
class CronJob:
    """A named coroutine fired on a cron schedule, one invocation at a time."""

    name: str
    expression: str
    func: Callable[[], Awaitable[Any]]
    local_tz: tzinfo = field(default_factory=tz.tzlocal)
    last_run_at: datetime | None = None
    last_result: Any = None
    last_error: str | None = None

    def next_fire(self, after: datetime) -> datetime:
        return croniter(self.expression, after).get_next(datetime)

    async def run_once(self) -> Any:
        self.last_run_at = datetime.now(self.local_tz)
        try:
            result = await self.func()
        except Exception as exc:
            logger.exception("Scheduled job %s failed", self.name)
            self.last_error = f"{type(exc).__name__}: {exc}"
            return None
        self.last_result = result
        self.last_error = None
        return result


class Scheduler:
    """Drives each job on its own cron schedule in a single event loop.

    A job's next fire time is computed after its previous run completes, so a
    run that overshoots its slot skips the missed ticks instead of overlapping.
    """

    def __init__(
        self,
        jobs: list[CronJob],
        *,
        sleep: Sleeper = asyncio.sleep,
        clock: Clock = datetime.now,
    ) -> None:
        self.jobs = {job.name: job for job in jobs}
        self._sleep = sleep
        self._clock = clock
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def start(self) -> None:
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(self._loop(job), name=f"cron:{job.name}")
            for job in self.jobs.values()
        ]
        for job in self.jobs.values():
            logger.info("Scheduled %s with %r", job.name, job.expression)

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

    async def wait(self) -> None:
        await asyncio.gather(*self._tasks)

    async def _loop(self, job: CronJob) -> None:
        last_fire: datetime | None = None
        while True:
            now = self._clock(job.local_tz)
            # The wall clock may still read just before the slot that fired.
            after = now if last_fire is None else max(now, last_fire)
            fire_at = job.next_fire(after)
            await self._sleep(max((fire_at - now).total_seconds(), 0.0))
            last_fire = fire_at
            logger.info("Running scheduled job %s", job.name)
            await job.run_once()
