from datetime import datetime

import httpx
import pytest
import respx

from conftest import API_URL, BERLIN
from newsharvest.exceptions import SweepError
from newsharvest.models import NewsRecord
from newsharvest.services.retention import RetentionSweeper
from newsharvest.services.sink import HttpNewsSink, InMemoryNewsSink


@pytest.mark.asyncio
async def test_sweep_issues_single_delete_before_now(settings, noon) -> None:
    sink = InMemoryNewsSink()
    for hour in (6, 9, 12, 15):
        await sink.create(
            NewsRecord(
                headline=f"h{hour}",
                description="d",
                publication_time=datetime(2026, 10, 19, hour, tzinfo=BERLIN),
            )
        )
    sweeper = RetentionSweeper(sink=sink, settings=settings)

    report = await sweeper.sweep(noon)

    assert sink.deletions == [noon]
    assert report.cutoff == noon
    assert [r.headline for r in sink.records] == ["h15"]


@pytest.mark.asyncio
async def test_sweep_defaults_to_current_instant(settings) -> None:
    sink = InMemoryNewsSink()
    sweeper = RetentionSweeper(sink=sink, settings=settings)

    before = datetime.now(BERLIN)
    report = await sweeper.sweep()

    assert len(sink.deletions) == 1
    assert before <= sink.deletions[0] <= report.finished_at


@pytest.mark.asyncio
async def test_sweep_failure_raises_sweep_error(settings, noon) -> None:
    async with httpx.AsyncClient() as client:
        sweeper = RetentionSweeper(
            sink=HttpNewsSink(settings=settings, client=client), settings=settings
        )
        with respx.mock(assert_all_called=True) as mock:
            route = mock.delete(API_URL).respond(500)
            with pytest.raises(SweepError):
                await sweeper.sweep(noon)

    assert route.call_count == 1
