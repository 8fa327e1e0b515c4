from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Any, Literal

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import ORJSONResponse

from newsharvest.config import get_settings
from newsharvest.exceptions import FetchError, SweepError
from newsharvest.http_client import get_http_client, shutdown_http_client
from newsharvest.log_config import setup_logging
from newsharvest.models import IngestionReport, SweepReport
from newsharvest.pipeline import Pipeline
from newsharvest.scheduler import Scheduler
from newsharvest.services import AcceptanceWindow

app = FastAPI(
    title="newsharvest",
    version="0.1.0",
    description="Scheduled news ingestion and retention with on-demand runs.",
    default_response_class=ORJSONResponse,
)

_pipeline: Pipeline | None = None
_scheduler: Scheduler | None = None


async def get_pipeline() -> Pipeline:
    global _pipeline
    if _pipeline is None:
        _pipeline = Pipeline(settings=get_settings(), client=await get_http_client())
    return _pipeline


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/runs/ingest", tags=["runs"], response_model=IngestionReport)
async def run_ingest(
    window: Literal["today", "morning", "afternoon", "evening"] = Query(
        "today", description="Named acceptance window for the current day"
    ),
    start: datetime | None = Query(None, description="Explicit window start"),
    end: datetime | None = Query(None, description="Explicit window end"),
    pipeline: Pipeline = Depends(get_pipeline),
):
    local_tz = pipeline.settings.local_tz()
    try:
        if start is not None or end is not None:
            if start is None or end is None:
                raise ValueError("start and end must be given together")
            acceptance = AcceptanceWindow.between(
                _localize(start, local_tz), _localize(end, local_tz)
            )
        elif window == "today":
            acceptance = AcceptanceWindow.since_midnight(datetime.now(local_tz))
        else:
            today = datetime.now(local_tz).date()
            acceptance = AcceptanceWindow.day_part(window, today, local_tz)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    try:
        return await pipeline.ingest(acceptance)
    except FetchError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@app.post("/runs/sweep", tags=["runs"], response_model=SweepReport)
async def run_sweep(pipeline: Pipeline = Depends(get_pipeline)):
    try:
        return await pipeline.sweep()
    except SweepError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@app.get("/runs/last", tags=["runs"])
async def last_runs() -> dict[str, Any]:
    if _scheduler is None:
        return {}
    return {
        name: {
            "expression": job.expression,
            "last_run_at": job.last_run_at,
            "last_error": job.last_error,
            "last_result": job.last_result.model_dump(mode="json")
            if job.last_result is not None
            else None,
        }
        for name, job in _scheduler.jobs.items()
    }


@app.on_event("startup")
async def on_startup() -> None:
    global _scheduler
    setup_logging()
    if get_settings().scheduler_enabled:
        _scheduler = (await get_pipeline()).scheduler()
        _scheduler.start()


@app.on_event("shutdown")
async def on_shutdown() -> None:
    global _pipeline, _scheduler
    if _pipeline is not None:
        _pipeline.cancel_runs()
    if _scheduler is not None:
        await _scheduler.stop()
        _scheduler = None
    _pipeline = None
    await shutdown_http_client()


def _localize(moment: datetime, local_tz: tzinfo) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=local_tz)
    return moment.astimezone(local_tz)
