"""Statistics routes for polling snapshots and updating the publish period."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from igmpstats.stats.constants import STATISTICS_GENERATION_PERIOD
from igmpstats.stats.schemas import PublisherConfigRequest
from igmpstats.stats.service import StatisticsManager

router = APIRouter()


async def get_statistics_manager(request: Request) -> StatisticsManager:
    manager: StatisticsManager | None = getattr(request.app.state, "statistics_manager", None)
    if manager is None:
        raise RuntimeError("Statistics manager not configured on application state")
    return manager


def _period_payload(period: int) -> dict[str, object]:
    return {"ok": True, "data": {STATISTICS_GENERATION_PERIOD: period}}


@router.get("/snapshot")
async def get_stats_snapshot(manager: StatisticsManager = Depends(get_statistics_manager)) -> JSONResponse:
    snapshot = manager.get_snapshot()
    if snapshot is None:
        raise HTTPException(status_code=503, detail="Statistics publisher inactive")
    return JSONResponse({"ok": True, "data": snapshot.json_payload()})


@router.get("/config")
async def get_stats_config(manager: StatisticsManager = Depends(get_statistics_manager)) -> JSONResponse:
    return JSONResponse(_period_payload(manager.period))


@router.put("/config")
async def update_stats_config(
    payload: PublisherConfigRequest,
    manager: StatisticsManager = Depends(get_statistics_manager),
) -> JSONResponse:
    # Rescheduling joins the previous timer thread; keep it off the event loop.
    period = await run_in_threadpool(manager.apply_config, payload.raw_period())
    if period is None:
        raise HTTPException(status_code=503, detail="Statistics publisher inactive")
    return JSONResponse(_period_payload(period))
