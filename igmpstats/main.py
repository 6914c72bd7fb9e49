"""FastAPI application entrypoint for the IGMP statistics publisher."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from igmpstats import __version__
from igmpstats.config import get_settings
from igmpstats.lib.logger import configure_logging
from igmpstats.stats import StatisticsManager, router as stats_router

settings = get_settings()

configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    manager: StatisticsManager = app.state.statistics_manager
    manager.activate(settings.statistics_generation_period)
    try:
        yield
    finally:
        manager.deactivate()


app = FastAPI(title="IGMP Statistics", version=__version__, lifespan=lifespan)

app.state.statistics_manager = StatisticsManager(
    cancel_timeout=settings.stats_cancel_timeout_seconds,
)

app.include_router(stats_router, prefix="/stats", tags=["stats"])


@app.get("/health", tags=["system"], summary="Health check")
async def health_check() -> JSONResponse:
    """Return liveness response including publisher state."""

    manager: StatisticsManager = app.state.statistics_manager
    payload = {
        "ok": True,
        "data": {
            "status": "healthy",
            "publisher": manager.status().model_dump(mode="json"),
        },
    }
    return JSONResponse(content=payload)
