"""Pytest fixtures for statistics publisher tests."""

from collections.abc import AsyncIterator, Iterator
import os
import threading
import time
from typing import Callable

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("STATS_CANCEL_TIMEOUT_SECONDS", "2")
os.environ.setdefault("LOG_LEVEL", "INFO")

from igmpstats.main import app as fastapi_app
from igmpstats.stats import StatisticsManager, StatsEvent
from igmpstats.stats.constants import PUBLISHER_THREAD_NAME


class EventRecorder:
    """Listener collecting events with their monotonic arrival times."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._condition = threading.Condition(self._lock)
        self.events: list[StatsEvent] = []
        self.arrivals: list[float] = []

    def __call__(self, event: StatsEvent) -> None:
        with self._condition:
            self.events.append(event)
            self.arrivals.append(time.monotonic())
            self._condition.notify_all()

    def wait_for(self, count: int, timeout: float = 5.0) -> bool:
        with self._condition:
            return self._condition.wait_for(lambda: len(self.events) >= count, timeout)


def publisher_threads() -> list[threading.Thread]:
    return [t for t in threading.enumerate() if t.name == PUBLISHER_THREAD_NAME and t.is_alive()]


@pytest.fixture()
def recorder_factory() -> Callable[[], EventRecorder]:
    return EventRecorder


@pytest.fixture()
def manager() -> Iterator[StatisticsManager]:
    """Standalone manager, deactivated after the test."""

    instance = StatisticsManager(cancel_timeout=2.0)
    yield instance
    instance.deactivate()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    """Return the FastAPI application instance."""
    return fastapi_app


@pytest.fixture()
def app_manager(app: FastAPI) -> Iterator[StatisticsManager]:
    """Activate the application's manager (lifespan does not run under ASGITransport)."""

    instance: StatisticsManager = app.state.statistics_manager
    instance.activate()
    yield instance
    instance.deactivate()


@pytest_asyncio.fixture()
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Provide an `httpx.AsyncClient` configured for the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client


@pytest.fixture()
def live_publisher_threads() -> Callable[[], list[threading.Thread]]:
    return publisher_threads
