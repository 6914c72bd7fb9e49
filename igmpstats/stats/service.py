"""Statistics manager wiring counters, listeners and the publish schedule."""

from __future__ import annotations

import itertools
import logging
import threading
from datetime import UTC, datetime
from typing import Any

from igmpstats.lib.logger import get_logger
from igmpstats.stats.constants import (
    DEFAULT_CANCEL_TIMEOUT_SECONDS,
    STATISTICS_GENERATION_PERIOD_DEFAULT,
)
from igmpstats.stats.controller import ReconfigurationController
from igmpstats.stats.counters import CounterName, CounterStore
from igmpstats.stats.listeners import ListenerRegistry, StatsListener
from igmpstats.stats.scheduler import StatsScheduler
from igmpstats.stats.schemas import PublisherStatus, StatsEvent, StatsEventType, StatsSnapshot

logger = get_logger(__name__)


class StatisticsManager:
    """Collect IGMP counters and publish periodic snapshots to listeners."""

    def __init__(
        self,
        *,
        default_period: int = STATISTICS_GENERATION_PERIOD_DEFAULT,
        cancel_timeout: float = DEFAULT_CANCEL_TIMEOUT_SECONDS,
    ) -> None:
        self._listeners = ListenerRegistry()
        self._scheduler = StatsScheduler(self._publish_stats, cancel_timeout=cancel_timeout)
        self._controller = ReconfigurationController(self._scheduler, default_period)
        self._lifecycle_lock = threading.Lock()
        self._store: CounterStore | None = None
        self._sequence = itertools.count(1)
        self._ticks_published = 0
        self._last_published_at: datetime | None = None

    # ---- Lifecycle ----

    @property
    def active(self) -> bool:
        return self._store is not None

    def activate(self, raw_period: Any = None) -> None:
        """Create fresh counters and arm the publisher (first tick is immediate)."""

        with self._lifecycle_lock:
            if self._store is not None:
                logger.warning("stats_publisher_already_active")
                return
            self._store = CounterStore()
            self._sequence = itertools.count(1)
            self._ticks_published = 0
            self._last_published_at = None
            period = self._controller.apply_config(raw_period)
        logger.info("stats_publisher_activated", extra={"period_seconds": period})

    def deactivate(self) -> None:
        """Stop publishing, drop listeners and release the counters."""

        with self._lifecycle_lock:
            store = self._store
            if store is None:
                return
            self._controller.stop()
            self._listeners.clear()
            store.release()
            self._store = None
        logger.info("stats_publisher_deactivated")

    # ---- Inbound ----

    def increment(self, name: CounterName | str, value: int = 1) -> None:
        store = self._store
        if store is None:
            return
        store.increment(name, value)

    def apply_config(self, raw_period: Any) -> int | None:
        """Apply a new publish period; ignored while the publisher is inactive."""

        with self._lifecycle_lock:
            if self._store is None:
                logger.warning("stats_config_ignored", extra={"raw_value": repr(raw_period)})
                return None
            return self._controller.apply_config(raw_period)

    # ---- Outbound ----

    def get_snapshot(self) -> StatsSnapshot | None:
        store = self._store
        if store is None:
            return None
        return store.snapshot()

    def register(self, listener: StatsListener) -> None:
        self._listeners.register(listener)

    def unregister(self, listener: StatsListener) -> None:
        self._listeners.unregister(listener)

    @property
    def period(self) -> int:
        return self._controller.period

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    @property
    def ticks_published(self) -> int:
        return self._ticks_published

    @property
    def last_published_at(self) -> datetime | None:
        return self._last_published_at

    def status(self) -> PublisherStatus:
        return PublisherStatus(
            active=self.active,
            period_seconds=self.period,
            listeners=self.listener_count,
            ticks_published=self._ticks_published,
            last_published_at=self._last_published_at,
        )

    # ---- Publish tick ----

    def _publish_stats(self) -> None:
        store = self._store
        if store is None:
            return
        snapshot = store.snapshot()

        if logger.isEnabledFor(logging.DEBUG):
            for name, value in snapshot.counters().items():
                logger.debug("stats_counter", extra={"counter": name, "value": value})

        event = StatsEvent(
            type=StatsEventType.STATS_UPDATE,
            sequence=next(self._sequence),
            subject=snapshot,
        )
        self._listeners.dispatch(event)
        self._ticks_published += 1
        self._last_published_at = datetime.now(tz=UTC)
