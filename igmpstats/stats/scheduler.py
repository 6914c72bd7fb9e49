"""Cancelable fixed-rate scheduler driving the statistics publish tick."""

from __future__ import annotations

import functools
import threading
import time
from typing import Callable

from igmpstats.lib.logger import get_logger
from igmpstats.stats.constants import DEFAULT_CANCEL_TIMEOUT_SECONDS, PUBLISHER_THREAD_NAME

logger = get_logger(__name__)


def safe_recurring(task: Callable[[], None], name: str | None = None) -> Callable[[], None]:
    """Wrap ``task`` so an exception in one run is logged instead of raised.

    A recurring schedule built on the wrapped callable survives a failing
    execution and keeps firing.
    """

    task_name = name or getattr(task, "__qualname__", repr(task))

    @functools.wraps(task)
    def runner() -> None:
        try:
            task()
        except Exception:
            logger.exception("recurring_task_failed", extra={"task": task_name})

    return runner


class _PeriodicTimer(threading.Thread):
    """Daemon thread running ``task`` now and then every ``interval`` seconds."""

    def __init__(self, task: Callable[[], None], interval: float) -> None:
        super().__init__(name=PUBLISHER_THREAD_NAME, daemon=True)
        self._task = task
        self.interval = interval
        self._cancelled = threading.Event()

    def run(self) -> None:
        next_run = time.monotonic()
        while not self._cancelled.is_set():
            self._task()
            next_run += self.interval
            delay = next_run - time.monotonic()
            if delay < 0:
                # Tick overran its slot: restart the cadence instead of bursting.
                next_run = time.monotonic()
                delay = 0.0
            if self._cancelled.wait(min(delay, threading.TIMEOUT_MAX)):
                break

    def cancel(self, timeout: float) -> bool:
        """Request cancellation and wait for the thread to exit.

        Returns ``True`` once the thread is gone (or is the caller itself and
        will exit after its current tick).
        """

        self._cancelled.set()
        if threading.current_thread() is self or not self.is_alive():
            return True
        self.join(timeout)
        return not self.is_alive()


class StatsScheduler:
    """Stopped/Running state machine around a single periodic timer."""

    def __init__(
        self,
        task: Callable[[], None],
        *,
        cancel_timeout: float = DEFAULT_CANCEL_TIMEOUT_SECONDS,
    ) -> None:
        self._task = safe_recurring(task)
        self._cancel_timeout = cancel_timeout
        self._lock = threading.Lock()
        self._timer: _PeriodicTimer | None = None

    @property
    def running(self) -> bool:
        return self._timer is not None

    @property
    def interval(self) -> float | None:
        timer = self._timer
        return None if timer is None else timer.interval

    def start(self, interval: float) -> None:
        with self._lock:
            self._start_locked(interval)

    def stop(self) -> None:
        with self._lock:
            self._stop_locked()

    def reschedule(self, interval: float) -> None:
        """Swap the running timer for one at ``interval``.

        The previous timer thread is released before the new one starts, so
        two timers never fire concurrently.
        """

        with self._lock:
            self._stop_locked()
            self._start_locked(interval)

    def _start_locked(self, interval: float) -> None:
        if interval <= 0:
            raise ValueError(f"Scheduler interval must be positive, got {interval!r}")
        if self._timer is not None:
            raise RuntimeError("Scheduler already running; use reschedule()")
        timer = _PeriodicTimer(self._task, interval)
        self._timer = timer
        timer.start()
        logger.debug("stats_timer_started", extra={"interval_seconds": interval})

    def _stop_locked(self) -> None:
        timer = self._timer
        if timer is None:
            return
        self._timer = None
        if not timer.cancel(self._cancel_timeout):
            logger.warning(
                "stats_timer_cancel_timeout",
                extra={"timeout_seconds": self._cancel_timeout},
            )
            return
        logger.debug("stats_timer_stopped", extra={"interval_seconds": timer.interval})
