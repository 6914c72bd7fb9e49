"""Publish-interval reconfiguration."""

from __future__ import annotations

import re
import threading
from typing import Any

from igmpstats.lib.logger import get_logger
from igmpstats.stats.constants import (
    STATISTICS_GENERATION_PERIOD,
    STATISTICS_GENERATION_PERIOD_DEFAULT,
)
from igmpstats.stats.scheduler import StatsScheduler

logger = get_logger(__name__)

# Signed decimal digits only, bounded like a 32-bit signed int.
_PERIOD_PATTERN = re.compile(r"[+-]?[0-9]+")
MAX_PERIOD_SECONDS = 2**31 - 1


def resolve_period(raw: Any, default: int = STATISTICS_GENERATION_PERIOD_DEFAULT) -> int:
    """Turn a raw configuration value into a positive number of seconds.

    Missing or blank values yield ``default``; so does anything that is not a
    positive 32-bit integer, after logging the rejected value.
    """

    if raw is None:
        return default
    text = str(raw).strip()
    if not text:
        return default
    period = int(text) if _PERIOD_PATTERN.fullmatch(text) else None
    if period is None or not 0 < period <= MAX_PERIOD_SECONDS:
        logger.error(
            "stats_period_invalid",
            extra={"option": STATISTICS_GENERATION_PERIOD, "raw_value": text, "fallback": default},
        )
        return default
    return period


class ReconfigurationController:
    """Own the publish interval and apply changes to the scheduler."""

    def __init__(
        self,
        scheduler: StatsScheduler,
        default_period: int = STATISTICS_GENERATION_PERIOD_DEFAULT,
    ) -> None:
        if default_period <= 0:
            raise ValueError("Default publish period must be positive")
        self._scheduler = scheduler
        self._default_period = default_period
        self._period = default_period
        self._lock = threading.Lock()

    @property
    def period(self) -> int:
        return self._period

    @property
    def default_period(self) -> int:
        return self._default_period

    def apply_config(self, raw: Any) -> int:
        """Resolve ``raw`` and restart the schedule at the resulting period.

        The timer restarts even when the period is unchanged, which also
        produces an immediate tick.
        """

        period = resolve_period(raw, self._default_period)
        with self._lock:
            previous = self._period
            self._scheduler.reschedule(period)
            self._period = period
        logger.info(
            "stats_rescheduled",
            extra={"period_seconds": period, "previous_period_seconds": previous},
        )
        return period

    def stop(self) -> None:
        with self._lock:
            self._scheduler.stop()
