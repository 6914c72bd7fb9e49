"""Shared constants for the statistics publisher."""

from __future__ import annotations

STATISTICS_GENERATION_PERIOD: str = "statisticsGenerationPeriod"
STATISTICS_GENERATION_PERIOD_DEFAULT: int = 10

PUBLISHER_THREAD_NAME: str = "igmp-stats-publisher"
DEFAULT_CANCEL_TIMEOUT_SECONDS: float = 5.0
