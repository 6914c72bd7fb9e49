"""Statistics package: counters, listeners and the periodic publisher."""

from igmpstats.stats.counters import CounterName, CounterStore
from igmpstats.stats.listeners import ListenerRegistry, StatsListener
from igmpstats.stats.routes import router
from igmpstats.stats.schemas import StatsEvent, StatsEventType, StatsSnapshot
from igmpstats.stats.service import StatisticsManager

__all__ = [
    "CounterName",
    "CounterStore",
    "ListenerRegistry",
    "StatisticsManager",
    "StatsEvent",
    "StatsEventType",
    "StatsListener",
    "StatsSnapshot",
    "router",
]
