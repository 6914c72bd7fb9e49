"""Thread-safe IGMP counter aggregate."""

from __future__ import annotations

import threading
from enum import Enum

from igmpstats.lib.logger import get_logger
from igmpstats.stats.schemas import StatsSnapshot

logger = get_logger(__name__)


class CounterName(str, Enum):
    """Fixed set of IGMP protocol counters."""

    IGMP_JOIN_REQ = "igmp_join_req"
    IGMP_SUCCESS_JOIN_REJOIN_REQ = "igmp_success_join_rejoin_req"
    IGMP_FAIL_JOIN_REQ = "igmp_fail_join_req"
    IGMP_LEAVE_REQ = "igmp_leave_req"
    IGMP_DISCONNECT = "igmp_disconnect"
    IGMPV1_MEMBERSHIP_REPORT = "igmpv1_membership_report"
    IGMPV2_MEMBERSHIP_REPORT = "igmpv2_membership_report"
    IGMPV3_MEMBERSHIP_REPORT = "igmpv3_membership_report"
    IGMPV2_LEAVE_GROUP = "igmpv2_leave_group"
    IGMPV3_MEMBERSHIP_QUERY = "igmpv3_membership_query"
    IGMP_MSG_RECEIVED = "igmp_msg_received"
    TOTAL_MSG_RECEIVED = "total_msg_received"
    INVALID_IGMP_MSG_RECEIVED = "invalid_igmp_msg_received"

    @classmethod
    def lookup(cls, name: "CounterName | str") -> "CounterName | None":
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            return None


class _Counter:
    __slots__ = ("_lock", "_value")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0

    def add(self, value: int) -> None:
        with self._lock:
            self._value += value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


class CounterStore:
    """Monotonic counters keyed by :class:`CounterName`.

    Every counter has its own lock so concurrent protocol handlers only
    contend when they hit the same counter. Snapshots are consistent per
    counter, not across counters.
    """

    def __init__(self) -> None:
        self._counters: dict[CounterName, _Counter] = {name: _Counter() for name in CounterName}
        self._released = False

    def increment(self, name: CounterName | str, value: int = 1) -> None:
        """Add ``value`` to a counter; anything unusable is silently dropped."""

        if self._released:
            logger.debug("stats_increment_after_release", extra={"counter": getattr(name, "value", name)})
            return
        counter_name = CounterName.lookup(name)
        if counter_name is None:
            logger.debug("stats_unknown_counter", extra={"counter": getattr(name, "value", name)})
            return
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            logger.debug(
                "stats_invalid_increment",
                extra={"counter": counter_name.value, "value": repr(value)},
            )
            return
        self._counters[counter_name].add(value)

    def get(self, name: CounterName | str) -> int:
        counter_name = CounterName.lookup(name)
        if counter_name is None:
            raise KeyError(f"Unknown counter '{name}'")
        return self._counters[counter_name].value

    def snapshot(self) -> StatsSnapshot:
        """Return an immutable copy of every counter."""

        values = {name.value: counter.value for name, counter in self._counters.items()}
        return StatsSnapshot(**values)

    def release(self) -> None:
        """Mark the store as torn down; later increments become no-ops."""

        self._released = True

    @property
    def released(self) -> bool:
        return self._released
