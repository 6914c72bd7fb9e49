"""End-to-end tests for the statistics manager lifecycle and publishing."""

from __future__ import annotations

import threading
import time

from igmpstats.stats import CounterName, StatisticsManager, StatsEvent, StatsEventType


def test_activate_publishes_immediately(manager: StatisticsManager, recorder_factory) -> None:
    recorder = recorder_factory()
    manager.register(recorder)

    started = time.monotonic()
    manager.activate()

    assert recorder.wait_for(1, timeout=2.0)
    assert recorder.arrivals[0] - started < 1.0
    event = recorder.events[0]
    assert event.type is StatsEventType.STATS_UPDATE
    assert event.sequence == 1
    assert all(value == 0 for value in event.subject.counters().values())
    assert manager.active
    assert manager.period == 10
    assert manager.ticks_published == 1
    assert manager.last_published_at is not None


def test_activate_twice_is_ignored(manager: StatisticsManager, live_publisher_threads) -> None:
    manager.activate()
    manager.increment(CounterName.IGMP_JOIN_REQ)

    manager.activate()

    assert len(live_publisher_threads()) == 1
    assert manager.get_snapshot().igmp_join_req == 1


def test_activate_with_configured_period(manager: StatisticsManager) -> None:
    manager.activate("4")
    assert manager.period == 4

    manager.deactivate()
    manager.activate("garbage")
    assert manager.period == 10


def test_listener_added_later_sees_only_later_events(
    manager: StatisticsManager, recorder_factory
) -> None:
    first = recorder_factory()
    second = recorder_factory()
    manager.register(first)
    manager.activate()
    assert first.wait_for(1)

    manager.register(second)
    manager.apply_config(None)
    assert second.wait_for(1)
    assert first.wait_for(2)

    assert len(first.events) == 2
    assert len(second.events) == 1
    assert first.events[1] is second.events[0]
    assert first.events[0].subject.counters() == second.events[0].subject.counters()


def test_failing_listener_isolated(manager: StatisticsManager, recorder_factory) -> None:
    healthy = recorder_factory()

    def broken(event: StatsEvent) -> None:
        raise RuntimeError("cannot handle stats")

    manager.register(broken)
    manager.register(healthy)
    manager.activate()

    assert healthy.wait_for(1)
    manager.apply_config("10")
    assert healthy.wait_for(2)
    assert [event.sequence for event in healthy.events] == [1, 2]


def test_unregistered_listener_stops_receiving(manager: StatisticsManager, recorder_factory) -> None:
    recorder = recorder_factory()
    manager.register(recorder)
    manager.activate()
    assert recorder.wait_for(1)

    manager.unregister(recorder)
    manager.apply_config(None)
    time.sleep(0.2)

    assert len(recorder.events) == 1
    assert manager.listener_count == 0


def test_reconfiguration_scenario(manager: StatisticsManager, recorder_factory) -> None:
    """Default 10s period, counters bumped, then reconfigured to 1s."""

    recorder = recorder_factory()
    manager.register(recorder)
    manager.activate()
    assert recorder.wait_for(1)

    for _ in range(3):
        manager.increment(CounterName.IGMP_JOIN_REQ)
    manager.increment(CounterName.INVALID_IGMP_MSG_RECEIVED)

    reconfigured = time.monotonic()
    assert manager.apply_config("1") == 1
    assert recorder.wait_for(3, timeout=3.0)

    retick = recorder.events[1].subject
    assert recorder.arrivals[1] - reconfigured < 0.5
    assert retick.igmp_join_req == 3
    assert retick.invalid_igmp_msg_received == 1
    others = {
        name: value
        for name, value in retick.counters().items()
        if name not in {"igmp_join_req", "invalid_igmp_msg_received"}
    }
    assert all(value == 0 for value in others.values())
    assert recorder.arrivals[2] - recorder.arrivals[1] >= 0.99


def test_invalid_config_falls_back_with_single_timer(
    manager: StatisticsManager, recorder_factory, live_publisher_threads
) -> None:
    recorder = recorder_factory()
    manager.register(recorder)
    manager.activate()

    assert manager.apply_config("5") == 5
    assert manager.apply_config("abc") == 10
    assert manager.period == 10
    assert len(live_publisher_threads()) == 1

    # A timer replaced before its first tick may never fire; the last one always does.
    assert recorder.wait_for(1)
    time.sleep(0.3)
    seen = len(recorder.events)
    assert 1 <= seen <= 3
    time.sleep(0.3)
    assert len(recorder.events) == seen
    assert [event.sequence for event in recorder.events] == list(range(1, seen + 1))


def test_concurrent_increments_reach_snapshot(manager: StatisticsManager) -> None:
    manager.activate()
    workers = 6
    per_worker = 1_000

    def produce() -> None:
        for _ in range(per_worker):
            manager.increment(CounterName.IGMPV2_MEMBERSHIP_REPORT)
            manager.increment("not_a_counter")

    threads = [threading.Thread(target=produce) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    snapshot = manager.get_snapshot()
    assert snapshot is not None
    assert snapshot.igmpv2_membership_report == workers * per_worker


def test_deactivate_tears_everything_down(
    manager: StatisticsManager, recorder_factory, live_publisher_threads
) -> None:
    recorder = recorder_factory()
    manager.register(recorder)
    manager.activate("1")
    manager.increment(CounterName.IGMP_LEAVE_REQ)
    assert recorder.wait_for(1)

    manager.deactivate()
    delivered = len(recorder.events)

    assert not manager.active
    assert live_publisher_threads() == []
    assert manager.listener_count == 0
    assert manager.get_snapshot() is None
    assert manager.apply_config("2") is None
    manager.increment(CounterName.IGMP_LEAVE_REQ)
    manager.deactivate()

    time.sleep(1.2)
    assert len(recorder.events) == delivered
    assert live_publisher_threads() == []


def test_reactivation_starts_from_zero(manager: StatisticsManager) -> None:
    manager.activate()
    manager.increment(CounterName.IGMP_JOIN_REQ)
    manager.deactivate()

    manager.activate()

    snapshot = manager.get_snapshot()
    assert snapshot is not None
    assert snapshot.igmp_join_req == 0


def test_listener_can_reconfigure_from_tick(manager: StatisticsManager, recorder_factory) -> None:
    recorder = recorder_factory()
    reconfigured = threading.Event()

    def reconfigure_once(event: StatsEvent) -> None:
        if not reconfigured.is_set():
            reconfigured.set()
            manager.apply_config("1")

    manager.register(reconfigure_once)
    manager.register(recorder)
    manager.activate()

    assert recorder.wait_for(2, timeout=3.0)
    assert manager.period == 1


def test_oversized_period_falls_back_and_keeps_publishing(
    manager: StatisticsManager, recorder_factory, live_publisher_threads
) -> None:
    recorder = recorder_factory()
    manager.register(recorder)
    manager.activate()
    assert recorder.wait_for(1)

    assert manager.apply_config("99999999999") == 10
    assert recorder.wait_for(2)
    time.sleep(0.2)

    assert manager.period == 10
    assert len(live_publisher_threads()) == 1
