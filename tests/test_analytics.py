from datetime import datetime, timedelta, timezone

import pytest

from concord.db.models import CommandUsage, MetricType, PerformanceMetric
from concord.monitoring import AnalyticsAggregator
from tests.fakes import FailingStore

pytestmark = pytest.mark.anyio

NOW = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


def usage(command, *, guild_id=1, success=True, duration=None, days_ago=0):
    return CommandUsage(
        guild_id=guild_id,
        user_id=10,
        command=command,
        type="prefix",
        success=success,
        duration=duration,
        created_at=NOW - timedelta(days=days_ago),
    )


def metric(name, duration, *, success=True, metric_type=MetricType.COMMAND_EXECUTION):
    return PerformanceMetric(
        metric_type=metric_type,
        name=name,
        duration=duration,
        success=success,
        created_at=NOW,
    )


@pytest.fixture
def analytics(store) -> AnalyticsAggregator:
    return AnalyticsAggregator(store, clock=lambda: NOW)


async def test_empty_store(analytics) -> None:
    assert await analytics.command_stats() == []
    assert await analytics.total_command_count() == 0
    assert await analytics.most_used_commands() == []
    assert await analytics.slowest_metrics() == []
    assert (
        await analytics.average_performance(MetricType.COMMAND_EXECUTION, "ping")
        is None
    )


async def test_command_stats(store, analytics) -> None:
    store.usages.extend(
        [
            usage("ping", duration=10.0),
            usage("ping", success=False, duration=30.0),
            usage("ping"),
            usage("help"),
            usage("ping", days_ago=30),
            usage("ping", guild_id=2),
        ]
    )

    stats = {s.command: s for s in await analytics.command_stats(guild_id=1)}

    assert set(stats) == {"ping", "help"}
    assert stats["ping"].count == 3
    assert stats["ping"].success_rate == pytest.approx(2 / 3)
    # Usages without a duration do not count towards the average
    assert stats["ping"].avg_duration == 20.0
    assert stats["help"].avg_duration is None


async def test_total_command_count(store, analytics) -> None:
    store.usages.extend(
        [usage("ping"), usage("ping", days_ago=3), usage("help", guild_id=2)]
    )

    assert await analytics.total_command_count() == 3
    assert await analytics.total_command_count(guild_id=1) == 2
    assert await analytics.total_command_count(days=1) == 2
    assert await analytics.total_command_count(guild_id=1, days=1) == 1


async def test_most_used_commands_breaks_ties_by_name(store, analytics) -> None:
    store.usages.extend(
        [usage("b"), usage("a"), usage("c"), usage("c"), usage("b"), usage("a")]
    )
    store.usages.extend([usage("c"), usage("d")])

    counts = await analytics.most_used_commands(limit=3)

    assert [(c.command, c.count) for c in counts] == [("c", 3), ("a", 2), ("b", 2)]


async def test_average_performance_uses_successful_runs(store, analytics) -> None:
    store.metrics.extend(
        [
            metric("ping", 10.0),
            metric("ping", 30.0),
            metric("ping", 500.0, success=False),
            metric("help", 1.0),
            metric("ping", 7.0, metric_type=MetricType.API_CALL),
        ]
    )

    summary = await analytics.average_performance(
        MetricType.COMMAND_EXECUTION, "ping"
    )

    assert summary.avg_duration == 20.0
    assert summary.count == 2
    assert await analytics.average_performance(MetricType.OTHER, "ping") is None


async def test_slowest_metrics(store, analytics) -> None:
    store.metrics.extend(
        [
            metric("a", 5.0),
            metric("b", 50.0, metric_type=MetricType.API_CALL),
            metric("c", 20.0),
        ]
    )

    slowest = await analytics.slowest_metrics(limit=2)
    commands = await analytics.slowest_metrics(MetricType.COMMAND_EXECUTION)

    assert [m.name for m in slowest] == ["b", "c"]
    assert [m.name for m in commands] == ["c", "a"]


async def test_record_guild_event(store, analytics) -> None:
    await analytics.record_guild_event(1, "member_join", user_id=10)

    [event] = store.events
    assert event.event_type == "member_join"
    assert event.user_id == 10


async def test_store_failures_degrade_to_empty_results() -> None:
    analytics = AnalyticsAggregator(FailingStore())

    await analytics.record_usage(usage("ping"))
    await analytics.record_guild_event(1, "guild_join")

    assert await analytics.command_stats() == []
    assert await analytics.total_command_count() == 0
    assert await analytics.most_used_commands() == []
    assert await analytics.slowest_metrics() == []
    assert (
        await analytics.average_performance(MetricType.API_CALL, "sync") is None
    )
