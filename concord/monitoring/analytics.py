import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from pydantic import BaseModel

from concord.db.models import (
    CommandUsage,
    GuildEvent,
    GuildEventType,
    MetricType,
    PerformanceMetric,
    utcnow,
)
from concord.db.store import (
    DESCENDING,
    CommandCount,
    PerformanceFilter,
    StoreError,
    UsageFilter,
)

if TYPE_CHECKING:
    from logging import Logger
    from concord.db.store import TelemetryStore


class CommandStats(BaseModel):
    command: str
    count: int
    success_rate: float
    avg_duration: Optional[float] = None


class PerformanceSummary(BaseModel):
    avg_duration: float
    count: int


class AnalyticsAggregator:
    """Writes usage facts and computes rollups over the telemetry store.

    Writes never raise and reads degrade to empty results when the store fails,
    so callers on the command path are unaffected by telemetry outages.
    """

    def __init__(
        self,
        store: "TelemetryStore",
        logger: "Logger" = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.logger = logger or logging.getLogger(__name__)
        self.clock = clock

    def since(self, days: Optional[int]) -> Optional[datetime]:
        if days is None:
            return None
        return self.clock() - timedelta(days=days)

    # Writes

    async def record_usage(self, usage: CommandUsage):
        try:
            await self.store.insert_usage(usage)
        except StoreError:
            self.logger.error(
                f"Failed to record command usage for {usage.command}", exc_info=True
            )

    async def record_guild_event(
        self,
        guild_id: int,
        event_type: GuildEventType,
        user_id: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        try:
            await self.store.insert_guild_event(
                GuildEvent(
                    guild_id=guild_id,
                    event_type=event_type,
                    user_id=user_id,
                    metadata=metadata,
                )
            )
        except StoreError:
            self.logger.error(
                f"Failed to record guild event {event_type} for {guild_id}",
                exc_info=True,
            )

    # Reads

    async def command_stats(
        self, guild_id: Optional[int] = None, days: int = 7
    ) -> List[CommandStats]:
        usage_filter = UsageFilter(guild_id=guild_id, since=self.since(days))
        try:
            groups = await self.store.group_usage_by_command(usage_filter)
        except StoreError:
            self.logger.error("Failed to get command stats", exc_info=True)
            return []

        return [
            CommandStats(
                command=group.command,
                count=group.count,
                success_rate=group.successes / group.count if group.count else 0.0,
                avg_duration=(
                    group.duration_total / group.duration_count
                    if group.duration_count
                    else None
                ),
            )
            for group in groups
        ]

    async def total_command_count(
        self, guild_id: Optional[int] = None, days: Optional[int] = None
    ) -> int:
        usage_filter = UsageFilter(guild_id=guild_id, since=self.since(days))
        try:
            return await self.store.count_usage(usage_filter)
        except StoreError:
            self.logger.error("Failed to get total command count", exc_info=True)
            return 0

    async def most_used_commands(
        self, limit: int = 10, guild_id: Optional[int] = None
    ) -> List[CommandCount]:
        try:
            counts = await self.store.group_by_command_ordered_by_count(
                UsageFilter(guild_id=guild_id), limit
            )
        except StoreError:
            self.logger.error("Failed to get most used commands", exc_info=True)
            return []
        return sorted(counts, key=lambda c: (-c.count, c.command))[:limit]

    async def average_performance(
        self, metric_type: MetricType, name: str, days: int = 7
    ) -> Optional[PerformanceSummary]:
        """Average duration of successful runs, or ``None`` when nothing matched."""
        performance_filter = PerformanceFilter(
            metric_type=metric_type, name=name, since=self.since(days), success=True
        )
        try:
            metrics = await self.store.find_performance(performance_filter)
        except StoreError:
            self.logger.error("Failed to get average performance", exc_info=True)
            return None

        if not metrics:
            return None
        return PerformanceSummary(
            avg_duration=sum(m.duration for m in metrics) / len(metrics),
            count=len(metrics),
        )

    async def slowest_metrics(
        self, metric_type: Optional[MetricType] = None, limit: int = 10
    ) -> List[PerformanceMetric]:
        try:
            return await self.store.find_performance(
                PerformanceFilter(metric_type=metric_type),
                sort=[("duration", DESCENDING)],
                limit=limit,
            )
        except StoreError:
            self.logger.error("Failed to get slowest metrics", exc_info=True)
            return []
