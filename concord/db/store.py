import abc
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel

from .models import CommandUsage, Guild, GuildEvent, MetricType, PerformanceMetric

ASCENDING = 1
DESCENDING = -1


class StoreError(Exception):
    """Raised by a :class:`TelemetryStore` when the backing storage fails."""

    pass


class UsageFilter(BaseModel):
    guild_id: Optional[int] = None
    since: Optional[datetime] = None

    def to_query(self) -> dict:
        query = {}
        if self.guild_id is not None:
            query["guild_id"] = self.guild_id
        if self.since is not None:
            query["created_at"] = {"$gte": self.since}
        return query

    def matches(self, usage: CommandUsage) -> bool:
        if self.guild_id is not None and usage.guild_id != self.guild_id:
            return False
        if self.since is not None and usage.created_at < self.since:
            return False
        return True


class PerformanceFilter(BaseModel):
    metric_type: Optional[MetricType] = None
    name: Optional[str] = None
    since: Optional[datetime] = None
    success: Optional[bool] = None

    def to_query(self) -> dict:
        query = {}
        if self.metric_type is not None:
            query["metric_type"] = MetricType(self.metric_type).value
        if self.name is not None:
            query["name"] = self.name
        if self.since is not None:
            query["created_at"] = {"$gte": self.since}
        if self.success is not None:
            query["success"] = self.success
        return query

    def matches(self, metric: PerformanceMetric) -> bool:
        if (
            self.metric_type is not None
            and metric.metric_type != MetricType(self.metric_type).value
        ):
            return False
        if self.name is not None and metric.name != self.name:
            return False
        if self.since is not None and metric.created_at < self.since:
            return False
        if self.success is not None and metric.success != self.success:
            return False
        return True


class CommandGroup(BaseModel):
    """Raw per-command counters; rates and averages are derived by analytics."""

    command: str
    count: int = 0
    successes: int = 0
    duration_total: float = 0.0
    duration_count: int = 0


class CommandCount(BaseModel):
    command: str
    count: int


SortSpec = Sequence[Tuple[str, int]]


class TelemetryStore(abc.ABC):
    """Narrow persistence interface used by the dispatcher and analytics.

    Every method may raise :class:`StoreError`.
    """

    @abc.abstractmethod
    async def insert_usage(self, usage: CommandUsage) -> None:
        ...

    @abc.abstractmethod
    async def insert_performance(self, metric: PerformanceMetric) -> None:
        ...

    @abc.abstractmethod
    async def insert_guild_event(self, event: GuildEvent) -> None:
        ...

    @abc.abstractmethod
    async def upsert_guild(self, guild: Guild) -> None:
        ...

    @abc.abstractmethod
    async def mark_guild_left(self, guild_id: int, left_at: datetime) -> None:
        ...

    @abc.abstractmethod
    async def count_usage(self, usage_filter: UsageFilter) -> int:
        ...

    @abc.abstractmethod
    async def group_usage_by_command(
        self, usage_filter: UsageFilter
    ) -> List[CommandGroup]:
        ...

    @abc.abstractmethod
    async def group_by_command_ordered_by_count(
        self, usage_filter: UsageFilter, limit: int
    ) -> List[CommandCount]:
        """Ordered by count descending, ties by command name ascending."""

    @abc.abstractmethod
    async def find_performance(
        self,
        performance_filter: PerformanceFilter,
        sort: Optional[SortSpec] = None,
        limit: Optional[int] = None,
    ) -> List[PerformanceMetric]:
        ...

    async def close(self) -> None:
        pass
