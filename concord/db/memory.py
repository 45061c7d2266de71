from collections import OrderedDict
from datetime import datetime
from typing import Dict, List, Optional

from .models import CommandUsage, Guild, GuildEvent, PerformanceMetric
from .store import (
    CommandCount,
    CommandGroup,
    PerformanceFilter,
    SortSpec,
    TelemetryStore,
    UsageFilter,
)


class MemoryTelemetryStore(TelemetryStore):
    """Process-local store, used when Mongo is disabled and in tests."""

    def __init__(self):
        self.usages: List[CommandUsage] = []
        self.metrics: List[PerformanceMetric] = []
        self.events: List[GuildEvent] = []
        self.guilds: Dict[int, Guild] = {}

    async def insert_usage(self, usage: CommandUsage) -> None:
        self.usages.append(usage)

    async def insert_performance(self, metric: PerformanceMetric) -> None:
        self.metrics.append(metric)

    async def insert_guild_event(self, event: GuildEvent) -> None:
        self.events.append(event)

    async def upsert_guild(self, guild: Guild) -> None:
        existing = self.guilds.get(guild.id)
        if existing is None:
            self.guilds[guild.id] = guild
        else:
            self.guilds[guild.id] = existing.model_copy(
                update={"name": guild.name, "owner_id": guild.owner_id, "left": None}
            )

    async def mark_guild_left(self, guild_id: int, left_at: datetime) -> None:
        guild = self.guilds.get(guild_id)
        if guild is not None:
            self.guilds[guild_id] = guild.model_copy(update={"left": left_at})

    async def count_usage(self, usage_filter: UsageFilter) -> int:
        return sum(1 for usage in self.usages if usage_filter.matches(usage))

    async def group_usage_by_command(
        self, usage_filter: UsageFilter
    ) -> List[CommandGroup]:
        groups: "OrderedDict[str, CommandGroup]" = OrderedDict()
        for usage in self.usages:
            if not usage_filter.matches(usage):
                continue
            group = groups.setdefault(usage.command, CommandGroup(command=usage.command))
            group.count += 1
            if usage.success:
                group.successes += 1
            if usage.duration is not None:
                group.duration_total += usage.duration
                group.duration_count += 1
        return list(groups.values())

    async def group_by_command_ordered_by_count(
        self, usage_filter: UsageFilter, limit: int
    ) -> List[CommandCount]:
        counts: Dict[str, int] = {}
        for usage in self.usages:
            if usage_filter.matches(usage):
                counts[usage.command] = counts.get(usage.command, 0) + 1
        ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return [CommandCount(command=c, count=n) for c, n in ordered[:limit]]

    async def find_performance(
        self,
        performance_filter: PerformanceFilter,
        sort: Optional[SortSpec] = None,
        limit: Optional[int] = None,
    ) -> List[PerformanceMetric]:
        metrics = [m for m in self.metrics if performance_filter.matches(m)]
        # Stable sorts applied from the least significant key
        for field, direction in reversed(list(sort or ())):
            metrics.sort(key=lambda m: getattr(m, field), reverse=direction < 0)
        if limit:
            metrics = metrics[:limit]
        return metrics
