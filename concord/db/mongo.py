import functools
from datetime import datetime
from typing import List, Optional

from pymongo import ASCENDING, DESCENDING, IndexModel
from pymongo.errors import PyMongoError

from .models import CommandUsage, Guild, GuildEvent, PerformanceMetric
from .store import (
    CommandCount,
    CommandGroup,
    PerformanceFilter,
    SortSpec,
    StoreError,
    TelemetryStore,
    UsageFilter,
)

INDEXES = {
    "command_usages": [
        IndexModel([("guild_id", ASCENDING)]),
        IndexModel([("user_id", ASCENDING)]),
        IndexModel([("command", ASCENDING)]),
        IndexModel([("created_at", ASCENDING)]),
    ],
    "performance_metrics": [
        IndexModel([("metric_type", ASCENDING)]),
        IndexModel([("name", ASCENDING)]),
        IndexModel([("created_at", ASCENDING)]),
    ],
    "guild_events": [
        IndexModel([("guild_id", ASCENDING)]),
        IndexModel([("event_type", ASCENDING)]),
        IndexModel([("created_at", ASCENDING)]),
    ],
    "guilds": [IndexModel([("id", ASCENDING)], unique=True)],
}


def translate_errors(func):
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except PyMongoError as e:
            raise StoreError(f"{func.__name__} failed: {e}") from e

    return wrapper


def command_group_pipeline(usage_filter: UsageFilter) -> list:
    has_duration = {
        "$cond": [{"$eq": [{"$ifNull": ["$duration", None]}, None]}, 0, 1]
    }
    return [
        {"$match": usage_filter.to_query()},
        {
            "$group": {
                "_id": "$command",
                "count": {"$sum": 1},
                "successes": {"$sum": {"$cond": ["$success", 1, 0]}},
                "duration_total": {"$sum": "$duration"},
                "duration_count": {"$sum": has_duration},
            }
        },
        {"$sort": {"_id": ASCENDING}},
    ]


def top_commands_pipeline(usage_filter: UsageFilter, limit: int) -> list:
    return [
        {"$match": usage_filter.to_query()},
        {"$group": {"_id": "$command", "count": {"$sum": 1}}},
        {"$sort": {"count": DESCENDING, "_id": ASCENDING}},
        {"$limit": limit},
    ]


class MongoTelemetryStore(TelemetryStore):
    def __init__(self, db):
        self.db = db

    @translate_errors
    async def ensure_indexes(self):
        for collection, indexes in INDEXES.items():
            await self.db[collection].create_indexes(indexes)

    @translate_errors
    async def insert_usage(self, usage: CommandUsage) -> None:
        await self.db.command_usages.insert_one(usage.model_dump())

    @translate_errors
    async def insert_performance(self, metric: PerformanceMetric) -> None:
        await self.db.performance_metrics.insert_one(metric.model_dump())

    @translate_errors
    async def insert_guild_event(self, event: GuildEvent) -> None:
        await self.db.guild_events.insert_one(event.model_dump())

    @translate_errors
    async def upsert_guild(self, guild: Guild) -> None:
        await self.db.guilds.update_one(
            {"id": guild.id},
            {"$set": {"name": guild.name, "owner_id": guild.owner_id, "left": None}},
            upsert=True,
        )

    @translate_errors
    async def mark_guild_left(self, guild_id: int, left_at: datetime) -> None:
        await self.db.guilds.update_one({"id": guild_id}, {"$set": {"left": left_at}})

    @translate_errors
    async def count_usage(self, usage_filter: UsageFilter) -> int:
        return await self.db.command_usages.count_documents(usage_filter.to_query())

    @translate_errors
    async def group_usage_by_command(
        self, usage_filter: UsageFilter
    ) -> List[CommandGroup]:
        cursor = self.db.command_usages.aggregate(command_group_pipeline(usage_filter))
        return [
            CommandGroup(
                command=doc["_id"],
                count=doc["count"],
                successes=doc["successes"],
                duration_total=doc["duration_total"] or 0,
                duration_count=doc["duration_count"],
            )
            for doc in await cursor.to_list(None)
        ]

    @translate_errors
    async def group_by_command_ordered_by_count(
        self, usage_filter: UsageFilter, limit: int
    ) -> List[CommandCount]:
        cursor = self.db.command_usages.aggregate(
            top_commands_pipeline(usage_filter, limit)
        )
        return [
            CommandCount(command=doc["_id"], count=doc["count"])
            for doc in await cursor.to_list(None)
        ]

    @translate_errors
    async def find_performance(
        self,
        performance_filter: PerformanceFilter,
        sort: Optional[SortSpec] = None,
        limit: Optional[int] = None,
    ) -> List[PerformanceMetric]:
        cursor = self.db.performance_metrics.find(
            performance_filter.to_query(),
            {"_id": False},
            sort=list(sort) if sort else None,
        )
        if limit:
            cursor = cursor.limit(limit)
        return [PerformanceMetric(**doc) for doc in await cursor.to_list(None)]

    async def close(self) -> None:
        self.db.client.close()
