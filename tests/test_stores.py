from datetime import datetime, timezone

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from concord.db import MemoryTelemetryStore, MongoTelemetryStore, StoreError
from concord.db.models import CommandUsage, Guild, MetricType, PerformanceMetric
from concord.db.mongo import command_group_pipeline, top_commands_pipeline
from concord.db.store import DESCENDING, PerformanceFilter, UsageFilter

pytestmark = pytest.mark.anyio

SINCE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_usage_filter_query() -> None:
    assert UsageFilter().to_query() == {}
    assert UsageFilter(guild_id=5, since=SINCE).to_query() == {
        "guild_id": 5,
        "created_at": {"$gte": SINCE},
    }


def test_performance_filter_query() -> None:
    query = PerformanceFilter(
        metric_type=MetricType.API_CALL, name="sync", success=True
    ).to_query()

    assert query == {"metric_type": "api_call", "name": "sync", "success": True}


def test_command_group_pipeline() -> None:
    pipeline = command_group_pipeline(UsageFilter(guild_id=5))

    assert pipeline[0] == {"$match": {"guild_id": 5}}
    group = pipeline[1]["$group"]
    assert group["_id"] == "$command"
    assert group["count"] == {"$sum": 1}
    assert group["duration_total"] == {"$sum": "$duration"}


def test_top_commands_pipeline() -> None:
    pipeline = top_commands_pipeline(UsageFilter(), 3)

    assert pipeline[2] == {"$sort": {"count": -1, "_id": 1}}
    assert pipeline[3] == {"$limit": 3}


async def test_memory_guild_lifecycle() -> None:
    store = MemoryTelemetryStore()
    left_at = datetime(2024, 2, 1, tzinfo=timezone.utc)

    await store.upsert_guild(Guild(id=1, name="Old", owner_id=2))
    await store.mark_guild_left(1, left_at)
    assert store.guilds[1].left == left_at

    await store.upsert_guild(Guild(id=1, name="New", owner_id=3))
    assert store.guilds[1].name == "New"
    assert store.guilds[1].left is None

    await store.mark_guild_left(404, left_at)
    assert 404 not in store.guilds


async def test_memory_find_performance_sorts_and_limits() -> None:
    store = MemoryTelemetryStore()
    for name, duration in [("a", 3.0), ("b", 9.0), ("c", 3.0), ("d", 1.0)]:
        await store.insert_performance(
            PerformanceMetric(metric_type="other", name=name, duration=duration)
        )

    metrics = await store.find_performance(
        PerformanceFilter(), sort=[("duration", DESCENDING), ("name", 1)], limit=3
    )

    assert [m.name for m in metrics] == ["b", "a", "c"]
    assert len(await store.find_performance(PerformanceFilter(), limit=0)) == 4


class FakeCursor:
    def __init__(self, docs):
        self.docs = docs
        self.limited = None

    def limit(self, n):
        self.limited = n
        return self

    async def to_list(self, length):
        return self.docs[: self.limited] if self.limited else self.docs


class FakeCollection:
    def __init__(self, docs=None, error=None):
        self.docs = docs or []
        self.error = error
        self.calls = []

    def _check(self):
        if self.error is not None:
            raise self.error

    async def insert_one(self, doc):
        self._check()
        self.calls.append(("insert_one", doc))

    async def update_one(self, query, update, upsert=False):
        self._check()
        self.calls.append(("update_one", query, update, upsert))

    async def count_documents(self, query):
        self._check()
        self.calls.append(("count_documents", query))
        return len(self.docs)

    def aggregate(self, pipeline):
        self._check()
        self.calls.append(("aggregate", pipeline))
        return FakeCursor(self.docs)

    def find(self, query, projection=None, sort=None):
        self._check()
        self.calls.append(("find", query, projection, sort))
        return FakeCursor(self.docs)


class FakeDatabase(dict):
    def __getattr__(self, name):
        return self.setdefault(name, FakeCollection())


async def test_mongo_store_writes_documents() -> None:
    db = FakeDatabase()
    store = MongoTelemetryStore(db)

    await store.insert_usage(
        CommandUsage(user_id=1, command="ping", type="slash", duration=3.0)
    )
    await store.upsert_guild(Guild(id=7, name="Guild"))

    [(_, doc)] = db["command_usages"].calls
    assert doc["command"] == "ping"
    assert doc["type"] == "slash"
    assert doc["created_at"].tzinfo is not None
    [(_, query, update, upsert)] = db["guilds"].calls
    assert query == {"id": 7}
    assert update["$set"]["name"] == "Guild"
    assert upsert is True


async def test_mongo_store_reads_aggregations() -> None:
    db = FakeDatabase()
    db["command_usages"] = FakeCollection(
        [
            {
                "_id": "ping",
                "count": 4,
                "successes": 3,
                "duration_total": None,
                "duration_count": 0,
            }
        ]
    )
    store = MongoTelemetryStore(db)

    [group] = await store.group_usage_by_command(UsageFilter(guild_id=1))

    assert group.command == "ping"
    assert group.successes == 3
    assert group.duration_total == 0


async def test_mongo_store_find_performance() -> None:
    db = FakeDatabase()
    db["performance_metrics"] = FakeCollection(
        [
            {"metric_type": "api_call", "name": "sync", "duration": 12.5},
            {"metric_type": "api_call", "name": "fetch", "duration": 2.5},
        ]
    )
    store = MongoTelemetryStore(db)

    metrics = await store.find_performance(
        PerformanceFilter(metric_type=MetricType.API_CALL),
        sort=[("duration", DESCENDING)],
        limit=1,
    )

    assert [m.name for m in metrics] == ["sync"]
    _, query, projection, sort = db["performance_metrics"].calls[0]
    assert query == {"metric_type": "api_call"}
    assert projection == {"_id": False}
    assert sort == [("duration", -1)]


async def test_mongo_errors_become_store_errors() -> None:
    db = FakeDatabase()
    db["command_usages"] = FakeCollection(error=ServerSelectionTimeoutError("down"))
    store = MongoTelemetryStore(db)

    with pytest.raises(StoreError, match="count_usage failed"):
        await store.count_usage(UsageFilter())
