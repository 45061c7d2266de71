from motor import motor_asyncio as motorio

from .memory import MemoryTelemetryStore
from .mongo import MongoTelemetryStore
from .store import StoreError, TelemetryStore


async def close_store(app):
    await app["store"].close()


def create_store(mongo_config) -> TelemetryStore:
    if not mongo_config.enabled:
        return MemoryTelemetryStore()
    client = motorio.AsyncIOMotorClient(
        mongo_config.url, appname="concord", tz_aware=True
    )
    return MongoTelemetryStore(client[mongo_config.database])


async def init_db(app):
    app["store"] = store = create_store(app["config"]["mongo"])
    if isinstance(store, MongoTelemetryStore):
        await store.ensure_indexes()
        app["logger"].info("Mongo connected.")
    else:
        app["logger"].info("Mongo disabled, telemetry is kept in memory.")
    app.on_cleanup.append(close_store)
