from aiocache import Cache
from aiocache.serializers import PickleSerializer

from .commands import CommandList, Command
from .ping import Ping
from .stats import (
    AveragePerformance,
    CommandStats,
    SlowestMetrics,
    TopCommands,
    TotalCommands,
)
from .system import System


async def init_views(app):
    app["cache"] = Cache(serializer=PickleSerializer())
    cors = app["cors"]
    cors.add(app.router.add_route("*", "/ping", Ping))
    cors.add(app.router.add_route("*", "/commands", CommandList))
    cors.add(app.router.add_route("*", r"/commands/{name}", Command))
    cors.add(app.router.add_route("*", "/stats/commands", CommandStats))
    cors.add(app.router.add_route("*", "/stats/top", TopCommands))
    cors.add(app.router.add_route("*", "/stats/total", TotalCommands))
    cors.add(app.router.add_route("*", "/stats/performance", AveragePerformance))
    cors.add(
        app.router.add_route("*", "/stats/performance/slowest", SlowestMetrics)
    )
    cors.add(app.router.add_route("*", "/system", System))
