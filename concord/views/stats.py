from aiohttp import web

from concord.db.models import MetricType
from .view import View

CACHE_TTL = 30


class StatsView(View):
    """Serves analytics rollups, caching each payload per query string."""

    async def cached(self, factory):
        cache = self.request.app["cache"]
        key = f"{self.request.path}?{self.request.query_string}"
        payload = await cache.get(key)
        if payload is None:
            payload = await factory()
            await cache.set(key, payload, ttl=CACHE_TTL)
        return web.json_response(payload)

    def metric_type(self, required: bool = False):
        value = self.request.query.get("metric_type")
        if not value:
            if required:
                raise web.HTTPBadRequest(reason="metric_type is required")
            return None
        try:
            return MetricType(value)
        except ValueError:
            raise web.HTTPBadRequest(reason=f"Unknown metric type: {value}")


class CommandStats(StatsView):
    async def get(self):
        guild_id = self.int_query("guild_id")
        days = self.int_query("days", 7)

        async def factory():
            stats = await self.bot.analytics.command_stats(guild_id, days)
            return {"days": days, "commands": [s.model_dump() for s in stats]}

        return await self.cached(factory)


class TopCommands(StatsView):
    async def get(self):
        limit = self.int_query("limit", 10)
        guild_id = self.int_query("guild_id")

        async def factory():
            counts = await self.bot.analytics.most_used_commands(limit, guild_id)
            return {"commands": [c.model_dump() for c in counts]}

        return await self.cached(factory)


class TotalCommands(StatsView):
    async def get(self):
        guild_id = self.int_query("guild_id")
        days = self.int_query("days")

        async def factory():
            total = await self.bot.analytics.total_command_count(guild_id, days)
            return {"total": total}

        return await self.cached(factory)


class AveragePerformance(StatsView):
    async def get(self):
        metric_type = self.metric_type(required=True)
        name = self.request.query.get("name")
        if not name:
            raise web.HTTPBadRequest(reason="name is required")
        days = self.int_query("days", 7)

        async def factory():
            summary = await self.bot.analytics.average_performance(
                metric_type, name, days
            )
            return {
                "metric_type": metric_type.value,
                "name": name,
                "summary": summary.model_dump() if summary else None,
            }

        return await self.cached(factory)


class SlowestMetrics(StatsView):
    async def get(self):
        metric_type = self.metric_type()
        limit = self.int_query("limit", 10)

        async def factory():
            metrics = await self.bot.analytics.slowest_metrics(metric_type, limit)
            return {"metrics": [m.model_dump(mode="json") for m in metrics]}

        return await self.cached(factory)
