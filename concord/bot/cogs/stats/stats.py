import discord

from concord.bot import core
from concord.bot.core import Option
from concord.bot.utils.misc import format_duration
from concord.db.models import MetricType

INTEGER = discord.AppCommandOptionType.integer


def int_argument(ctx: core.Context, name: str, default: int, maximum: int) -> int:
    value = ctx.options.get(name)
    if value is None and ctx.args:
        value = ctx.args[0]
    try:
        value = int(value) if value is not None else default
    except ValueError:
        value = default
    return max(1, min(value, maximum))


class Stats(
    core.Cog,
    description="Command usage statistics and performance metrics.",
    colour=discord.Colour.orange(),
):
    def __init__(self, bot: core.Concord):
        self.bot = bot

    @core.command(
        usage="stats [days]",
        slash=True,
        guild_only=True,
        admin_only=True,
        cooldown=10,
        options=[Option("days", "Number of days to look back", INTEGER)],
    )
    async def stats(self, ctx: core.Context):
        """Shows command usage statistics of this server"""
        days = int_argument(ctx, "days", 7, 365)
        stats = await self.bot.analytics.command_stats(ctx.guild.id, days)
        if not stats:
            return await ctx.inform(f"No commands were used in the last {days} day(s).")

        stats.sort(key=lambda s: (-s.count, s.command))
        lines = [
            f"`{s.command}` - {s.count} use(s), {s.success_rate:.0%} success, "
            f"avg {format_duration(s.avg_duration)}"
            for s in stats
        ]
        total = await self.bot.analytics.total_command_count(ctx.guild.id, days)
        embed = discord.Embed(
            title=f"Command statistics ({days} day(s))",
            colour=self.colour,
            description="\n".join(lines),
        )
        embed.set_footer(text=f"Total: {total}")
        await ctx.send(embed=embed)

    @core.command(
        usage="top [limit]",
        slash=True,
        guild_only=True,
        admin_only=True,
        cooldown=10,
        options=[Option("limit", "Number of commands to show", INTEGER)],
    )
    async def top(self, ctx: core.Context):
        """Shows the most used commands of this server"""
        limit = int_argument(ctx, "limit", 10, 25)
        counts = await self.bot.analytics.most_used_commands(limit, ctx.guild.id)
        if not counts:
            return await ctx.inform("No commands were used yet.")

        lines = [
            f"**{i}.** `{c.command}` - {c.count}" for i, c in enumerate(counts, 1)
        ]
        await ctx.inform("\n".join(lines), title="Most used commands")

    @core.command(
        aliases=["performance"],
        usage="perf [metric_type]",
        slash=True,
        admin_only=True,
        options=[Option("metric_type", "Metric type to filter by")],
    )
    async def perf(self, ctx: core.Context):
        """Shows the slowest recorded operations"""
        value = ctx.options.get("metric_type") or (ctx.args[0] if ctx.args else None)
        metric_type = None
        if value is not None:
            try:
                metric_type = MetricType(value.lower())
            except ValueError:
                return await ctx.inform(
                    "Unknown metric type. Available: "
                    + ", ".join(f"`{t.value}`" for t in MetricType)
                )

        metrics = await self.bot.analytics.slowest_metrics(metric_type, 10)
        if not metrics:
            return await ctx.inform("No performance metrics recorded yet.")

        lines = [
            f"`{m.metric_type}` **{m.name}** - {format_duration(m.duration)}"
            + ("" if m.success else " (failed)")
            for m in metrics
        ]
        await ctx.inform("\n".join(lines), title="Slowest operations")

    @core.command(usage="system", slash=True, admin_only=True)
    async def system(self, ctx: core.Context):
        """Shows resource usage of the bot host"""
        await ctx.inform(self.bot.system.formatted(), title="System Statistics")
