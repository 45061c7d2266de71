import discord
from babel.dates import format_timedelta

from concord.bot import core
from concord.bot.core import Option


class General(
    core.Cog,
    description="General commands and information.",
    colour=discord.Colour.blurple(),
    category="utility",
):
    def __init__(self, bot: core.Concord):
        self.bot = bot

    @core.command(
        aliases=["h", "commands"],
        usage="help [command]",
        slash=True,
        options=[Option("command", "Get help for a specific command")],
    )
    async def help(self, ctx: core.Context):
        """Shows a list of available commands"""
        name = ctx.options.get("command") or (ctx.args[0] if ctx.args else None)
        ephemeral = ctx.interaction is not None
        if name is not None:
            return await self.send_command_help(ctx, name, ephemeral)

        embed = discord.Embed(
            title="Command Help", colour=self.colour, description=self.bot.description
        )
        for category in self.bot.registry.categories():
            lines = [
                f"`{ctx.prefix if c.supports(core.TriggerType.PREFIX) else '/'}{c.name}`"
                f" - {c.description.splitlines()[0]}"
                for c in self.bot.registry.list_by_category(category)
            ]
            embed.add_field(name=category.title(), value="\n".join(lines), inline=False)
        embed.set_footer(
            text=f"Use {self.bot.default_prefix}help <command> for more information."
        )
        await ctx.send(embed=embed, ephemeral=ephemeral)

    async def send_command_help(self, ctx: core.Context, name: str, ephemeral: bool):
        command = self.bot.registry.resolve(name)
        if command is None:
            return await ctx.inform(
                f"Command `{name}` not found.", ephemeral=ephemeral
            )

        embed = discord.Embed(
            title=f"Help: {command.name}",
            colour=self.colour,
            description=command.description,
        )
        embed.add_field(name="Usage", value=f"`{command.qualified_usage}`")
        if command.aliases:
            embed.add_field(
                name="Aliases", value=", ".join(f"`{a}`" for a in command.aliases)
            )
        if command.cooldown:
            embed.add_field(name="Cooldown", value=f"{command.cooldown:g}s")
        embed.add_field(
            name="Triggers", value=", ".join(t.value for t in command.triggers)
        )
        restrictions = []
        if command.guild_only:
            restrictions.append("server only")
        if command.admin_only:
            restrictions.append("administrators only")
        if restrictions:
            embed.add_field(name="Restrictions", value=", ".join(restrictions))
        await ctx.send(embed=embed, ephemeral=ephemeral)

    @core.command(aliases=["about", "botinfo"], usage="info", slash=True)
    async def info(self, ctx: core.Context):
        """Displays information about the bot"""
        embed = discord.Embed(
            title="Bot Information", colour=self.colour, description=self.bot.description
        )
        uptime = (
            format_timedelta(self.bot.uptime, locale="en_US")
            if self.bot.launch_time
            else "starting"
        )
        embed.add_field(
            name="Statistics",
            value=(
                f"**Servers:** {len(self.bot.guilds)}\n"
                f"**Users:** {len(self.bot.users)}\n"
                f"**Uptime:** {uptime}"
            ),
            inline=False,
        )
        embed.add_field(
            name="Commands",
            value=(
                f"**Registered:** {len(self.bot.registry)}\n"
                f"**Executed:** {await self.bot.analytics.total_command_count()}"
            ),
            inline=False,
        )
        embed.add_field(
            name="Technology",
            value=f"Python • discord.py {discord.__version__} • MongoDB",
            inline=False,
        )
        await ctx.send(embed=embed)

    @core.command(usage="ping", slash=True)
    async def ping(self, ctx: core.Context):
        """Checks the bot latency"""
        await ctx.inform(f"Pong! Latency: **{round(self.bot.latency * 1000)}ms**")
