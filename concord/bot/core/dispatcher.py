import logging
from typing import TYPE_CHECKING, Collection, List, Optional

import discord
from discord.ext import commands
from sentry_sdk import capture_exception, new_scope

from concord.db.models import CommandUsage, MetricType, TriggerType
from . import checks
from .context import Context

if TYPE_CHECKING:
    from logging import Logger
    from concord.monitoring import AnalyticsAggregator, Instrumentation
    from .cooldowns import CooldownStore
    from .registry import CommandRegistry

UNAVAILABLE = "This command is not available."
FAILURE = "An error occurred while executing the command."
UNSUPPORTED = "This command does not support {trigger} execution."
MAX_ERROR_LENGTH = 500


def summarize_error(exc: BaseException) -> str:
    return f"{type(exc).__name__}: {exc}"[:MAX_ERROR_LENGTH]


class Dispatcher:
    """Routes prefix messages and slash interactions to registered commands.

    Both paths share the gates (guild only, admin only, cooldown), run the
    handler under instrumentation and record one usage fact per execution.
    Nothing raised by a handler reaches the caller: the actor gets a generic
    reply instead.
    """

    def __init__(
        self,
        registry: "CommandRegistry",
        cooldowns: "CooldownStore",
        instrumentation: "Instrumentation",
        analytics: Optional["AnalyticsAggregator"] = None,
        *,
        bot=None,
        admin_roles: Collection[int] = (),
        owner_id: Optional[int] = None,
        cooldowns_enabled: bool = True,
        slash_cooldowns: bool = True,
        logger: "Logger" = None,
    ):
        self.registry = registry
        self.cooldowns = cooldowns
        self.instrumentation = instrumentation
        self.analytics = analytics
        self.bot = bot
        self.admin_roles = frozenset(admin_roles)
        self.owner_id = owner_id
        self.cooldowns_enabled = cooldowns_enabled
        self.slash_cooldowns = slash_cooldowns
        self.logger = logger or logging.getLogger(__name__)

    # Entry points

    async def dispatch_text(
        self, message: discord.Message, prefix: str
    ) -> Optional[Context]:
        content = message.content or ""
        if not content.startswith(prefix):
            return None
        tokens = content[len(prefix) :].split()
        if not tokens:
            return None

        key, *args = tokens
        command = self.registry.resolve(key)
        if command is None:
            return None

        ctx = Context.from_message(
            self.bot, message, prefix=prefix, args=args, command=command
        )
        if not await self.run_gates(ctx):
            return ctx

        handler = command.handler_for(TriggerType.PREFIX)
        if handler is None:
            await self.reply(ctx, UNSUPPORTED.format(trigger="prefix"))
            return ctx

        await self.invoke(ctx, handler)
        return ctx

    async def dispatch_structured(
        self, interaction: discord.Interaction
    ) -> Optional[Context]:
        name = (interaction.data or {}).get("name") or ""
        command = self.registry.resolve(name) if name else None
        if command is None or not command.supports(TriggerType.SLASH):
            await self.respond(
                lambda: interaction.response.send_message(UNAVAILABLE, ephemeral=True),
                interaction.user.id,
            )
            return None

        ctx = Context.from_interaction(self.bot, interaction, command=command)
        if not await self.run_gates(ctx):
            return ctx

        await self.invoke(ctx, command.handler_for(TriggerType.SLASH))
        return ctx

    # Gates

    def cooldown_applies(self, ctx: Context) -> bool:
        if not self.cooldowns_enabled:
            return False
        return ctx.trigger == TriggerType.PREFIX or self.slash_cooldowns

    async def run_gates(self, ctx: Context) -> bool:
        try:
            checks.guild_only(ctx)
            checks.admin_only(ctx, self.admin_roles, self.owner_id)
            if self.cooldown_applies(ctx):
                checks.cooldown(ctx, self.cooldowns)
        except commands.CheckFailure as exc:
            self.logger.debug(
                f"Command {ctx.command.name} rejected for {ctx.author.id}: {exc}"
            )
            await self.reply(ctx, str(exc))
            return False
        return True

    # Execution

    async def invoke(self, ctx: Context, handler):
        command = ctx.command
        measurement = await self.instrumentation.capture(
            lambda: handler(ctx),
            MetricType.COMMAND_EXECUTION,
            command.name,
            {"trigger": ctx.trigger.value},
        )
        exc = measurement.error
        if exc is None:
            await self.record(ctx, True, measurement.duration)
            return

        self.logger.error(
            f"Error executing {ctx.trigger.value} command {command.name}",
            exc_info=exc,
        )
        self.report(ctx, exc)
        await self.reply(ctx, FAILURE)
        await self.record(ctx, False, measurement.duration, summarize_error(exc))

    async def reply(self, ctx: Context, content: str):
        await self.respond(lambda: ctx.send(content, ephemeral=True), ctx.author.id)

    async def respond(self, send, user_id: int):
        try:
            await send()
        except discord.HTTPException:
            self.logger.warning(f"Could not reply to {user_id}", exc_info=True)

    def report(self, ctx: Context, exc: Exception):
        with new_scope() as scope:
            scope.set_context(
                "context",
                {
                    "command": ctx.command.name,
                    "trigger": ctx.trigger.value,
                    "guild": repr(ctx.guild),
                    "channel": repr(ctx.channel),
                    "author": repr(ctx.author),
                    "args": ctx.args,
                },
            )
            capture_exception(exc)

    async def record(
        self, ctx: Context, success: bool, duration: float, error: str = None
    ):
        if self.analytics is None:
            return
        await self.analytics.record_usage(
            CommandUsage(
                guild_id=ctx.guild.id if ctx.guild else None,
                user_id=ctx.author.id,
                command=ctx.command.name,
                type=ctx.trigger,
                args=" ".join(ctx.args) or None,
                success=success,
                error=error,
                duration=duration,
            )
        )

    # Declarations

    def export_declarations(self) -> List[dict]:
        declarations = []
        for command in self.registry.unique_definitions():
            declaration = command.to_declaration()
            if declaration is not None:
                declarations.append(declaration)
        return declarations

    async def sync_declarations(
        self, http, application_id: int, guild_id: Optional[int] = None
    ) -> List[dict]:
        """Replaces every declared slash command of the application, globally or
        in one guild."""
        declarations = self.export_declarations()
        if not declarations:
            self.logger.info("No slash commands to register")
            return declarations

        self.logger.info(f"Registering {len(declarations)} slash command(s)...")
        if guild_id:
            await http.bulk_upsert_guild_commands(
                application_id, guild_id, declarations
            )
        else:
            await http.bulk_upsert_global_commands(application_id, declarations)
        self.logger.info("Successfully registered slash commands")
        return declarations
