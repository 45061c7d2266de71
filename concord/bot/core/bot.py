import asyncio
import inspect
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Dict, Optional

import discord

from concord.db.models import Guild, GuildEventType, MetricType, utcnow
from concord.db.store import StoreError
from concord.monitoring import AnalyticsAggregator, Instrumentation, SystemMonitor
from .cog import Cog
from .cooldowns import CooldownStore
from .dispatcher import Dispatcher
from .registry import CommandRegistry

if TYPE_CHECKING:
    from logging import Logger
    from aiohttp.web_app import Application


class Concord(discord.Client):
    def __init__(self, app: "Application", logger: "Logger" = None, **kwargs):
        self.app = app
        self.config = config = app["config"]
        intents = discord.Intents.default()
        intents.message_content = True
        intents.members = True
        super().__init__(intents=intents, status=discord.Status.idle, **kwargs)
        self.logger = logger = logger or logging.getLogger("discord")
        self.store = app["store"]
        self.default_prefix = config["bot"].default_prefix
        self._description = config["bot"].description
        self.launch_time: Optional[datetime] = None
        self.cogs: Dict[str, Cog] = {}
        self.registry = CommandRegistry(logger)
        self.cooldowns = CooldownStore()
        self.instrumentation = Instrumentation(self.store, logger)
        self.analytics = AnalyticsAggregator(self.store, logger)
        self.system = SystemMonitor(logger)
        features = config["features"]
        self.dispatcher = Dispatcher(
            self.registry,
            self.cooldowns,
            self.instrumentation,
            self.analytics if features.analytics else None,
            bot=self,
            admin_roles=config["bot"].admin_roles,
            owner_id=config["bot"].owner_id,
            cooldowns_enabled=features.cooldowns,
            slash_cooldowns=features.slash_cooldowns,
            logger=logger,
        )
        self._commands_synced = False
        self._tracking_task: Optional[asyncio.Task] = None

    # Properties

    @property
    def uptime(self):
        return utcnow() - self.launch_time

    @property
    def description(self):
        desc = f"{self._description}\n\n" + "\n".join(
            f"`{name}` {cog.description}"
            for name, cog in sorted(self.cogs.items())
            if cog.description
        )
        return inspect.cleandoc(desc)

    # Cogs

    def add_cog(self, cog: Cog):
        self.cogs[cog.qualified_name] = cog
        self.registry.register_all(cog.get_commands())

    # Events

    async def setup_hook(self):
        self._tracking_task = asyncio.create_task(
            self.system.track(self.config["features"].system_tracking_interval)
        )

    async def on_ready(self):
        if not self.launch_time:
            self.launch_time = utcnow()
        await self.change_presence(
            status=discord.Status.online,
            activity=discord.Game(f"{self.default_prefix}help"),
        )
        if self.config["bot"].sync_commands and not self._commands_synced:
            await self.sync_commands()
        self.logger.info("Concord is ready")

    async def on_message(self, message: discord.Message):
        if not self.should_reply(message):
            return
        await self.trace_event(
            "message_create",
            self.dispatcher.dispatch_text(message, self.default_prefix),
        )

    async def on_interaction(self, interaction: discord.Interaction):
        if interaction.type != discord.InteractionType.application_command:
            return
        await self.trace_event(
            "interaction_create", self.dispatcher.dispatch_structured(interaction)
        )

    async def on_guild_join(self, guild: discord.Guild):
        self.logger.info(f"Joined guild: {guild.name} ({guild.id})")
        await self.trace_event("guild_create", self.register_guild(guild))

    async def on_guild_remove(self, guild: discord.Guild):
        self.logger.info(f"Left guild: {guild.name} ({guild.id})")
        await self.trace_event("guild_delete", self.unregister_guild(guild))

    async def on_member_join(self, member: discord.Member):
        if member.bot:
            return
        await self.analytics.record_guild_event(
            member.guild.id, GuildEventType.MEMBER_JOIN, user_id=member.id
        )

    async def on_member_remove(self, member: discord.Member):
        if member.bot:
            return
        await self.analytics.record_guild_event(
            member.guild.id, GuildEventType.MEMBER_LEAVE, user_id=member.id
        )

    # Methods

    def should_reply(self, message: discord.Message):
        """Returns whether the bot should reply to a given message"""
        return not message.author.bot and message.content.startswith(
            self.default_prefix
        )

    async def trace_event(self, name: str, coro):
        result, _ = await self.instrumentation.measure(
            lambda: coro, MetricType.EVENT_HANDLER, name
        )
        return result

    async def register_guild(self, guild: discord.Guild):
        try:
            await self.store.upsert_guild(
                Guild(id=guild.id, name=guild.name, owner_id=guild.owner_id)
            )
        except StoreError:
            self.logger.error(f"Failed to store guild {guild.id}", exc_info=True)
        await self.analytics.record_guild_event(
            guild.id,
            GuildEventType.GUILD_JOIN,
            metadata={"name": guild.name, "members": guild.member_count},
        )

    async def unregister_guild(self, guild: discord.Guild):
        try:
            await self.store.mark_guild_left(guild.id, utcnow())
        except StoreError:
            self.logger.error(f"Failed to mark guild {guild.id} as left", exc_info=True)
        await self.analytics.record_guild_event(
            guild.id, GuildEventType.GUILD_LEAVE, metadata={"name": guild.name}
        )

    async def sync_commands(self):
        bot_config = self.config["bot"]
        try:
            await self.instrumentation.measure(
                lambda: self.dispatcher.sync_declarations(
                    self.http,
                    bot_config.application_id or self.application_id,
                    bot_config.dev_guild_id,
                ),
                MetricType.API_CALL,
                "bulk_upsert_commands",
            )
        except discord.HTTPException:
            self.logger.error("Error registering slash commands", exc_info=True)
        else:
            self._commands_synced = True

    async def start(self, *args, **kwargs):
        await super().start(self.config["bot"].discord_token, *args, **kwargs)

    async def close(self):
        if self._tracking_task is not None:
            self._tracking_task.cancel()
        await super().close()
