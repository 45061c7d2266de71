from typing import TYPE_CHECKING, Any, Dict, List, Optional

import discord

from concord.db.models import TriggerType

if TYPE_CHECKING:
    from .bot import Concord
    from .command import Command


class Context:
    """Trigger-agnostic invocation envelope handed to command handlers.

    Built once per dispatch; replies go back to the triggering message or
    interaction.
    """

    def __init__(
        self,
        bot: Optional["Concord"],
        *,
        trigger: TriggerType,
        author,
        guild=None,
        channel=None,
        args: List[str] = None,
        prefix: str = "/",
        command: "Command" = None,
        message: discord.Message = None,
        interaction: discord.Interaction = None,
        options: Dict[str, Any] = None,
    ):
        self.bot = bot
        self.trigger = TriggerType(trigger)
        self.author = author
        self.guild = guild
        self.channel = channel
        self.args = list(args or [])
        self.prefix = prefix
        self.command = command
        self.message = message
        self.interaction = interaction
        self.options = dict(options or {})

    @classmethod
    def from_message(cls, bot, message: discord.Message, *, prefix, args, command):
        return cls(
            bot,
            trigger=TriggerType.PREFIX,
            author=message.author,
            guild=message.guild,
            channel=message.channel,
            args=args,
            prefix=prefix,
            command=command,
            message=message,
        )

    @classmethod
    def from_interaction(cls, bot, interaction: discord.Interaction, *, command):
        data = interaction.data or {}
        options = {
            option["name"]: option.get("value")
            for option in data.get("options", [])
            if "value" in option
        }
        return cls(
            bot,
            trigger=TriggerType.SLASH,
            author=interaction.user,
            guild=interaction.guild,
            channel=interaction.channel,
            args=[str(value) for value in options.values()],
            command=command,
            interaction=interaction,
            options=options,
        )

    @property
    def replied(self) -> bool:
        if self.interaction is None:
            return False
        return self.interaction.response.is_done()

    @property
    def colour(self):
        if self.command and self.command.cog:
            return self.command.cog.colour
        return discord.Colour(0x9B9B9B)

    async def send(self, content: str = None, *, embed=None, ephemeral=False):
        kwargs = {}
        if content is not None:
            kwargs["content"] = content
        if embed is not None:
            kwargs["embed"] = embed

        if self.interaction is None:
            return await self.message.reply(**kwargs)

        if self.interaction.response.is_done():
            return await self.interaction.followup.send(ephemeral=ephemeral, **kwargs)
        return await self.interaction.response.send_message(
            ephemeral=ephemeral, **kwargs
        )

    async def inform(self, description: str, *, ephemeral=False, **kwargs):
        embed = discord.Embed(colour=self.colour, description=description, **kwargs)
        return await self.send(embed=embed, ephemeral=ephemeral)
