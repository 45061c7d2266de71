import discord

from concord.bot import core
from concord.bot.core import Option, command, slash_command
from concord.db.models import TriggerType


class Sample(core.Cog, description="Sample commands", colour=discord.Colour.red()):
    def __init__(self):
        self.seen = []

    @command(aliases=["hi"], slash=True, cooldown=5)
    async def hello(self, ctx):
        """Says hello"""
        self.seen.append(ctx)

    @command(admin_only=True, guild_only=True, options=[Option("days", "Days")])
    async def purge(self, ctx):
        """Removes old data"""

    @purge.slash
    async def purge_slash(self, ctx):
        self.seen.append("slash")


def test_cog_collects_commands_once() -> None:
    cog = Sample()
    commands = cog.get_commands()

    assert sorted(c.name for c in commands) == ["hello", "purge"]
    assert all(c.cog is cog for c in commands)
    assert all(c.category == "sample" for c in commands)
    assert cog.colour == discord.Colour.red()
    assert cog.description == "Sample commands"


def test_cog_defaults() -> None:
    class Plain(core.Cog, name="Misc", category="utility"):
        pass

    cog = Plain()
    assert cog.qualified_name == "Misc"
    assert cog.category == "utility"
    assert cog.colour == discord.Colour(0x9B9B9B)
    assert cog.description == ""


def test_handlers_bind_to_cog() -> None:
    cog = Sample()
    commands = {c.name: c for c in cog.get_commands()}

    purge = commands["purge"]
    assert purge.triggers == [TriggerType.PREFIX, TriggerType.SLASH]
    assert purge.handler_for(TriggerType.SLASH).__self__ is cog
    assert purge.handler_for(TriggerType.SLASH).__func__.__name__ == "purge_slash"


def test_declaration_shape() -> None:
    cog = Sample()
    commands = {c.name: c for c in cog.get_commands()}

    assert commands["hello"].to_declaration() == {
        "name": "hello",
        "description": "Says hello",
        "type": 1,
        "options": [],
        "dm_permission": True,
    }
    assert commands["purge"].to_declaration() == {
        "name": "purge",
        "description": "Removes old data",
        "type": 1,
        "options": [
            {"name": "days", "description": "Days", "type": 3, "required": False}
        ],
        "dm_permission": False,
        "default_member_permissions": "8",
    }


def test_prefix_only_has_no_declaration() -> None:
    @command()
    async def legacy(ctx):
        """Prefix only"""

    @slash_command(name="modern")
    async def modern_handler(ctx):
        """Slash only"""

    assert legacy.to_declaration() is None
    assert modern_handler.name == "modern"
    assert modern_handler.triggers == [TriggerType.SLASH]
    assert modern_handler.to_dict()["triggers"] == ["slash"]
