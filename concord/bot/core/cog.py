from typing import List

import discord

from .command import Command


class CogMeta(type):
    def __new__(mcs, *args, **kwargs):
        name, bases, attrs = args
        attrs["__cog_name__"] = kwargs.pop("name", name)
        attrs["__cog_description__"] = kwargs.pop("description", None)
        attrs["__cog_colour__"] = kwargs.pop("colour", kwargs.pop("color", None))
        attrs["__cog_category__"] = kwargs.pop("category", None)
        commands = {}
        for base in reversed(bases):
            commands.update(getattr(base, "__cog_commands__", {}))
        for key, value in attrs.items():
            if isinstance(value, Command) and value not in commands.values():
                commands[key] = value
        attrs["__cog_commands__"] = commands
        return super().__new__(mcs, name, bases, attrs, **kwargs)

    def __init__(cls, *args, **kwargs):
        super().__init__(*args)


class Cog(metaclass=CogMeta):
    """A group of commands sharing a category, a description and a colour.

    Commands defined on the class are bound to the cog instance when it is
    added to the bot.
    """

    def get_commands(self) -> List[Command]:
        commands = []
        for command in self.__cog_commands__.values():
            command.cog = self
            if command.category is None:
                command.category = self.category
            commands.append(command)
        return commands

    @property
    def qualified_name(self) -> str:
        return self.__cog_name__

    @property
    def category(self) -> str:
        return self.__cog_category__ or self.qualified_name.lower()

    @property
    def colour(self):
        if isinstance(self.__cog_colour__, discord.Colour):
            return self.__cog_colour__

        return discord.Colour(0x9B9B9B)

    @property
    def description(self):
        return self.__cog_description__ or ""
