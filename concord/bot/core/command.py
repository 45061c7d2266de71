import inspect
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

import discord

from concord.db.models import TriggerType

CHAT_INPUT = 1


@dataclass(frozen=True)
class Option:
    """An option of a slash declaration, also used to parse structured values."""

    name: str
    description: str
    type: discord.AppCommandOptionType = discord.AppCommandOptionType.string
    required: bool = False

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "type": self.type.value,
            "required": self.required,
        }


class Command:
    """A command that can be triggered by a prefix message, a slash interaction,
    or both.

    Handlers are kept per :class:`TriggerType`; a trigger without a handler is
    simply not supported by the command.
    """

    def __init__(
        self,
        func: Optional[Callable] = None,
        *,
        name: str = None,
        aliases: Iterable[str] = (),
        description: str = None,
        usage: str = None,
        category: str = None,
        admin_only: bool = False,
        guild_only: bool = False,
        cooldown: Optional[float] = None,
        options: Iterable[Option] = (),
        triggers: Iterable[TriggerType] = (TriggerType.PREFIX,),
    ):
        self.name = name or (func.__name__ if func else None)
        # Preserves order, drops duplicates
        self.aliases = list(dict.fromkeys(aliases))
        self.raw_doc = getattr(func, "__doc__", None)
        self.description = description or (
            inspect.cleandoc(self.raw_doc) if self.raw_doc else None
        )
        self.usage = usage
        self.category = category
        self.admin_only = admin_only
        self.guild_only = guild_only
        self.cooldown = cooldown
        self.options = list(options)
        self.cog = None
        self.handlers: Dict[TriggerType, Callable] = {}
        if func is not None:
            for trigger in triggers:
                self.handlers[TriggerType(trigger)] = func

    def __repr__(self):
        triggers = ", ".join(t.value for t in self.triggers)
        return f"<Command name={self.name!r} triggers=[{triggers}]>"

    @property
    def triggers(self) -> List[TriggerType]:
        return [t for t in TriggerType if t in self.handlers]

    def supports(self, trigger: TriggerType) -> bool:
        return TriggerType(trigger) in self.handlers

    def handler_for(self, trigger: TriggerType) -> Optional[Callable]:
        """Returns the handler bound to the command's cog, if any."""
        func = self.handlers.get(TriggerType(trigger))
        if func is None or self.cog is None:
            return func
        return func.__get__(self.cog, type(self.cog))

    def text(self, func: Callable):
        """Decorator that attaches the prefix handler."""
        self.handlers[TriggerType.PREFIX] = func
        return self

    def slash(self, func: Callable):
        """Decorator that attaches the slash handler."""
        self.handlers[TriggerType.SLASH] = func
        return self

    @property
    def qualified_usage(self) -> str:
        return self.usage or self.name

    def to_declaration(self) -> Optional[dict]:
        if not self.supports(TriggerType.SLASH):
            return None
        declaration: Dict[str, Any] = {
            "name": self.name,
            "description": (self.description or self.name).splitlines()[0][:100],
            "type": CHAT_INPUT,
            "options": [option.to_dict() for option in self.options],
            "dm_permission": not self.guild_only,
        }
        if self.admin_only:
            declaration["default_member_permissions"] = str(
                discord.Permissions(administrator=True).value
            )
        return declaration

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "aliases": self.aliases,
            "description": self.description,
            "usage": self.usage,
            "category": self.category,
            "admin_only": self.admin_only,
            "guild_only": self.guild_only,
            "cooldown": self.cooldown,
            "triggers": [t.value for t in self.triggers],
        }


def command(name=None, cls=None, slash=False, **attrs):
    """Turns a coroutine into a prefix-triggered :class:`Command`.

    With ``slash=True`` the same coroutine also handles the slash trigger;
    a separate slash handler can be attached with ``@<command>.slash``.
    """
    triggers = (TriggerType.PREFIX,)
    if slash:
        triggers += (TriggerType.SLASH,)
    if cls is None:
        cls = Command

    def decorator(func):
        if isinstance(func, Command):
            raise TypeError("Callback is already a command.")
        return cls(func, name=name, triggers=triggers, **attrs)

    return decorator


def slash_command(name=None, cls=None, **attrs):
    """Turns a coroutine into a slash-only :class:`Command`."""
    if cls is None:
        cls = Command

    def decorator(func):
        if isinstance(func, Command):
            raise TypeError("Callback is already a command.")
        return cls(func, name=name, triggers=(TriggerType.SLASH,), **attrs)

    return decorator
