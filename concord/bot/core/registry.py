import logging
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional

from .command import Command

if TYPE_CHECKING:
    from logging import Logger


class CommandRegistry:
    """Lookup of commands by lower-cased name or alias.

    Filled once at startup. A key registered twice keeps the last command and
    logs a warning; a command whose own name is taken over loses its aliases
    too.
    """

    def __init__(self, logger: "Logger" = None):
        self.logger = logger or logging.getLogger(__name__)
        self._lookup: Dict[str, Command] = {}

    def __len__(self):
        return len(self.definitions())

    def __contains__(self, name: str):
        return self.resolve(name) is not None

    def register(self, command: Command):
        if not command.name or not command.description:
            self.logger.warning(
                f"Skipping command registration: missing name or description ({command!r})"
            )
            return

        for key in [command.name, *command.aliases]:
            key = key.lower()
            existing = self._lookup.get(key)
            if existing is not None and existing is not command:
                self.logger.warning(
                    f"Command key '{key}' of {existing.name} is overridden by {command.name}"
                )
                if key == existing.name.lower():
                    self.evict(existing)
            self._lookup[key] = command

        self.logger.info(f"Registered command: {command.name}")

    def evict(self, command: Command):
        """Drops every key still pointing to ``command``."""
        for key in [k for k, c in self._lookup.items() if c is command]:
            del self._lookup[key]

    def register_all(self, commands: Iterable[Command]):
        for command in commands:
            self.register(command)

    def resolve(self, name: str) -> Optional[Command]:
        return self._lookup.get(name.lower())

    def definitions(self) -> List[Command]:
        """Distinct commands reachable through any key, in registration order."""
        seen = {}
        for command in self._lookup.values():
            seen.setdefault(id(command), command)
        return list(seen.values())

    def list_by_category(self, category: str) -> List[Command]:
        return [c for c in self.definitions() if c.category == category]

    def categories(self) -> List[str]:
        return list(
            dict.fromkeys(c.category for c in self.definitions() if c.category)
        )

    def unique_definitions(self) -> List[Command]:
        """Commands still registered under their own name, excluding alias-only
        entries."""
        return [
            command
            for key, command in self._lookup.items()
            if key == command.name.lower()
        ]
