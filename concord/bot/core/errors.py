import math

from discord.ext import commands


class GuildOnly(commands.NoPrivateMessage):
    """Exception raised when a guild-only command is triggered outside a guild.

    This inherits from :exc:`NoPrivateMessage`
    """

    def __init__(self, message=None):
        super().__init__(message or "This command can only be used in a server.")


class NotAdmin(commands.CheckFailure):
    """Exception raised when the actor is not an administrator of the guild.

    This inherits from :exc:`CheckFailure`
    """

    def __init__(self, message=None):
        super().__init__(message or "You do not have permission to use this command.")


class OnCooldown(commands.CheckFailure):
    """Exception raised when the actor's cooldown for a command is still running.

    This inherits from :exc:`CheckFailure`

    Attributes
    -----------
    retry_after: :class:`float`
        The amount of seconds to wait before the command can be used again.
    """

    def __init__(self, retry_after: float):
        self.retry_after = retry_after
        super().__init__(
            f"Please wait {self.seconds_left} second(s) before using this command again."
        )

    @property
    def seconds_left(self) -> int:
        return max(1, math.ceil(self.retry_after))
