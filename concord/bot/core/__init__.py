from .bot import Concord
from .cog import Cog
from .command import Command, Option, command, slash_command
from .context import Context
from .cooldowns import CooldownStore
from .dispatcher import Dispatcher
from .registry import CommandRegistry
from concord.db.models import TriggerType
