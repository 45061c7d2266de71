from enum import Enum
from typing import Optional

from .base import CreatedAtMixin


class TriggerType(str, Enum):
    PREFIX = "prefix"
    SLASH = "slash"


class CommandUsage(CreatedAtMixin):
    guild_id: Optional[int] = None
    user_id: int
    command: str
    type: TriggerType
    args: Optional[str] = None
    success: bool = True
    error: Optional[str] = None
    duration: Optional[float] = None
