from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel

from .base import CreatedAtMixin


class GuildEventType(str, Enum):
    GUILD_JOIN = "guild_join"
    GUILD_LEAVE = "guild_leave"
    MEMBER_JOIN = "member_join"
    MEMBER_LEAVE = "member_leave"


class Guild(BaseModel):
    id: int
    name: str
    owner_id: Optional[int] = None
    left: Optional[datetime] = None


class GuildEvent(CreatedAtMixin):
    guild_id: int
    event_type: GuildEventType
    user_id: Optional[int] = None
    metadata: Optional[Dict[str, Any]] = None
