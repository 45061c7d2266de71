from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CreatedAtMixin(BaseModel):
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    created_at: Optional[datetime] = Field(default=None, validate_default=True)

    @field_validator("created_at", mode="before")
    @classmethod
    def set_created_at_now(cls, v):
        return v or utcnow()
