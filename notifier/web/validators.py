"""Pydantic models for POST endpoint input validation."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..models import NOTIFICATION_TYPES


class NotificationInput(BaseModel):
    user_id: str = Field(min_length=1)
    notification_type: str = "system"
    title: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1)
    metadata: dict[str, Any] | None = None
    scheduled_for: datetime | None = None

    @field_validator("notification_type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        if v not in NOTIFICATION_TYPES:
            raise ValueError(f"notification_type must be one of {set(NOTIFICATION_TYPES)}")
        return v
