"""Pydantic schemas for tag endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from schemas.validators import ensure_utc


class TagCreate(BaseModel):
    """
    Schema for registering a tag.

    The name is trimmed and validated by the tag service so that blank names
    surface as a 400 with a readable message.
    """

    name: str


class TagName(BaseModel):
    """Tag list item."""

    name: str


class TagResponse(BaseModel):
    """Schema for a full tag record."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        """Report all timestamps in UTC."""
        return ensure_utc(v)
