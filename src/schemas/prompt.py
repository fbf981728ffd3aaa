"""Pydantic schemas for prompt endpoints."""
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from schemas.validators import coerce_tag_input, ensure_utc

# Legacy clients send the cover image as "cover_img"
COVER_IMAGE_ALIASES = AliasChoices("cover_image_url", "cover_img")


class PromptCreate(BaseModel):
    """Schema for creating a new prompt."""

    title: str
    content: str
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    version: str | None = None
    cover_image_url: str | None = Field(default=None, validation_alias=COVER_IMAGE_ALIASES)
    is_public: bool = False
    category: str | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: Any) -> list[str]:
        """Normalize tags into an ordered set (accepts a comma-joined string)."""
        return coerce_tag_input(v)


class PromptUpdate(BaseModel):
    """
    Schema for partially updating a prompt.

    Only fields present in the request body are applied. `version` is stored
    as given; it is not checked against the stored value.
    """

    title: str | None = None
    content: str | None = None
    description: str | None = None
    tags: list[str] | None = None
    version: str | None = None
    cover_image_url: str | None = Field(default=None, validation_alias=COVER_IMAGE_ALIASES)
    is_public: bool | None = None
    category: str | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: Any) -> list[str] | None:
        """Normalize tags if provided; null is passed through to the service."""
        if v is None:
            return None
        return coerce_tag_input(v)


class PromptResponse(BaseModel):
    """
    Schema for a full prompt record.

    Note: Uses model_validator to extract tag names from the tag_links
    relationship when eagerly loaded.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: str
    title: str
    content: str
    description: str
    tags: list[str]
    version: str | None
    cover_image_url: str | None
    is_public: bool
    category: str
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="before")
    @classmethod
    def extract_from_sqlalchemy(cls, data: Any) -> Any:
        """
        Extract fields from SQLAlchemy model and tag names from tag_links.

        Only accesses tag_links if it's already loaded (not lazy) to avoid
        triggering database queries outside async context.
        """
        if hasattr(data, "__dict__") and not isinstance(data, dict):
            field_names = set(cls.model_fields.keys()) - {"tags"}
            data_dict = {key: getattr(data, key) for key in field_names if hasattr(data, key)}

            # SQLAlchemy sets __dict__ entry when relationship is loaded
            links = data.__dict__.get("tag_links")
            data_dict["tags"] = [link.name for link in links] if links is not None else []
            return data_dict
        return data

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        """Report all timestamps in UTC."""
        return ensure_utc(v)


class PromptUpdateAck(BaseModel):
    """Acknowledgement returned by the update endpoint."""

    message: str
    id: UUID
    version: str | None
    updated_at: datetime

    @field_validator("updated_at")
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        """Report all timestamps in UTC."""
        return ensure_utc(v)


class MessageResponse(BaseModel):
    """Plain acknowledgement message."""

    message: str
