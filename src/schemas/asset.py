"""Pydantic schemas for upload endpoints."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AssetResponse(BaseModel):
    """An uploaded file and the public URL it is served from."""

    model_config = ConfigDict(from_attributes=True)

    path: str = Field(description="Storage key, always prefixed with the owner's id")
    url: str = Field(validation_alias="public_url")
    name: str
    size: int = Field(validation_alias="size_bytes")
    content_type: str
    created_at: datetime
