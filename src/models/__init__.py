"""SQLAlchemy models."""
from models.base import Base, TimestampMixin, UUIDv7Mixin
from models.tag import PromptTag, Tag  # Must be before prompt due to import
from models.prompt import Prompt

__all__ = [
    "Base",
    "Prompt",
    "PromptTag",
    "Tag",
    "TimestampMixin",
    "UUIDv7Mixin",
]
