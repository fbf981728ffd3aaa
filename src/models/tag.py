"""Tag models: the global tag registry and the prompt/tag link table."""
from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, UUIDv7Mixin, utc_now

TAG_NAME_MAX_LENGTH = 100


class Tag(Base, UUIDv7Mixin):
    """Tag model - one row per distinct tag name, shared by all owners."""

    __tablename__ = "tags"
    __table_args__ = (
        # Enforces at most one row per name under concurrent get-or-create
        UniqueConstraint("name", name="uq_tags_name"),
    )

    # id provided by UUIDv7Mixin
    name: Mapped[str] = mapped_column(String(TAG_NAME_MAX_LENGTH), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        nullable=False,
    )


class PromptTag(Base):
    """
    A tag name attached to a prompt.

    Holds the name rather than a foreign key to tags: prompts and the tag
    registry are written independently. position keeps the caller's ordering.
    """

    __tablename__ = "prompt_tags"
    __table_args__ = (
        # Index for "prompts with tag X" lookups (composite PK already indexes prompt_id first)
        Index("ix_prompt_tags_name", "name"),
    )

    prompt_id: Mapped[UUID] = mapped_column(
        ForeignKey("prompts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    name: Mapped[str] = mapped_column(String(TAG_NAME_MAX_LENGTH), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
