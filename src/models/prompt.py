"""Prompt model for storing user-owned prompt records."""
from sqlalchemy import Boolean, Index, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin, UUIDv7Mixin
from models.tag import PromptTag

DEFAULT_CATEGORY = "general"

# Column widths for the short free-form labels
VERSION_MAX_LENGTH = 100
CATEGORY_MAX_LENGTH = 100


class Prompt(Base, UUIDv7Mixin, TimestampMixin):
    """Prompt model - text artifact owned by one caller, private unless published."""

    __tablename__ = "prompts"
    __table_args__ = (
        # Anonymous and mixed listings filter on is_public and sort by created_at
        Index("ix_prompts_is_public_created_at", "is_public", "created_at"),
    )

    # id provided by UUIDv7Mixin
    owner_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Caller identity ('sub' claim) of the creator; never reassigned",
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(
        Text, nullable=False, default="", server_default="",
    )
    # Free-form label supplied by the caller, stored verbatim
    version: Mapped[str | None] = mapped_column(String(VERSION_MAX_LENGTH), nullable=True)
    cover_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_public: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false(),
    )
    category: Mapped[str] = mapped_column(
        String(CATEGORY_MAX_LENGTH),
        nullable=False,
        default=DEFAULT_CATEGORY,
        server_default=DEFAULT_CATEGORY,
    )

    # created_at and updated_at provided by TimestampMixin

    tag_links: Mapped[list[PromptTag]] = relationship(
        order_by=PromptTag.position,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def tags(self) -> list[str]:
        """Tag names in caller-supplied order. Requires tag_links to be loaded."""
        return [link.name for link in self.tag_links]
