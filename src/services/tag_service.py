"""Service layer for tag registry operations."""
import logging

from sqlalchemy import Insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from uuid6 import uuid7

from models.base import utc_now
from models.tag import TAG_NAME_MAX_LENGTH, Tag
from schemas.validators import normalize_tag_name, normalize_tag_names
from services.exceptions import FieldLimitExceededError, InputValidationError

logger = logging.getLogger(__name__)


def _insert_tag_if_absent(db: AsyncSession, name: str) -> Insert:
    """
    Build an INSERT for a tag that is a no-op when the name already exists.

    The unique constraint on tags.name decides the race between concurrent
    first uses of a name; the losing insert does nothing instead of failing.
    """
    dialect_name = db.get_bind().dialect.name
    if dialect_name == "postgresql":
        insert = postgresql.insert
    elif dialect_name == "sqlite":
        insert = sqlite.insert
    else:
        raise RuntimeError(f"Tag upsert is not supported on {dialect_name}")

    return (
        insert(Tag)
        .values(id=uuid7(), name=name, created_at=utc_now())
        .on_conflict_do_nothing(index_elements=[Tag.name])
    )


def normalize_tag(raw_name: str) -> str:
    """
    Trim a raw tag name and validate it.

    Raises:
        InputValidationError: If the name is empty after trimming.
        FieldLimitExceededError: If the name is longer than the column allows.
    """
    try:
        return normalize_tag_name(raw_name)
    except ValueError as e:
        name = raw_name.strip()
        if len(name) > TAG_NAME_MAX_LENGTH:
            raise FieldLimitExceededError("tag", len(name), TAG_NAME_MAX_LENGTH) from e
        raise InputValidationError(str(e)) from e


async def get_or_create_tag(db: AsyncSession, raw_name: str) -> tuple[Tag, bool]:
    """
    Get an existing tag or create it.

    Args:
        db: Database session.
        raw_name: Tag name as typed by the caller (trimmed here).

    Returns:
        Tuple of (tag, created). created is True only if this call inserted the row.

    Raises:
        InputValidationError: If the name is empty after trimming.
    """
    name = normalize_tag(raw_name)

    result = await db.execute(_insert_tag_if_absent(db, name))
    created = result.rowcount == 1

    tag = (
        await db.execute(
            select(Tag).where(Tag.name == name).execution_options(populate_existing=True),
        )
    ).scalar_one()

    if created:
        logger.info("Registered tag %s", tag.id)
    return tag, created


async def get_or_create_tags(db: AsyncSession, tag_names: list[str]) -> list[Tag]:
    """
    Register every name in an ordered set of tags.

    Args:
        db: Database session.
        tag_names: Tag names; blanks are skipped and duplicates collapsed.

    Returns:
        List of Tag objects in the order of first occurrence.
    """
    try:
        normalized = normalize_tag_names(tag_names)
    except ValueError as e:
        raise InputValidationError(str(e)) from e

    tags = []
    for name in normalized:
        tag, _ = await get_or_create_tag(db, name)
        tags.append(tag)
    return tags


async def list_tag_names(db: AsyncSession) -> list[str]:
    """Get all registered tag names, sorted ascending."""
    result = await db.execute(select(Tag.name).order_by(Tag.name.asc()))
    return list(result.scalars())
