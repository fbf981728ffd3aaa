"""Service layer for prompt CRUD operations."""
import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy import ColumnElement, delete, exists, or_, select, update
from sqlalchemy.ext.asyncio import AsyncScalarResult, AsyncSession
from sqlalchemy.orm import selectinload

from core.config import Settings
from models.base import utc_now
from models.prompt import CATEGORY_MAX_LENGTH, DEFAULT_CATEGORY, VERSION_MAX_LENGTH, Prompt
from models.tag import TAG_NAME_MAX_LENGTH, PromptTag
from schemas.prompt import PromptCreate, PromptUpdate
from services.exceptions import (
    FieldLimitExceededError,
    ForbiddenError,
    InputValidationError,
    NotFoundError,
)
from services.utils import escape_ilike

logger = logging.getLogger(__name__)

# Legacy clients send category=all to mean "no category filter"
ALL_CATEGORIES = "all"

# Rows fetched per round trip when streaming listings
STREAM_BATCH_SIZE = 100

# Fields that cannot be cleared with an explicit null
NON_NULLABLE_FIELDS = ("title", "content", "is_public")


def visible_to(caller_id: str | None) -> ColumnElement[bool]:
    """
    Visibility predicate: owners see their own prompts, everyone sees public ones.

    Anonymous callers (None) only see public prompts.
    """
    if caller_id is None:
        return Prompt.is_public.is_(True)
    return or_(Prompt.owner_id == caller_id, Prompt.is_public.is_(True))


def _require_text(field: str, value: str | None) -> str:
    """Trim a required text field, rejecting null and blank values."""
    if value is None or not value.strip():
        raise InputValidationError(f"{field.capitalize()} is required")
    return value.strip()


def _category_or_default(value: str | None) -> str:
    """Null and blank categories fall back to the default category."""
    if value is None or not value.strip():
        return DEFAULT_CATEGORY
    return value.strip()


@dataclass(frozen=True)
class PromptFilters:
    """Conjunctive filters applied after visibility when listing prompts."""

    tag: str | None = None
    category: str | None = None
    search_text: str | None = None
    public_only: bool = False


class PromptService:
    """
    Prompt service with full CRUD operations.

    Writes are single conditional statements guarded by owner_id, so ownership
    is checked by the same statement that performs the change.
    """

    def _validate_field_limits(
        self,
        limits: Settings,
        title: str | None = None,
        description: str | None = None,
        content: str | None = None,
        tags: list[str] | None = None,
        version: str | None = None,
        category: str | None = None,
    ) -> None:
        """
        Validate field lengths against configured limits.

        Raises:
            FieldLimitExceededError: If any field exceeds its limit.
        """
        if title is not None and len(title) > limits.max_title_length:
            raise FieldLimitExceededError("title", len(title), limits.max_title_length)
        if description is not None and len(description) > limits.max_description_length:
            raise FieldLimitExceededError(
                "description", len(description), limits.max_description_length,
            )
        if content is not None and len(content) > limits.max_content_length:
            raise FieldLimitExceededError("content", len(content), limits.max_content_length)
        if tags is not None:
            for tag in tags:
                if len(tag) > TAG_NAME_MAX_LENGTH:
                    raise FieldLimitExceededError("tag", len(tag), TAG_NAME_MAX_LENGTH)
        if version is not None and len(version) > VERSION_MAX_LENGTH:
            raise FieldLimitExceededError("version", len(version), VERSION_MAX_LENGTH)
        if category is not None and len(category) > CATEGORY_MAX_LENGTH:
            raise FieldLimitExceededError("category", len(category), CATEGORY_MAX_LENGTH)

    async def _fetch(
        self, db: AsyncSession, prompt_id: UUID, *criteria: ColumnElement[bool],
    ) -> Prompt | None:
        """Load a prompt with its tags, overwriting any stale copy in the session."""
        query = (
            select(Prompt)
            .options(selectinload(Prompt.tag_links))
            .where(Prompt.id == prompt_id, *criteria)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def create(
        self,
        db: AsyncSession,
        owner_id: str,
        data: PromptCreate,
        limits: Settings,
    ) -> Prompt:
        """
        Create a new prompt owned by the caller.

        Args:
            db: Database session.
            owner_id: Caller id; becomes the permanent owner.
            data: Prompt creation data (tags already normalized).
            limits: Settings holding the field length limits.

        Returns:
            The created prompt with tag_links loaded.

        Raises:
            InputValidationError: If title or content is blank.
            FieldLimitExceededError: If any field exceeds its limit.
        """
        title = _require_text("title", data.title)
        content = _require_text("content", data.content)
        description = (data.description or "").strip()
        category = _category_or_default(data.category)
        self._validate_field_limits(
            limits,
            title=title,
            description=description,
            content=content,
            tags=data.tags,
            version=data.version,
            category=category,
        )

        prompt = Prompt(
            owner_id=owner_id,
            title=title,
            content=content,
            description=description,
            version=data.version,
            cover_image_url=data.cover_image_url,
            is_public=data.is_public,
            category=category,
            tag_links=[
                PromptTag(name=name, position=position)
                for position, name in enumerate(data.tags)
            ],
        )
        db.add(prompt)
        await db.flush()

        logger.info("Created prompt %s for owner %s", prompt.id, owner_id)
        return prompt

    async def get_by_id(
        self, db: AsyncSession, caller_id: str | None, prompt_id: UUID,
    ) -> Prompt:
        """
        Get a prompt the caller is allowed to read.

        Raises:
            NotFoundError: If the prompt does not exist or is private to someone else.
        """
        prompt = await self._fetch(db, prompt_id, visible_to(caller_id))
        if prompt is None:
            raise NotFoundError("Prompt not found")
        return prompt

    async def search(
        self,
        db: AsyncSession,
        caller_id: str | None,
        filters: PromptFilters,
    ) -> AsyncScalarResult[Prompt]:
        """
        Stream the prompts visible to the caller that match every filter.

        Args:
            db: Database session.
            caller_id: Caller id, or None for anonymous access.
            filters: Tag containment, exact category, text search, public-only.

        Returns:
            Single-pass async result ordered newest first (created_at, then id).
            Must be consumed while the session is open.
        """
        if filters.public_only:
            visibility = visible_to(None)
        else:
            visibility = visible_to(caller_id)

        query = (
            select(Prompt)
            .options(selectinload(Prompt.tag_links))
            .where(visibility)
        )

        if filters.tag:
            query = query.where(
                exists().where(
                    PromptTag.prompt_id == Prompt.id,
                    PromptTag.name == filters.tag.strip(),
                ),
            )

        if filters.category and filters.category != ALL_CATEGORIES:
            query = query.where(Prompt.category == filters.category)

        if filters.search_text:
            pattern = f"%{escape_ilike(filters.search_text)}%"
            query = query.where(
                or_(
                    Prompt.title.ilike(pattern, escape="\\"),
                    Prompt.content.ilike(pattern, escape="\\"),
                ),
            )

        query = query.order_by(Prompt.created_at.desc(), Prompt.id.desc())
        return await db.stream_scalars(
            query.execution_options(yield_per=STREAM_BATCH_SIZE),
        )

    async def update(
        self,
        db: AsyncSession,
        caller_id: str,
        prompt_id: UUID,
        data: PromptUpdate,
        limits: Settings,
    ) -> Prompt:
        """
        Partially update a prompt owned by the caller.

        Only fields present in the request are changed; updated_at is always
        refreshed. version is stored as given with no conflict check.

        Args:
            db: Database session.
            caller_id: Caller id; must be the owner.
            prompt_id: ID of the prompt to update.
            data: Update data (unset fields are left alone).
            limits: Settings holding the field length limits.

        Returns:
            The updated prompt with tag_links loaded.

        Raises:
            InputValidationError: If a required field is null or blank.
            FieldLimitExceededError: If any field exceeds its limit.
            ForbiddenError: If the prompt is visible to the caller but owned by someone else.
            NotFoundError: If the prompt does not exist or is not visible to the caller.
        """
        update_data: dict[str, Any] = data.model_dump(exclude_unset=True)
        replace_tags = "tags" in update_data
        new_tags = update_data.pop("tags", None)

        for field in NON_NULLABLE_FIELDS:
            if field in update_data and update_data[field] is None:
                raise InputValidationError(f"{field} cannot be null")
        for field in ("title", "content"):
            if field in update_data:
                update_data[field] = _require_text(field, update_data[field])
        if "description" in update_data:
            update_data["description"] = (update_data["description"] or "").strip()
        if "category" in update_data:
            update_data["category"] = _category_or_default(update_data["category"])
        if replace_tags and new_tags is None:
            new_tags = []

        self._validate_field_limits(
            limits,
            title=update_data.get("title"),
            description=update_data.get("description"),
            content=update_data.get("content"),
            tags=new_tags,
            version=update_data.get("version"),
            category=update_data.get("category"),
        )

        update_data["updated_at"] = utc_now()
        result = await db.execute(
            update(Prompt)
            .where(Prompt.id == prompt_id, Prompt.owner_id == caller_id)
            .values(**update_data),
        )
        if result.rowcount == 0:
            await self._raise_write_denied(db, caller_id, prompt_id)

        prompt = await self._fetch(db, prompt_id)
        if prompt is None:
            raise NotFoundError("Prompt not found")

        if replace_tags:
            # Reuse existing links by name so kept tags are not deleted and re-inserted
            existing = {link.name: link for link in prompt.tag_links}
            links = []
            for position, name in enumerate(new_tags):
                link = existing.get(name) or PromptTag(name=name)
                link.position = position
                links.append(link)
            prompt.tag_links = links
            await db.flush()

        logger.info("Updated prompt %s", prompt_id)
        return prompt

    async def _raise_write_denied(
        self, db: AsyncSession, caller_id: str, prompt_id: UUID,
    ) -> None:
        """Classify a guarded write that matched no row."""
        visible = await db.scalar(
            select(Prompt.id).where(Prompt.id == prompt_id, visible_to(caller_id)),
        )
        if visible is not None:
            logger.warning("Caller %s denied write on prompt %s", caller_id, prompt_id)
            raise ForbiddenError("You do not have permission to modify this prompt")
        raise NotFoundError("Prompt not found")

    async def delete(self, db: AsyncSession, caller_id: str, prompt_id: UUID) -> None:
        """
        Delete a prompt owned by the caller.

        Absent prompts and prompts owned by someone else are reported the same
        way, so the response never reveals whether the id exists.

        Raises:
            NotFoundError: If no prompt with this id is owned by the caller.
        """
        result = await db.execute(
            delete(Prompt).where(Prompt.id == prompt_id, Prompt.owner_id == caller_id),
        )
        if result.rowcount == 0:
            raise NotFoundError("Prompt not found")

        # Engines without foreign key enforcement (SQLite by default) skip the cascade
        await db.execute(delete(PromptTag).where(PromptTag.prompt_id == prompt_id))
        logger.info("Deleted prompt %s", prompt_id)
