"""Service layer for publishing prompts and reading them anonymously."""
import logging
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models.base import utc_now
from models.prompt import Prompt
from services.exceptions import NotFoundError

logger = logging.getLogger(__name__)


async def publish(db: AsyncSession, caller_id: str, prompt_id: UUID) -> Prompt:
    """
    Make a prompt owned by the caller publicly readable.

    Publishing an already-public prompt succeeds and only refreshes updated_at.
    There is no reverse operation here; owners turn a prompt private again
    through the general update.

    Raises:
        NotFoundError: If no prompt with this id is owned by the caller. Prompts
            owned by someone else are reported the same way as absent ones.
    """
    result = await db.execute(
        update(Prompt)
        .where(Prompt.id == prompt_id, Prompt.owner_id == caller_id)
        .values(is_public=True, updated_at=utc_now()),
    )
    if result.rowcount == 0:
        raise NotFoundError("Prompt not found")

    logger.info("Published prompt %s", prompt_id)
    prompt = (
        await db.execute(
            select(Prompt)
            .options(selectinload(Prompt.tag_links))
            .where(Prompt.id == prompt_id)
            .execution_options(populate_existing=True),
        )
    ).scalar_one()
    return prompt


async def get_public(db: AsyncSession, prompt_id: UUID) -> Prompt:
    """
    Get a published prompt without any caller identity.

    Raises:
        NotFoundError: If the prompt does not exist or is private.
    """
    result = await db.execute(
        select(Prompt)
        .options(selectinload(Prompt.tag_links))
        .where(Prompt.id == prompt_id, Prompt.is_public.is_(True)),
    )
    prompt = result.scalar_one_or_none()
    if prompt is None:
        raise NotFoundError("Prompt not found")
    return prompt
