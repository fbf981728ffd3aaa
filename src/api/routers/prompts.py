"""Prompts CRUD endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import (
    get_async_session,
    get_caller_id,
    get_optional_caller_id,
    get_settings,
)
from core.config import Settings
from schemas.prompt import (
    MessageResponse,
    PromptCreate,
    PromptResponse,
    PromptUpdate,
    PromptUpdateAck,
)
from services import share_service
from services.prompt_service import PromptFilters, PromptService
from services.tag_service import get_or_create_tags

router = APIRouter(prefix="/prompts", tags=["prompts"])

prompt_service = PromptService()


@router.get("", response_model=list[PromptResponse])
async def list_prompts(
    tag: str | None = Query(default=None, description="Only prompts carrying this tag"),
    category: str | None = Query(
        default=None, description="Exact category; 'all' disables the filter",
    ),
    search: str | None = Query(
        default=None, description="Case-insensitive substring of title or content",
    ),
    public: bool = Query(default=False, description="Only public prompts"),
    caller_id: str | None = Depends(get_optional_caller_id),
    db: AsyncSession = Depends(get_async_session),
) -> list[PromptResponse]:
    """
    List prompts visible to the caller, newest first.

    Anonymous callers see public prompts; signed-in callers see their own
    prompts plus public ones unless `public=true`.
    """
    filters = PromptFilters(
        tag=tag,
        category=category,
        search_text=search,
        public_only=public,
    )
    prompts = await prompt_service.search(db, caller_id, filters)
    return [PromptResponse.model_validate(prompt) async for prompt in prompts]


@router.post("", response_model=PromptResponse, status_code=201)
async def create_prompt(
    data: PromptCreate,
    caller_id: str = Depends(get_caller_id),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> PromptResponse:
    """Create a new prompt owned by the caller and register its tags."""
    prompt = await prompt_service.create(db, caller_id, data, settings)
    await get_or_create_tags(db, data.tags)
    return PromptResponse.model_validate(prompt)


@router.get("/{prompt_id}", response_model=PromptResponse)
async def get_prompt(
    prompt_id: UUID,
    caller_id: str = Depends(get_caller_id),
    db: AsyncSession = Depends(get_async_session),
) -> PromptResponse:
    """Get a prompt the caller owns or that is public."""
    prompt = await prompt_service.get_by_id(db, caller_id, prompt_id)
    return PromptResponse.model_validate(prompt)


@router.put("/{prompt_id}", response_model=PromptUpdateAck)
@router.post("/{prompt_id}", response_model=PromptUpdateAck)
async def update_prompt(
    prompt_id: UUID,
    data: PromptUpdate,
    caller_id: str = Depends(get_caller_id),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> PromptUpdateAck:
    """
    Partially update a prompt owned by the caller.

    Only fields present in the body are changed. Returns 403 if the prompt is
    visible to the caller but owned by someone else, 404 if it is not visible.
    """
    prompt = await prompt_service.update(db, caller_id, prompt_id, data, settings)
    if data.tags:
        await get_or_create_tags(db, data.tags)
    return PromptUpdateAck(
        message="Prompt updated successfully",
        id=prompt.id,
        version=prompt.version,
        updated_at=prompt.updated_at,
    )


@router.delete("/{prompt_id}", response_model=MessageResponse)
async def delete_prompt(
    prompt_id: UUID,
    caller_id: str = Depends(get_caller_id),
    db: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    """Delete a prompt owned by the caller."""
    await prompt_service.delete(db, caller_id, prompt_id)
    return MessageResponse(message="Prompt deleted successfully")


@router.post("/{prompt_id}/share", response_model=MessageResponse)
async def share_prompt(
    prompt_id: UUID,
    caller_id: str = Depends(get_caller_id),
    db: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    """Make a prompt owned by the caller publicly readable."""
    await share_service.publish(db, caller_id, prompt_id)
    return MessageResponse(message="Prompt shared successfully")
