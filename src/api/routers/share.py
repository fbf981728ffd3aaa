"""Public read access to shared prompts."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session
from schemas.prompt import PromptResponse
from services import share_service

router = APIRouter(prefix="/share", tags=["share"])


@router.get("/{prompt_id}", response_model=PromptResponse)
async def get_shared_prompt(
    prompt_id: UUID,
    db: AsyncSession = Depends(get_async_session),
) -> PromptResponse:
    """Get a public prompt. No authentication required."""
    prompt = await share_service.get_public(db, prompt_id)
    return PromptResponse.model_validate(prompt)
