"""Tag registry endpoints."""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session
from schemas.tag import TagCreate, TagName, TagResponse
from services.tag_service import get_or_create_tag, list_tag_names

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("", response_model=list[TagName])
async def list_tags(
    db: AsyncSession = Depends(get_async_session),
) -> list[TagName]:
    """Get all registered tag names, sorted alphabetically."""
    names = await list_tag_names(db)
    return [TagName(name=name) for name in names]


@router.post(
    "",
    response_model=TagResponse,
    status_code=status.HTTP_201_CREATED,
    responses={200: {"model": TagResponse, "description": "Tag already existed"}},
)
async def create_tag(
    data: TagCreate,
    response: Response,
    db: AsyncSession = Depends(get_async_session),
) -> TagResponse:
    """
    Register a tag name.

    Returns 201 when the tag is new and 200 when it already existed; the
    response body is the tag record in both cases.
    """
    tag, created = await get_or_create_tag(db, data.name)
    if not created:
        response.status_code = status.HTTP_200_OK
    return TagResponse.model_validate(tag)
