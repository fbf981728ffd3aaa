"""Cover image upload endpoints."""
from fastapi import APIRouter, Depends, File, Query, UploadFile

from api.dependencies import get_asset_service, get_caller_id
from schemas.asset import AssetResponse
from schemas.prompt import MessageResponse
from services.asset_service import (
    DEFAULT_LIST_LIMIT,
    MAX_LIST_LIMIT,
    AssetService,
    UploadedFile,
)
from services.exceptions import InputValidationError

router = APIRouter(prefix="/upload", tags=["upload"])


@router.post("", response_model=AssetResponse, status_code=201)
async def upload_file(
    file: UploadFile | None = File(default=None),
    image: UploadFile | None = File(default=None, description="Legacy field name for file"),
    caller_id: str = Depends(get_caller_id),
    asset_service: AssetService = Depends(get_asset_service),
) -> AssetResponse:
    """Upload an image into the caller's folder and return its public URL."""
    upload = file or image
    if upload is None:
        raise InputValidationError("No file provided")

    # Never buffer more than one byte past the limit
    if upload.size is not None:
        asset_service.check_size(upload.size)
    data = await upload.read(asset_service.settings.max_upload_bytes + 1)
    asset = await asset_service.upload(
        caller_id,
        UploadedFile(
            filename=upload.filename or "",
            content_type=upload.content_type or "",
            data=data,
        ),
    )
    return AssetResponse.model_validate(asset)


@router.get("", response_model=list[AssetResponse])
async def list_files(
    folder: str | None = Query(default=None, description="Defaults to the caller's folder"),
    limit: int = Query(default=DEFAULT_LIST_LIMIT, ge=1, le=MAX_LIST_LIMIT),
    caller_id: str = Depends(get_caller_id),
    asset_service: AssetService = Depends(get_asset_service),
) -> list[AssetResponse]:
    """List the caller's files, newest first."""
    assets = await asset_service.list_folder(caller_id, folder, limit)
    return [AssetResponse.model_validate(asset) for asset in assets]


@router.delete("", response_model=MessageResponse)
async def delete_file(
    path: str = Query(default="", description="Storage path returned by the upload"),
    caller_id: str = Depends(get_caller_id),
    asset_service: AssetService = Depends(get_asset_service),
) -> MessageResponse:
    """Delete a file from the caller's folder."""
    await asset_service.remove(caller_id, path)
    return MessageResponse(message="File deleted successfully")
