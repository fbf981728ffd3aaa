"""FastAPI dependencies for injection."""
from fastapi import Depends

from core.auth import get_caller_id, get_optional_caller_id
from core.config import Settings, get_settings
from db.session import get_async_session
from services.asset_service import AssetService
from services.storage import LocalObjectStorage, ObjectStorage


def get_object_storage(settings: Settings = Depends(get_settings)) -> ObjectStorage:
    """Storage handle for the current request."""
    return LocalObjectStorage(
        root=settings.storage_root,
        bucket=settings.storage_bucket,
        public_base_url=settings.storage_public_url,
    )


def get_asset_service(
    storage: ObjectStorage = Depends(get_object_storage),
    settings: Settings = Depends(get_settings),
) -> AssetService:
    """Asset service bound to the request's storage handle."""
    return AssetService(storage, settings)


__all__ = [
    "get_asset_service",
    "get_async_session",
    "get_caller_id",
    "get_object_storage",
    "get_optional_caller_id",
    "get_settings",
]
