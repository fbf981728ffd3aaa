"""
Service layer for uploaded cover images (assets).

Every asset lives under "<ownerId>/". Callers may only write, delete or list
inside their own folder; all path checks run before the storage backend is
touched.
"""
import logging
import mimetypes
import secrets
from dataclasses import dataclass
from datetime import datetime

from core.config import Settings
from schemas.validators import sanitize_filename
from services.exceptions import ForbiddenError, InputValidationError, StorageBackendError
from services.storage import ObjectStorage, StorageError, StoredObject

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 50
MAX_LIST_LIMIT = 1000

# Number of random bytes in the generated file name (hex-encoded to twice as many chars)
DISCRIMINATOR_BYTES = 16


@dataclass(frozen=True)
class UploadedFile:
    """An incoming file as received by the HTTP layer."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size_bytes(self) -> int:
        """Size of the payload in bytes."""
        return len(self.data)


@dataclass(frozen=True)
class Asset:
    """A stored file together with its public URL."""

    path: str
    public_url: str
    name: str
    size_bytes: int
    content_type: str
    created_at: datetime


def _extension_for(sanitized_name: str, content_type: str) -> str:
    """
    Pick the file extension for a stored object.

    The extension from the uploaded name is kept when it agrees with the
    content type, otherwise the canonical extension of the content type is used.
    """
    _, dot, ext = sanitized_name.rpartition(".")
    if dot and ext:
        guessed, _ = mimetypes.guess_type(f"file.{ext}")
        if guessed == content_type:
            return ext.lower()
    derived = mimetypes.guess_extension(content_type) or ".bin"
    return derived.lstrip(".")


def _check_path_shape(path: str) -> None:
    """
    Reject paths that could leave the folder they name.

    Raises:
        ForbiddenError: On traversal segments, empty segments, backslashes or
            an absolute path.
    """
    if path.startswith("/") or "\\" in path:
        raise ForbiddenError("Invalid storage path")
    if any(segment in ("", ".", "..") for segment in path.split("/")):
        raise ForbiddenError("Invalid storage path")


class AssetService:
    """Authorize and broker asset operations for one caller at a time."""

    def __init__(self, storage: ObjectStorage, settings: Settings) -> None:
        self.storage = storage
        self.settings = settings

    def _owner_folder(self, owner_id: str) -> str:
        # An owner id containing "/" would let the caller write into another folder
        if not owner_id or "/" in owner_id or "\\" in owner_id:
            raise ForbiddenError("Caller identity cannot own storage paths")
        return owner_id

    def _to_asset(self, stored: StoredObject) -> Asset:
        return Asset(
            path=stored.path,
            public_url=self.storage.public_url(stored.path),
            name=stored.name,
            size_bytes=stored.size_bytes,
            content_type=stored.content_type,
            created_at=stored.created_at,
        )

    def check_size(self, size_bytes: int) -> None:
        """
        Reject payloads above the configured upload limit.

        Raises:
            InputValidationError: If size_bytes exceeds max_upload_bytes.
        """
        if size_bytes > self.settings.max_upload_bytes:
            limit_mb = self.settings.max_upload_bytes // (1024 * 1024)
            raise InputValidationError(f"File too large. Maximum size is {limit_mb}MB")

    async def upload(self, owner_id: str, file: UploadedFile) -> Asset:
        """
        Store an image under the caller's folder.

        Args:
            owner_id: Caller id; the object is stored under "<owner_id>/".
            file: The uploaded file.

        Returns:
            The stored asset with its public URL.

        Raises:
            InputValidationError: If the content type is not allowed or the file
                is empty or too large.
            ForbiddenError: If the caller id cannot be used as a folder name.
            StorageBackendError: If the storage backend fails.
        """
        folder = self._owner_folder(owner_id)
        content_type = (file.content_type or "").lower()
        allowed = self.settings.allowed_upload_types
        if content_type not in allowed:
            raise InputValidationError(
                f"Invalid file type. Allowed types: {', '.join(sorted(allowed))}",
            )
        if file.size_bytes == 0:
            raise InputValidationError("File is empty")
        self.check_size(file.size_bytes)

        ext = _extension_for(sanitize_filename(file.filename or ""), content_type)
        path = f"{folder}/{secrets.token_hex(DISCRIMINATOR_BYTES)}.{ext}"

        try:
            stored = await self.storage.put(path, file.data, content_type)
        except (StorageError, OSError) as e:
            logger.exception("Storage upload failed for %s", path)
            raise StorageBackendError("Failed to upload file") from e

        logger.info("Uploaded asset %s (%d bytes)", path, stored.size_bytes)
        return self._to_asset(stored)

    async def remove(self, owner_id: str, path: str) -> None:
        """
        Delete an asset from the caller's folder.

        Removing a file that does not exist in the caller's folder succeeds.

        Raises:
            InputValidationError: If path is empty.
            ForbiddenError: If path is malformed or outside the caller's folder.
            StorageBackendError: If the storage backend fails.
        """
        if not path:
            raise InputValidationError("File path is required")
        folder = self._owner_folder(owner_id)
        _check_path_shape(path)
        if not path.startswith(f"{folder}/"):
            logger.warning("Caller %s denied delete of %s", owner_id, path)
            raise ForbiddenError("You can only delete your own files")

        try:
            await self.storage.remove(path)
        except (StorageError, OSError) as e:
            logger.exception("Storage delete failed for %s", path)
            raise StorageBackendError("Failed to delete file") from e

        logger.info("Deleted asset %s", path)

    async def list_folder(
        self,
        owner_id: str,
        folder: str | None = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> list[Asset]:
        """
        List files in the caller's folder (or a sub-folder of it), newest first.

        Args:
            owner_id: Caller id.
            folder: Folder to list; defaults to the caller's own folder.
            limit: Maximum number of files, 1 to 1000.

        Raises:
            InputValidationError: If limit is out of range.
            ForbiddenError: If folder is malformed or outside the caller's folder.
            StorageBackendError: If the storage backend fails.
        """
        if not 1 <= limit <= MAX_LIST_LIMIT:
            raise InputValidationError(f"Limit must be between 1 and {MAX_LIST_LIMIT}")
        own_folder = self._owner_folder(owner_id)
        folder = (folder or own_folder).rstrip("/")
        _check_path_shape(folder)
        if folder != own_folder and not folder.startswith(f"{own_folder}/"):
            logger.warning("Caller %s denied listing of %s", owner_id, folder)
            raise ForbiddenError("You can only list your own files")

        try:
            objects = await self.storage.list_objects(folder, limit)
        except (StorageError, OSError) as e:
            logger.exception("Storage listing failed for %s", folder)
            raise StorageBackendError("Failed to list files") from e

        return [self._to_asset(obj) for obj in objects]
