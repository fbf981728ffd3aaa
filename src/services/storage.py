"""
Object storage backends for uploaded cover images.

Backends only move bytes. Authorization (which paths a caller may touch) is
handled by AssetService before any backend method is called.
"""
import asyncio
import mimetypes
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from urllib.parse import quote


class StorageError(Exception):
    """Raised when a storage backend cannot complete an operation."""


@dataclass(frozen=True)
class StoredObject:
    """Metadata for an object held by a storage backend."""

    path: str
    size_bytes: int
    content_type: str
    created_at: datetime

    @property
    def name(self) -> str:
        """Last path segment."""
        return self.path.rsplit("/", 1)[-1]


class ObjectStorage(ABC):
    """Interface for a bucket-style object store keyed by slash-separated paths."""

    @abstractmethod
    async def put(self, path: str, data: bytes, content_type: str) -> StoredObject:
        """
        Store a new object. Existing objects are never overwritten.

        Raises:
            StorageError: If the object exists or the write fails.
        """
        ...

    @abstractmethod
    async def remove(self, path: str) -> None:
        """Remove an object. Removing a missing object is not an error."""
        ...

    @abstractmethod
    async def list_objects(self, folder: str, limit: int) -> list[StoredObject]:
        """List files directly inside folder, newest first, at most limit."""
        ...

    @abstractmethod
    def public_url(self, path: str) -> str:
        """URL at which the object is publicly readable."""
        ...


class LocalObjectStorage(ObjectStorage):
    """
    Filesystem-backed storage.

    Objects live under <root>/<bucket>/<path>. The app serves <root> read-only,
    so public URLs are <public_base_url>/<bucket>/<path>. File I/O runs in a
    worker thread to keep the event loop free.
    """

    def __init__(self, root: str | Path, bucket: str, public_base_url: str) -> None:
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")
        self._bucket_dir = (Path(root) / bucket).resolve()

    def _resolve(self, path: str) -> Path:
        """Map a storage path to a file, refusing anything outside the bucket."""
        target = (self._bucket_dir / path).resolve()
        if not target.is_relative_to(self._bucket_dir):
            raise StorageError(f"Path escapes bucket: {path}")
        return target

    async def put(self, path: str, data: bytes, content_type: str) -> StoredObject:  # noqa: D102
        target = self._resolve(path)

        def _write() -> StoredObject:
            target.parent.mkdir(parents=True, exist_ok=True)
            try:
                # "x" mode fails if the file exists
                with open(target, "xb") as f:
                    f.write(data)
            except FileExistsError as e:
                raise StorageError(f"Object already exists: {path}") from e
            stat = target.stat()
            return StoredObject(
                path=path,
                size_bytes=stat.st_size,
                content_type=content_type,
                created_at=datetime.fromtimestamp(stat.st_mtime, UTC),
            )

        return await asyncio.to_thread(_write)

    async def remove(self, path: str) -> None:  # noqa: D102
        target = self._resolve(path)
        await asyncio.to_thread(target.unlink, missing_ok=True)

    async def list_objects(self, folder: str, limit: int) -> list[StoredObject]:  # noqa: D102
        directory = self._resolve(folder)
        prefix = folder.strip("/")

        def _scan() -> list[StoredObject]:
            if not directory.is_dir():
                return []
            objects = []
            for entry in directory.iterdir():
                if not entry.is_file():
                    continue
                stat = entry.stat()
                content_type, _ = mimetypes.guess_type(entry.name)
                objects.append(
                    StoredObject(
                        path=f"{prefix}/{entry.name}" if prefix else entry.name,
                        size_bytes=stat.st_size,
                        content_type=content_type or "application/octet-stream",
                        created_at=datetime.fromtimestamp(stat.st_mtime, UTC),
                    ),
                )
            objects.sort(key=lambda obj: (obj.created_at, obj.path), reverse=True)
            return objects[:limit]

        return await asyncio.to_thread(_scan)

    def public_url(self, path: str) -> str:  # noqa: D102
        return f"{self.public_base_url}/{self.bucket}/{quote(path)}"
