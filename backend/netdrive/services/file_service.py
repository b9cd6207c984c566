"""File operations — listing plus create/move/delete across metadata and blobs.

Blob and metadata changes are not one transaction:

* create writes the blob first, then the metadata. A failed metadata insert
  leaves the blob behind (logged, not rolled back).
* move and delete treat the blob phase as best-effort. A failure there is
  reported as a ``BlobInconsistencyWarning`` and the metadata change still
  happens.

Names are unique per directory across kinds: a file `docs` and a folder
`docs/` cannot coexist, because the disk tree could not hold both.

Folder move/delete touch only the folder's own record. Descendants keep
their old paths.
"""

from __future__ import annotations

import asyncio
import logging
import warnings
from datetime import datetime, timezone

from netdrive.errors import (
    BlobInconsistencyWarning,
    ConflictError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from netdrive.schemas.files import FileItem
from netdrive.utils.content import data_uri_mime_type, decode_content
from netdrive.utils.paths import (
    FILE,
    FOLDER,
    KINDS,
    SEP,
    is_within,
    item_path,
    normalize_directory,
    validate_kind,
    validate_name,
)

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _blob_warning(message: str) -> None:
    logger.warning("Blob/metadata divergence: %s", message)
    warnings.warn(message, BlobInconsistencyWarning, stacklevel=3)


class FileService:
    """Coordinates a metadata store and a blob store.

    Mutations hold ``_lock`` from the collision check through the metadata
    write, so two requests for the same path cannot interleave their blob
    writes.
    """

    def __init__(self, metadata, blobs):
        self.metadata = metadata
        self.blobs = blobs
        self._lock = asyncio.Lock()

    async def list_directory(self, path: str | None = "/") -> list[FileItem]:
        """Direct children of ``path``, folders first, then by name."""
        directory = normalize_directory(path)
        return await self.metadata.children(directory)

    async def get(self, item_id: str) -> FileItem:
        item = await self.metadata.find_by_id(item_id)
        if item is None:
            raise NotFoundError(f"Item not found: {item_id}")
        return item

    async def read_content(self, item_id: str) -> tuple[FileItem, bytes]:
        item = await self.get(item_id)
        if item.is_folder:
            raise ValidationError(f"{item.path} is a folder")
        return item, await self.blobs.read(item)

    async def _check_free(self, directory: str, name: str, item_id: str | None = None) -> None:
        """Reject a name already taken in ``directory`` by a file or a folder."""
        for kind in KINDS:
            existing = await self.metadata.find_by_path(item_path(directory, name, kind))
            if existing is not None and existing.id != item_id:
                raise ConflictError(f"An item named {name!r} already exists in {directory}")

    async def create(
        self,
        *,
        name: str | None,
        type: str | None,
        path: str | None,
        size: int | None = None,
        mime_type: str | None = None,
        content: str | None = None,
    ) -> FileItem:
        """Create a file or folder named ``name`` inside directory ``path``."""
        if not name or not type or not path:
            raise ValidationError("Missing required fields: name, type, path")
        name = validate_name(name)
        kind = validate_kind(type)
        directory = normalize_directory(path)
        new_path = item_path(directory, name, kind)
        if size is not None and size < 0:
            raise ValidationError(f"Size must not be negative: {size}")

        if kind == FOLDER:
            data_size = None
            content = None
        else:
            data_size = len(decode_content(content))
            mime_type = mime_type or data_uri_mime_type(content)

        async with self._lock:
            await self._check_free(directory, name)

            # Blob first: a crash here never leaves metadata pointing at nothing.
            if kind == FOLDER:
                await self.blobs.ensure_directory(new_path)
            else:
                await self.blobs.ensure_directory(directory)
                await self.blobs.write(new_path, content)

            item = FileItem(
                name=name,
                type=kind,
                size=(size if size is not None else data_size) if kind == FILE else None,
                last_modified=_now(),
                path=new_path,
                mime_type=mime_type,
                content=content,
            )
            try:
                created = await self.metadata.insert(item)
            except (StorageError, ConflictError):
                logger.error("Metadata insert failed after blob write at %s; blob left in place", new_path)
                raise
        logger.info("Created %s %s (%s)", kind, created.path, created.id)
        return created

    async def move(
        self,
        item_id: str | None,
        target_path: str | None,
        new_name: str | None = None,
    ) -> FileItem:
        """Move an item into ``target_path``, optionally renaming it."""
        if not item_id or not target_path:
            raise ValidationError("Missing required fields: itemId, targetPath")
        if not target_path.endswith(SEP):
            raise ValidationError(f"Target path must end with '{SEP}': {target_path}")
        directory = normalize_directory(target_path)
        name = validate_name(new_name) if new_name is not None else None

        async with self._lock:
            item = await self.get(item_id)
            name = name or item.name
            new_path = item_path(directory, name, item.type)

            if item.is_folder and is_within(directory, item.path):
                raise ValidationError(f"Cannot move {item.path} into itself")
            if new_path != item.path:
                await self._check_free(directory, name, item.id)

            if not item.is_folder and new_path != item.path:
                try:
                    await self.blobs.ensure_directory(directory)
                    await self.blobs.move(item.path, new_path)
                except StorageError as e:
                    _blob_warning(f"blob for {item.id} not moved {item.path} -> {new_path}: {e}")

            moved = await self.metadata.update_fields(
                item.id,
                {"name": name, "path": new_path, "last_modified": _now()},
            )
        logger.info("Moved %s %s -> %s", item.type, item.path, moved.path)
        return moved

    async def delete(self, item_id: str | None) -> FileItem:
        if not item_id:
            raise ValidationError("File ID is required")

        async with self._lock:
            item = await self.get(item_id)
            if not item.is_folder:
                try:
                    await self.blobs.delete(item.path)
                except StorageError as e:
                    _blob_warning(f"blob for {item.id} at {item.path} not removed: {e}")

            removed = await self.metadata.delete(item.id)
        logger.info("Deleted %s %s (%s)", removed.type, removed.path, removed.id)
        return removed
