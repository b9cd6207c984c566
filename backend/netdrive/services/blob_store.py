"""Blob storage — raw file bytes, kept apart from item metadata."""

from __future__ import annotations

import logging
from pathlib import Path

import aiofiles
import aiofiles.os

from netdrive.errors import StorageReadError, StorageWriteError
from netdrive.schemas.files import FileItem
from netdrive.utils.content import decode_content
from netdrive.utils.paths import SEP

logger = logging.getLogger(__name__)


class DiskBlobStore:
    """Directory tree under ``root`` mirroring the logical item paths."""

    def __init__(self, root: str | Path):
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, logical_path: str) -> Path:
        """Map ``/a/b.txt`` to ``<root>/a/b.txt``, refusing to leave the root."""
        relative = logical_path.strip(SEP)
        target = (self._root / relative).resolve() if relative else self._root
        if target != self._root and self._root not in target.parents:
            raise StorageWriteError(f"Path escapes storage root: {logical_path}")
        return target

    async def ensure_directory(self, directory: str) -> None:
        """Create the backing directory. Existing directories are fine."""
        target = self.resolve(directory)
        try:
            await aiofiles.os.makedirs(target, exist_ok=True)
        except OSError as e:
            raise StorageWriteError(f"Cannot create directory {directory}: {e}")

    async def write(self, path: str, content: str | None) -> int:
        """Write decoded ``content`` to ``path``. Returns bytes written."""
        data = decode_content(content)
        target = self.resolve(path)
        try:
            async with aiofiles.open(target, "wb") as f:
                await f.write(data)
        except OSError as e:
            raise StorageWriteError(f"Cannot write {path}: {e}")
        logger.debug("Wrote %d bytes to %s", len(data), target)
        return len(data)

    async def read(self, item: FileItem) -> bytes:
        target = self.resolve(item.path)
        try:
            async with aiofiles.open(target, "rb") as f:
                return await f.read()
        except OSError as e:
            raise StorageReadError(f"Cannot read {item.path}: {e}")

    async def move(self, old_path: str, new_path: str) -> None:
        source = self.resolve(old_path)
        target = self.resolve(new_path)
        try:
            await aiofiles.os.makedirs(target.parent, exist_ok=True)
            await aiofiles.os.rename(source, target)
        except OSError as e:
            raise StorageWriteError(f"Cannot move {old_path} -> {new_path}: {e}")

    async def delete(self, path: str) -> None:
        """Unlink the blob at ``path``. A missing blob is not an error."""
        target = self.resolve(path)
        try:
            await aiofiles.os.remove(target)
        except FileNotFoundError:
            logger.debug("Blob already absent: %s", target)
        except OSError as e:
            raise StorageWriteError(f"Cannot delete {path}: {e}")


class DatabaseBlobStore:
    """Bytes live in the ``files.content`` column next to the metadata.

    Directory, move and delete operations have nothing to do: the metadata
    store already carries the payload.
    """

    async def ensure_directory(self, directory: str) -> None:
        return None

    async def write(self, path: str, content: str | None) -> int:
        return len(decode_content(content))

    async def read(self, item: FileItem) -> bytes:
        return decode_content(item.content)

    async def move(self, old_path: str, new_path: str) -> None:
        return None

    async def delete(self, path: str) -> None:
        return None
