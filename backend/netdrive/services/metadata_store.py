"""Item metadata stores — JSON-file and relational variants.

Both stores expose the same async interface:

    list() / children(directory) / find_by_id(id)
    insert(item) / update_fields(id, patch) / delete(id)

and both enforce unique ids and unique paths (no two siblings with the same
name and kind).
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from collections import defaultdict
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from netdrive.errors import (
    ConflictError,
    NotFoundError,
    StorageReadError,
    StorageWriteError,
    ValidationError,
)
from netdrive.models.file_record import FileRecord
from netdrive.schemas.files import FileItem
from netdrive.utils.paths import is_direct_child, parent_of

logger = logging.getLogger(__name__)

# Fields update_fields() may touch. id and type are immutable.
MUTABLE_FIELDS = frozenset({"name", "size", "path", "mime_type", "content", "last_modified"})


def new_item_id() -> str:
    return uuid.uuid4().hex


def sort_key(item: FileItem) -> tuple[int, str]:
    """Folders before files, then by name."""
    return (0 if item.is_folder else 1, item.name)


def _check_patch(patch: dict[str, Any]) -> None:
    invalid = set(patch) - MUTABLE_FIELDS
    if invalid:
        raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(invalid))}")


class JsonMetadataStore:
    """Whole collection in one JSON array, owned by this instance.

    The file is loaded once; every mutation rewrites the full snapshot.
    All read-modify-write cycles run under one lock, so concurrent writers
    cannot drop each other's changes. A ``parent_path -> ids`` index is kept
    in step with the snapshot so listings avoid a full scan.
    """

    def __init__(self, metadata_file: str | Path):
        self._file = Path(metadata_file)
        self._lock = asyncio.Lock()
        self._items: dict[str, FileItem] | None = None
        self._by_parent: dict[str, set[str]] = defaultdict(set)
        self._by_path: dict[str, str] = {}

    # -- reads --

    async def list(self) -> list[FileItem]:
        async with self._lock:
            items = await self._load()
            return sorted(items.values(), key=sort_key)

    async def children(self, directory: str) -> list[FileItem]:
        async with self._lock:
            items = await self._load()
            candidates = (items[i] for i in self._by_parent.get(directory, ()))
            return sorted(
                (
                    item for item in candidates
                    if is_direct_child(item.path, item.name, item.type, directory)
                ),
                key=sort_key,
            )

    async def find_by_id(self, item_id: str) -> FileItem | None:
        async with self._lock:
            items = await self._load()
            return items.get(item_id)

    async def find_by_path(self, path: str) -> FileItem | None:
        async with self._lock:
            items = await self._load()
            item_id = self._by_path.get(path)
            return items[item_id] if item_id else None

    # -- writes --

    async def insert(self, item: FileItem) -> FileItem:
        async with self._lock:
            items = await self._load()
            if not item.id:
                item = item.model_copy(update={"id": new_item_id()})
            if item.id in items:
                raise ConflictError(f"Item id already exists: {item.id}")
            if item.path in self._by_path:
                raise ConflictError(f"An item already exists at {item.path}")

            await self._save({**items, item.id: item})
            self._index(item)
            return item

    async def update_fields(self, item_id: str, patch: dict[str, Any]) -> FileItem:
        _check_patch(patch)
        async with self._lock:
            items = await self._load()
            current = items.get(item_id)
            if current is None:
                raise NotFoundError(f"Item not found: {item_id}")
            new_path = patch.get("path", current.path)
            if new_path != current.path and self._by_path.get(new_path, item_id) != item_id:
                raise ConflictError(f"An item already exists at {new_path}")

            updated = current.model_copy(update=patch)
            await self._save({**items, item_id: updated})
            self._unindex(current)
            self._index(updated)
            return updated

    async def delete(self, item_id: str) -> FileItem:
        async with self._lock:
            items = await self._load()
            removed = items.get(item_id)
            if removed is None:
                raise NotFoundError(f"Item not found: {item_id}")

            remaining = {k: v for k, v in items.items() if k != item_id}
            await self._save(remaining)
            self._unindex(removed)
            return removed

    # -- persistence --

    async def _load(self) -> dict[str, FileItem]:
        """Snapshot, read from disk on first use. Caller holds the lock."""
        if self._items is not None:
            return self._items

        try:
            async with aiofiles.open(self._file, "r", encoding="utf-8") as f:
                raw = await f.read()
        except FileNotFoundError:
            logger.info("No metadata file at %s — starting empty", self._file)
            raw = "[]"
        except OSError as e:
            raise StorageReadError(f"Cannot read metadata file: {e}")

        try:
            records = [FileItem.model_validate(r) for r in json.loads(raw or "[]")]
        except (json.JSONDecodeError, TypeError, PydanticValidationError) as e:
            raise StorageReadError(f"Corrupt metadata file {self._file}: {e}")

        self._items = {}
        for record in records:
            self._items[record.id] = record
            self._index(record)
        logger.info("Loaded %d items from %s", len(self._items), self._file)
        return self._items

    async def _save(self, items: dict[str, FileItem]) -> None:
        """Write the full snapshot atomically, then adopt it in memory."""
        payload = [item.model_dump(mode="json") for item in items.values()]
        tmp = self._file.with_suffix(self._file.suffix + ".tmp")
        try:
            await aiofiles.os.makedirs(self._file.parent, exist_ok=True)
            async with aiofiles.open(tmp, "w", encoding="utf-8") as f:
                await f.write(json.dumps(payload, indent=2))
            await aiofiles.os.replace(tmp, self._file)
        except (OSError, TypeError, ValueError) as e:
            raise StorageWriteError(f"Cannot write metadata file: {e}")
        self._items = items

    def _index(self, item: FileItem) -> None:
        self._by_parent[parent_of(item.path)].add(item.id)
        self._by_path[item.path] = item.id

    def _unindex(self, item: FileItem) -> None:
        parent = parent_of(item.path)
        self._by_parent[parent].discard(item.id)
        if not self._by_parent[parent]:
            del self._by_parent[parent]
        if self._by_path.get(item.path) == item.id:
            del self._by_path[item.path]


class SqlMetadataStore:
    """Items as rows of the ``files`` table; one session per operation."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def list(self) -> list[FileItem]:
        stmt = select(FileRecord).order_by(FileRecord.type.desc(), FileRecord.name.asc())
        rows = await self._fetch(stmt)
        return [FileItem.model_validate(r) for r in rows]

    async def children(self, directory: str) -> list[FileItem]:
        stmt = (
            select(FileRecord)
            .where(FileRecord.parent_path == directory)
            .order_by(FileRecord.type.desc(), FileRecord.name.asc())
        )
        rows = await self._fetch(stmt)
        return [
            FileItem.model_validate(r) for r in rows
            if is_direct_child(r.path, r.name, r.type, directory)
        ]

    async def find_by_id(self, item_id: str) -> FileItem | None:
        try:
            async with self._session_factory() as db:
                row = await db.get(FileRecord, item_id)
        except SQLAlchemyError as e:
            raise StorageReadError(f"Database read failed: {e}")
        return FileItem.model_validate(row) if row else None

    async def find_by_path(self, path: str) -> FileItem | None:
        rows = await self._fetch(select(FileRecord).where(FileRecord.path == path))
        return FileItem.model_validate(rows[0]) if rows else None

    async def insert(self, item: FileItem) -> FileItem:
        values = item.model_dump()
        values["id"] = values["id"] or new_item_id()
        record = FileRecord(parent_path=parent_of(item.path), **values)
        try:
            async with self._session_factory() as db:
                db.add(record)
                await db.commit()
                await db.refresh(record)
        except IntegrityError:
            raise ConflictError(f"An item already exists at {item.path}")
        except SQLAlchemyError as e:
            raise StorageWriteError(f"Database write failed: {e}")
        return FileItem.model_validate(record)

    async def update_fields(self, item_id: str, patch: dict[str, Any]) -> FileItem:
        _check_patch(patch)
        try:
            async with self._session_factory() as db:
                record = await db.get(FileRecord, item_id)
                if record is None:
                    raise NotFoundError(f"Item not found: {item_id}")
                for field, value in patch.items():
                    setattr(record, field, value)
                if "path" in patch:
                    record.parent_path = parent_of(patch["path"])
                await db.commit()
                await db.refresh(record)
                return FileItem.model_validate(record)
        except IntegrityError:
            raise ConflictError(f"An item already exists at {patch.get('path')}")
        except SQLAlchemyError as e:
            raise StorageWriteError(f"Database write failed: {e}")

    async def delete(self, item_id: str) -> FileItem:
        try:
            async with self._session_factory() as db:
                record = await db.get(FileRecord, item_id)
                if record is None:
                    raise NotFoundError(f"Item not found: {item_id}")
                removed = FileItem.model_validate(record)
                await db.delete(record)
                await db.commit()
                return removed
        except SQLAlchemyError as e:
            raise StorageWriteError(f"Database write failed: {e}")

    async def _fetch(self, stmt) -> list[FileRecord]:
        try:
            async with self._session_factory() as db:
                result = await db.execute(stmt)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StorageReadError(f"Database read failed: {e}")
