"""Audit trail — append-only, newest-first log of user actions."""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

import aiofiles
import aiofiles.os
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from netdrive.errors import StorageReadError, StorageWriteError
from netdrive.models.audit_log import AuditLog
from netdrive.schemas.audit import AuditEntry

logger = logging.getLogger(__name__)

DEFAULT_RETENTION = 1000


class JsonAuditTrail:
    """Audit entries in one JSON array, capped at ``retention`` entries."""

    def __init__(self, audit_file: str | Path, retention: int = DEFAULT_RETENTION):
        self._file = Path(audit_file)
        self._retention = retention
        self._lock = asyncio.Lock()
        self._entries: list[AuditEntry] | None = None

    async def append(self, ip: str, mac: str, action: str, details: str) -> AuditEntry:
        entry = AuditEntry(
            id=uuid.uuid4().hex,
            timestamp=datetime.now(timezone.utc),
            ip=ip,
            mac=mac,
            action=action,
            details=details,
        )
        async with self._lock:
            entries = await self._load()
            await self._save([entry, *entries][: self._retention])
        return entry

    async def recent(self, limit: int = 100) -> list[AuditEntry]:
        async with self._lock:
            entries = await self._load()
            return entries[:limit]

    async def _load(self) -> list[AuditEntry]:
        if self._entries is not None:
            return self._entries
        try:
            async with aiofiles.open(self._file, "r", encoding="utf-8") as f:
                raw = await f.read()
            self._entries = [AuditEntry.model_validate(e) for e in json.loads(raw or "[]")]
        except FileNotFoundError:
            self._entries = []
        except OSError as e:
            raise StorageReadError(f"Cannot read audit log: {e}")
        except (json.JSONDecodeError, TypeError, PydanticValidationError) as e:
            raise StorageReadError(f"Corrupt audit log {self._file}: {e}")
        return self._entries

    async def _save(self, entries: list[AuditEntry]) -> None:
        payload = [e.model_dump(mode="json") for e in entries]
        tmp = self._file.with_suffix(self._file.suffix + ".tmp")
        try:
            await aiofiles.os.makedirs(self._file.parent, exist_ok=True)
            async with aiofiles.open(tmp, "w", encoding="utf-8") as f:
                await f.write(json.dumps(payload, indent=2))
            await aiofiles.os.replace(tmp, self._file)
        except OSError as e:
            raise StorageWriteError(f"Cannot write audit log: {e}")
        self._entries = entries


class SqlAuditTrail:
    """Audit entries in the ``audit_logs`` table. Unbounded; reads are capped."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def append(self, ip: str, mac: str, action: str, details: str) -> AuditEntry:
        record = AuditLog(
            ip=ip,
            mac=mac,
            action=action,
            details=details,
            timestamp=datetime.now(timezone.utc).replace(tzinfo=None),
        )
        try:
            async with self._session_factory() as db:
                db.add(record)
                await db.commit()
                await db.refresh(record)
        except SQLAlchemyError as e:
            raise StorageWriteError(f"Cannot write audit log: {e}")
        return _to_entry(record)

    async def recent(self, limit: int = 100) -> list[AuditEntry]:
        stmt = (
            select(AuditLog)
            .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
            .limit(limit)
        )
        try:
            async with self._session_factory() as db:
                result = await db.execute(stmt)
                return [_to_entry(r) for r in result.scalars().all()]
        except SQLAlchemyError as e:
            raise StorageReadError(f"Cannot read audit log: {e}")


def _to_entry(record: AuditLog) -> AuditEntry:
    return AuditEntry(
        id=str(record.id),
        timestamp=record.timestamp,
        ip=record.ip,
        mac=record.mac,
        action=record.action,
        details=record.details,
    )


async def record_action(trail, ip: str, mac: str, action: str, details: str) -> None:
    """Fire-and-forget append: failures are logged, never raised."""
    try:
        await trail.append(ip, mac, action, details)
    except Exception as e:
        logger.warning("Audit append failed (%s: %s): %s", action, details, e)
