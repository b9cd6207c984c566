"""Business logic services — singleton registry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from netdrive.config import settings

if TYPE_CHECKING:
    from netdrive.services.audit_trail import JsonAuditTrail, SqlAuditTrail
    from netdrive.services.file_service import FileService

logger = logging.getLogger(__name__)

_file_service: FileService | None = None
_audit_trail: JsonAuditTrail | SqlAuditTrail | None = None


async def init_services() -> None:
    """Build the stores for the configured backend and wire up the services."""
    global _file_service, _audit_trail

    from netdrive import database
    from netdrive.services.audit_trail import JsonAuditTrail, SqlAuditTrail
    from netdrive.services.blob_store import DatabaseBlobStore, DiskBlobStore
    from netdrive.services.file_service import FileService
    from netdrive.services.metadata_store import JsonMetadataStore, SqlMetadataStore

    if settings.uses_database:
        session_factory = database.configure(settings.database_url)
        await database.init_db()
        metadata = SqlMetadataStore(session_factory)
        blobs = DatabaseBlobStore()
        _audit_trail = SqlAuditTrail(session_factory)
    else:
        metadata = JsonMetadataStore(settings.metadata_file)
        blobs = DiskBlobStore(settings.upload_dir)
        _audit_trail = JsonAuditTrail(settings.audit_file, retention=settings.audit_retention)

    _file_service = FileService(metadata, blobs)
    logger.info("Storage backend: %s", settings.storage_backend)


async def shutdown_services() -> None:
    global _file_service, _audit_trail
    from netdrive import database

    _file_service = None
    _audit_trail = None
    await database.dispose()


def get_file_service() -> FileService:
    if _file_service is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _file_service


def get_audit_trail() -> JsonAuditTrail | SqlAuditTrail:
    if _audit_trail is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _audit_trail
