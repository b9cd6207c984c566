"""SQLAlchemy ORM models for NetDrive."""

from netdrive.models.base import Base
from netdrive.models.file_record import FileRecord
from netdrive.models.audit_log import AuditLog

__all__ = [
    "Base",
    "FileRecord",
    "AuditLog",
]
