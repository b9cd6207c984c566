"""Audit trail schemas."""

from datetime import datetime, timezone

from pydantic import BaseModel, field_validator


class AuditEntry(BaseModel):
    """One recorded action, newest entries first when listed."""
    id: str
    timestamp: datetime
    ip: str
    mac: str
    action: str
    details: str

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class AuditEntryCreate(BaseModel):
    ip: str | None = None
    mac: str | None = None
    action: str | None = None
    details: str | None = None
