"""Audit trail routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from netdrive.config import settings
from netdrive.errors import ValidationError
from netdrive.schemas.audit import AuditEntry, AuditEntryCreate
from netdrive.services import get_audit_trail

router = APIRouter()


@router.get("", response_model=list[AuditEntry])
async def list_audit_entries(trail=Depends(get_audit_trail)):
    """Most recent entries, newest first."""
    return await trail.recent(settings.audit_read_limit)


@router.post("", response_model=AuditEntry)
async def create_audit_entry(body: AuditEntryCreate, trail=Depends(get_audit_trail)):
    if not body.action:
        raise ValidationError("Missing required field: action")
    return await trail.append(
        ip=body.ip or settings.audit_default_ip,
        mac=body.mac or settings.audit_default_mac,
        action=body.action,
        details=body.details or "",
    )
