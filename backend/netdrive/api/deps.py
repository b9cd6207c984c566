"""FastAPI dependency injection — audit recording for mutations."""

from __future__ import annotations

from fastapi import BackgroundTasks, Depends

from netdrive.config import settings
from netdrive.services import get_audit_trail
from netdrive.services.audit_trail import record_action


class AuditRecorder:
    """Queues audit entries to run after the response is sent.

    IP and MAC are the configured placeholders; they are not taken from the
    request.
    """

    def __init__(self, trail, enabled: bool = True):
        self._trail = trail
        self._enabled = enabled

    def record(self, background: BackgroundTasks, action: str, details: str) -> None:
        if not self._enabled:
            return
        background.add_task(
            record_action,
            self._trail,
            settings.audit_default_ip,
            settings.audit_default_mac,
            action,
            details,
        )


def get_audit_recorder(trail=Depends(get_audit_trail)) -> AuditRecorder:
    return AuditRecorder(trail, enabled=settings.audit_mutations)
