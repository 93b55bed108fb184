"""Audit trail for workflow actions."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from django.db import transaction as db_transaction

from ..models import AuditEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditEvent:
    actor_id: int | None
    action: str
    resource_id: str
    from_state: str
    to_state: str
    timestamp: datetime
    actor_role: str = ""
    metadata: dict = field(default_factory=dict)


class AuditRecorder(Protocol):
    def record(self, event: AuditEvent) -> None: ...


class DatabaseAuditRecorder:
    """Persist audit events as AuditEntry rows.

    Each insert runs in its own savepoint so a failed write cannot break
    the caller's surrounding database transaction.
    """

    def record(self, event: AuditEvent) -> None:
        with db_transaction.atomic():
            AuditEntry.objects.create(
                actor_id=event.actor_id,
                actor_role=event.actor_role,
                action=event.action,
                resource_type="asset",
                resource_id=str(event.resource_id),
                from_state=event.from_state or "",
                to_state=event.to_state or "",
                timestamp=event.timestamp,
                metadata=event.metadata,
            )


def record_safely(recorder: AuditRecorder, event: AuditEvent) -> bool:
    """Record an event, logging instead of raising on failure.

    Returns True if the recorder accepted the event.
    """
    try:
        recorder.record(event)
    except Exception:
        logger.exception(
            "Failed to record audit event %s on asset %s by user %s",
            event.action,
            event.resource_id,
            event.actor_id,
        )
        return False
    return True


def audit_history(resource_id):
    """Audit entries for an asset record, newest first."""
    return AuditEntry.objects.filter(
        resource_type="asset", resource_id=str(resource_id)
    ).select_related("actor")
