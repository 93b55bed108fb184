"""Asset approval state machine.

Records move through the following graph::

    pending --approve (approver)--> approved
    pending --approve (approver)--> pending_ministry_review   [ministry policy]
    pending --reject (approver)--> rejected
    pending_ministry_review --approve (ministry admin)--> approved
    pending_ministry_review --reject (ministry admin)--> rejected
    rejected --resubmit (original uploader)--> pending

Every request is checked in a fixed order: the record must exist, the
actor must be allowed to act on it, the record must be in a state the
action applies to, and the payload must be valid. The write is then made
through the gateway's compare-and-set so a racing request that read the
same prior status loses with ConflictError.
"""

import logging
from dataclasses import dataclass

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import F
from django.utils import timezone

from ..exceptions import (
    InvalidTransition,
    TransitionError,
    Unauthorized,
    ValidationError,
)
from ..models import AssetRecord
from .audit import AuditEvent, DatabaseAuditRecorder, record_safely
from .categories import EDITABLE_FIELDS, clean_record_changes
from .gateway import DjangoRecordGateway
from .permissions import ROLE_APPROVER, ROLE_MINISTRY_ADMIN

logger = logging.getLogger(__name__)

ACTION_APPROVE = "approve"
ACTION_REJECT = "reject"
ACTION_RESUBMIT = "resubmit"

ACTIONS = (ACTION_APPROVE, ACTION_REJECT, ACTION_RESUBMIT)

# action -> {role: status the role may act from}
ROLE_TRANSITIONS = {
    ACTION_APPROVE: {
        ROLE_APPROVER: AssetRecord.STATUS_PENDING,
        ROLE_MINISTRY_ADMIN: AssetRecord.STATUS_MINISTRY_REVIEW,
    },
    ACTION_REJECT: {
        ROLE_APPROVER: AssetRecord.STATUS_PENDING,
        ROLE_MINISTRY_ADMIN: AssetRecord.STATUS_MINISTRY_REVIEW,
    },
}

REJECTION_LEVELS = {
    ROLE_APPROVER: "approver",
    ROLE_MINISTRY_ADMIN: "ministry-admin",
}


@dataclass(frozen=True)
class BulkResult:
    """Outcome of one record in a bulk approval."""

    id: object
    success: bool
    error: TransitionError | None = None
    record: AssetRecord | None = None

    def as_dict(self) -> dict:
        data = {"id": self.id, "success": self.success}
        if self.error is not None:
            data["error"] = self.error.code
            data["message"] = self.error.message
        return data


def _normalise_id(record_id):
    """Coerce an id to the primary key type so "7" and 7 match.

    Values that are not valid keys are returned unchanged; the gateway
    reports them as NotFound.
    """
    try:
        return AssetRecord._meta.pk.to_python(record_id)
    except DjangoValidationError:
        return record_id


class ApprovalStateMachine:
    """Validate and apply workflow transitions to asset records.

    Collaborators are injected so the machine can run against any
    gateway or audit recorder; by default it uses the Django ORM.
    ``review_policy`` answers whether a ministry requires a second,
    ministry-level review after first-tier approval.
    """

    def __init__(
        self, gateway=None, auditor=None, review_policy=None, clock=None
    ):
        self.gateway = gateway or DjangoRecordGateway()
        self.auditor = auditor or DatabaseAuditRecorder()
        self.review_policy = (
            review_policy or self.gateway.ministry_requires_review
        )
        self.clock = clock or timezone.now

    def apply(
        self,
        record_id,
        actor_id,
        actor_role: str,
        action: str,
        payload: dict | None = None,
        actor_ministry_id=None,
    ) -> AssetRecord:
        """Apply ``action`` to a record on behalf of an actor.

        Returns the updated record. Raises a TransitionError subclass
        if the request is refused. ``actor_ministry_id``, when given,
        limits reviewers to records of their own ministry.
        """
        try:
            return self._apply(
                record_id,
                actor_id,
                actor_role,
                action,
                payload or {},
                actor_ministry_id,
            )
        except TransitionError as exc:
            logger.info(
                "Refused %s on asset %s by user %s (%s): %s",
                action,
                record_id,
                actor_id,
                actor_role,
                exc.code,
            )
            raise

    def bulk_approve(
        self, record_ids, actor_id, actor_role: str, actor_ministry_id=None
    ) -> list[BulkResult]:
        """Approve each record independently.

        A failure on one record never stops the others; the result holds
        one entry per distinct id, in request order.
        """
        if actor_role != ROLE_APPROVER:
            raise Unauthorized("Only agency approvers can bulk approve.")

        ids = list(dict.fromkeys(_normalise_id(i) for i in record_ids))
        limit = getattr(settings, "BULK_APPROVE_MAX_RECORDS", 200)
        if len(ids) > limit:
            raise ValidationError(
                fields={
                    "ids": f"A batch can contain at most {limit} records."
                }
            )

        results = []
        for record_id in ids:
            try:
                record = self.apply(
                    record_id,
                    actor_id,
                    actor_role,
                    ACTION_APPROVE,
                    actor_ministry_id=actor_ministry_id,
                )
            except TransitionError as exc:
                results.append(
                    BulkResult(id=record_id, success=False, error=exc)
                )
            else:
                results.append(
                    BulkResult(id=record_id, success=True, record=record)
                )

        succeeded = sum(1 for r in results if r.success)
        logger.info(
            "Bulk approve by user %s: %d of %d succeeded",
            actor_id,
            succeeded,
            len(results),
        )
        return results

    def _apply(
        self,
        record_id,
        actor_id,
        actor_role,
        action,
        payload,
        actor_ministry_id,
    ):
        if action not in ACTIONS:
            raise ValidationError(
                fields={"action": f"Unknown action '{action}'."}
            )

        record = self.gateway.get_by_id(record_id)
        from_status = record.status

        if action == ACTION_RESUBMIT:
            changes = self._resubmit_changes(record, actor_id, payload)
        else:
            self._authorise_review(
                record, actor_role, action, actor_ministry_id
            )
            if action == ACTION_APPROVE:
                changes = self._approve_changes(record, actor_id, actor_role)
            else:
                changes = self._reject_changes(actor_id, actor_role, payload)

        to_status = changes["status"]
        if not record.can_transition_to(to_status):
            raise InvalidTransition(
                f"Cannot move a {record.get_status_display().lower()} "
                f"record to '{to_status}'."
            )

        updated = self.gateway.compare_and_set(
            record.pk, from_status, changes
        )

        logger.info(
            "Asset %s %s by user %s (%s): %s -> %s",
            updated.asset_code,
            action,
            actor_id,
            actor_role,
            from_status,
            to_status,
        )
        record_safely(
            self.auditor,
            AuditEvent(
                actor_id=actor_id,
                actor_role=actor_role,
                action=action,
                resource_id=str(record.pk),
                from_state=from_status,
                to_state=to_status,
                timestamp=self.clock(),
                metadata=self._audit_metadata(action, changes),
            ),
        )
        return updated

    def _authorise_review(
        self, record, actor_role, action, actor_ministry_id
    ):
        allowed = ROLE_TRANSITIONS[action]
        if actor_role not in allowed:
            raise Unauthorized(f"Your role cannot {action} asset records.")
        if (
            actor_ministry_id is not None
            and record.ministry_id != actor_ministry_id
        ):
            raise Unauthorized(
                "You can only review assets belonging to your ministry."
            )
        if record.status == allowed[actor_role]:
            return
        if record.status in allowed.values():
            # Another tier owns the record in its current state.
            raise Unauthorized(
                f"Only the reviewer for "
                f"'{record.get_status_display()}' records can {action} it."
            )
        raise InvalidTransition(
            f"Cannot {action} a record that is "
            f"{record.get_status_display().lower()}."
        )

    def _approve_changes(self, record, actor_id, actor_role):
        now = self.clock()
        if actor_role == ROLE_MINISTRY_ADMIN:
            return {
                "status": AssetRecord.STATUS_APPROVED,
                "approved_by_ministry_id": actor_id,
                "approved_by_ministry_at": now,
            }
        if self.review_policy(record.ministry_id):
            to_status = AssetRecord.STATUS_MINISTRY_REVIEW
        else:
            to_status = AssetRecord.STATUS_APPROVED
        return {
            "status": to_status,
            "approved_by_id": actor_id,
            "approved_at": now,
        }

    def _reject_changes(self, actor_id, actor_role, payload):
        reason = payload.get("rejection_reason")
        if not isinstance(reason, str) or not reason.strip():
            raise ValidationError(
                fields={"rejection_reason": "A rejection reason is required."}
            )
        return {
            "status": AssetRecord.STATUS_REJECTED,
            "rejected_by_id": actor_id,
            "rejected_at": self.clock(),
            "rejection_reason": reason.strip(),
            "rejection_level": REJECTION_LEVELS[actor_role],
        }

    def _resubmit_changes(self, record, actor_id, payload):
        if actor_id is None or record.uploaded_by_id != actor_id:
            raise Unauthorized(
                "Only the user who uploaded this asset can resubmit it."
            )
        if record.status != AssetRecord.STATUS_REJECTED:
            raise InvalidTransition(
                "Only rejected records can be resubmitted."
            )
        changes = clean_record_changes(record, payload.get("changes"))
        changes.update(
            status=AssetRecord.STATUS_PENDING,
            rejected_by_id=None,
            rejected_at=None,
            rejection_reason="",
            rejection_level="",
            approved_by_id=None,
            approved_at=None,
            approved_by_ministry_id=None,
            approved_by_ministry_at=None,
            resubmission_count=F("resubmission_count") + 1,
        )
        return changes

    @staticmethod
    def _audit_metadata(action, changes):
        if action == ACTION_REJECT:
            return {
                "rejection_reason": changes["rejection_reason"],
                "rejection_level": changes["rejection_level"],
            }
        if action == ACTION_RESUBMIT:
            return {
                "changed_fields": [f for f in EDITABLE_FIELDS if f in changes]
            }
        if "approved_by_ministry_id" in changes:
            return {"tier": "ministry-admin"}
        return {"tier": "approver"}


def apply_transition(
    record_id,
    actor_id,
    actor_role: str,
    action: str,
    payload: dict | None = None,
    actor_ministry_id=None,
    machine: ApprovalStateMachine | None = None,
) -> AssetRecord:
    """Apply a transition and notify the people who need to act next."""
    from .notifications import notify_transition

    machine = machine or ApprovalStateMachine()
    record = machine.apply(
        record_id,
        actor_id,
        actor_role,
        action,
        payload,
        actor_ministry_id=actor_ministry_id,
    )
    notify_transition(record, action)
    return record


def bulk_approve(
    record_ids,
    actor_id,
    actor_role: str,
    actor_ministry_id=None,
    machine: ApprovalStateMachine | None = None,
) -> list[BulkResult]:
    """Bulk approve records and notify for each one that moved."""
    from .notifications import notify_transition

    machine = machine or ApprovalStateMachine()
    results = machine.bulk_approve(
        record_ids, actor_id, actor_role, actor_ministry_id=actor_ministry_id
    )
    for result in results:
        if result.success:
            notify_transition(result.record, ACTION_APPROVE)
    return results
