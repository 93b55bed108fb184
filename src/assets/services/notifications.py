"""Email notifications for workflow events.

Notifications are best-effort: a failure to render or queue an email is
logged and never affects the transition that triggered it.
"""

import logging

from django.conf import settings
from django.template.loader import render_to_string

from ..models import AssetRecord
from .permissions import users_with_permission

logger = logging.getLogger(__name__)


def send_workflow_email(
    template_name: str,
    context: dict,
    subject: str,
    recipient: str | list[str],
) -> None:
    """Render and dispatch a workflow email via Celery.

    Args:
        template_name: Template base name (e.g. "asset_approved"). Will load
            ``emails/{template_name}.html`` and ``emails/{template_name}.txt``.
        context: Template context variables specific to this email.
        subject: Email subject line.
        recipient: Single email address or list of addresses.
    """
    full_context = {
        "site_name": settings.SITE_NAME,
        "site_url": settings.SITE_URL,
        **context,
    }

    html_body = render_to_string(f"emails/{template_name}.html", full_context)
    text_body = render_to_string(f"emails/{template_name}.txt", full_context)

    recipient_list = [recipient] if isinstance(recipient, str) else recipient

    from assets.tasks import send_email_task

    send_email_task.delay(
        subject=subject,
        text_body=text_body,
        html_body=html_body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=recipient_list,
    )


def _emails(users) -> list[str]:
    return sorted({u.email for u in users if u.email})


def _dispatch(template_name, record, subject, recipients, **extra) -> bool:
    if not getattr(settings, "NOTIFICATIONS_ENABLED", True):
        return False
    if not recipients:
        logger.info(
            "No recipients for %s on asset %s",
            template_name,
            record.asset_code,
        )
        return False
    try:
        send_workflow_email(
            template_name,
            {"record": record, **extra},
            subject,
            recipients,
        )
    except Exception:
        logger.exception(
            "Failed to send %s notification for asset %s",
            template_name,
            record.asset_code,
        )
        return False
    return True


def notify_reviewers(record: AssetRecord, resubmitted: bool = False) -> bool:
    """Tell the ministry's approvers a record is waiting for them."""
    recipients = _emails(
        users_with_permission("can_approve_assets", record.ministry_id)
    )
    verb = "resubmitted" if resubmitted else "uploaded"
    return _dispatch(
        "asset_review_requested",
        record,
        f"Asset {record.asset_code} {verb} for approval",
        recipients,
        resubmitted=resubmitted,
        review_level="approver",
    )


def notify_ministry_review(record: AssetRecord) -> bool:
    """Tell the ministry admins a record needs ministry-level review."""
    recipients = _emails(
        users_with_permission("can_review_ministry_assets", record.ministry_id)
    )
    return _dispatch(
        "asset_review_requested",
        record,
        f"Asset {record.asset_code} awaiting ministry review",
        recipients,
        resubmitted=False,
        review_level="ministry-admin",
    )


def notify_uploader(record: AssetRecord) -> bool:
    """Tell the uploader their record was approved or rejected."""
    uploader = record.uploaded_by
    recipients = _emails([uploader]) if uploader.is_active else []
    if record.status == AssetRecord.STATUS_APPROVED:
        return _dispatch(
            "asset_approved",
            record,
            f"Asset {record.asset_code} approved",
            recipients,
        )
    return _dispatch(
        "asset_rejected",
        record,
        f"Asset {record.asset_code} rejected",
        recipients,
        rejection_reason=record.rejection_reason,
    )


def notify_upload(record: AssetRecord) -> bool:
    return notify_reviewers(record)


def notify_transition(record: AssetRecord, action: str) -> bool:
    """Send the notification that follows a transition to ``record.status``."""
    if record.status == AssetRecord.STATUS_PENDING:
        return notify_reviewers(record, resubmitted=action == "resubmit")
    if record.status == AssetRecord.STATUS_MINISTRY_REVIEW:
        return notify_ministry_review(record)
    return notify_uploader(record)
