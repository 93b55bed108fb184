"""Celery tasks for the assets app."""

import logging

from celery import shared_task

from django.core.mail import EmailMultiAlternatives

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    autoretry_for=(Exception,),
    retry_backoff=True,
)
def send_email_task(
    self,
    subject: str,
    text_body: str,
    html_body: str,
    from_email: str,
    recipient_list: list[str],
) -> int:
    """Send a workflow email with HTML and plain-text parts.

    Returns the number of messages the backend accepted.
    """
    msg = EmailMultiAlternatives(
        subject=subject,
        body=text_body,
        from_email=from_email,
        to=recipient_list,
    )
    msg.attach_alternative(html_body, "text/html")
    sent = msg.send()
    logger.info(
        "Workflow email sent: '%s' to %d recipient(s)",
        subject,
        len(recipient_list),
    )
    return sent
