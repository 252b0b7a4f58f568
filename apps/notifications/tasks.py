"""Celery tasks for notification delivery."""

from celery import shared_task
import logging

logger = logging.getLogger(__name__)


@shared_task(name="notifications.send_email")
def send_email_task(recipient_email: str, subject: str, message: str) -> bool:
    """Send one notification e-mail outside the request cycle."""
    from .services import send_email_notification

    sent = send_email_notification(recipient_email, subject, message)
    if not sent:
        logger.warning(f"Notification email to {recipient_email} was not delivered")
    return sent
