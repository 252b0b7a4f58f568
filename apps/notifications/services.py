"""Notification services: in-app notifications and e-mails for booking events."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from django.conf import settings  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.db.models import Q  # type: ignore

from apps.bookings.domain import events

from .models import Notification

if TYPE_CHECKING:  # pragma: no cover
    from shared.application.message_bus import MessageBus
    from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


# ============================================================================
# EMAIL NOTIFICATIONS
# ============================================================================

def send_email_notification(recipient_email: str, subject: str, message: str) -> bool:
    """
    Send a plain-text e-mail.

    Returns:
        bool: True if the e-mail was sent
    """
    try:
        send_mail(
            subject=subject,
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            fail_silently=False,
        )
        logger.info(f"Email sent successfully to {recipient_email}: {subject}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False


def queue_email(recipient_email: str, subject: str, message: str) -> None:
    from .tasks import send_email_task

    if not recipient_email:
        return
    send_email_task.delay(recipient_email, subject, message)


# ============================================================================
# IN-APP NOTIFICATIONS
# ============================================================================

def create_notification(
    user,
    title: str,
    message: str,
    *,
    type: str = Notification.Type.SYSTEM_ALERT,
    priority: str = Notification.Priority.MEDIUM,
    booking_id: int | None = None,
) -> Notification:
    notification = Notification.objects.create(
        user=user,
        title=title,
        message=message,
        type=type,
        priority=priority,
        booking_id=booking_id,
    )
    logger.info(f"In-app notification {type} created for user {getattr(user, 'pk', user)}")
    return notification


def admin_users() -> Iterable:
    User = get_user_model()
    return User.objects.filter(
        Q(role=User.RoleChoices.ADMIN) | Q(is_staff=True) | Q(is_superuser=True),
        is_active=True,
    )


def notify_admins(title: str, message: str, **kwargs) -> int:
    count = 0
    for admin in admin_users():
        create_notification(admin, title, message, **kwargs)
        count += 1
    return count


def _guest(payload: dict):
    User = get_user_model()
    return User.objects.filter(pk=payload.get("guest_id")).first()


def _stay(payload: dict) -> str:
    return f"room {payload['room_number']}, {payload['check_in']} to {payload['check_out']}"


# ============================================================================
# EVENT HANDLERS
# ============================================================================

def on_booking_created(event: "DomainEvent") -> None:
    payload = event.payload
    notify_admins(
        "New booking",
        f"Booking {payload['booking_code']} ({_stay(payload)}) awaits approval.",
        type=Notification.Type.BOOKING_CREATED,
        priority=Notification.Priority.HIGH,
        booking_id=payload["booking_id"],
    )


def on_booking_confirmed(event: "DomainEvent") -> None:
    payload = event.payload
    guest = _guest(payload)
    if guest is None:
        return
    message = f"Your booking {payload['booking_code']} ({_stay(payload)}) is confirmed."
    create_notification(
        guest,
        "Booking confirmed",
        message,
        type=Notification.Type.BOOKING_APPROVED,
        priority=Notification.Priority.HIGH,
        booking_id=payload["booking_id"],
    )
    queue_email(
        guest.email,
        f"Booking {payload['booking_code']} confirmed",
        f"Hello {guest.display_name},\n\n{message}",
    )


def on_booking_rejected(event: "DomainEvent") -> None:
    payload = event.payload
    guest = _guest(payload)
    if guest is None:
        return
    message = f"Your booking {payload['booking_code']} ({_stay(payload)}) was rejected."
    if payload.get("reason"):
        message += f" Reason: {payload['reason']}"
    create_notification(
        guest,
        "Booking rejected",
        message,
        type=Notification.Type.BOOKING_REJECTED,
        priority=Notification.Priority.HIGH,
        booking_id=payload["booking_id"],
    )


def on_booking_cancelled(event: "DomainEvent") -> None:
    payload = event.payload
    notify_admins(
        "Booking cancelled",
        f"Booking {payload['booking_code']} ({_stay(payload)}) was cancelled.",
        type=Notification.Type.BOOKING_CANCELLED,
        priority=Notification.Priority.LOW,
        booking_id=payload["booking_id"],
    )


def on_payment_failed(event: "DomainEvent") -> None:
    payload = event.payload
    guest = _guest(payload)
    if guest is None:
        return
    create_notification(
        guest,
        "Payment failed",
        f"Payment for booking {payload['booking_code']} failed. Please try again.",
        type=Notification.Type.PAYMENT_FAILED,
        priority=Notification.Priority.HIGH,
        booking_id=payload["booking_id"],
    )


def on_refund_requested(event: "DomainEvent") -> None:
    payload = event.payload
    notify_admins(
        "Refund requested",
        f"Refund of {payload.get('amount')} requested for booking {payload['booking_code']}.",
        type=Notification.Type.REFUND_REQUESTED,
        priority=Notification.Priority.HIGH,
        booking_id=payload["booking_id"],
    )


def on_refund_decided(event: "DomainEvent") -> None:
    payload = event.payload
    guest = _guest(payload)
    if guest is None:
        return
    if event.name == events.REFUND_APPROVED:
        title = "Refund approved"
        message = f"A refund of {payload.get('amount')} for booking {payload['booking_code']} was approved."
        notification_type = Notification.Type.REFUND_APPROVED
    else:
        title = "Refund rejected"
        message = f"Your refund request for booking {payload['booking_code']} was rejected."
        notification_type = Notification.Type.REFUND_REJECTED
    if payload.get("admin_notes"):
        message += f" Notes: {payload['admin_notes']}"
    create_notification(
        guest,
        title,
        message,
        type=notification_type,
        priority=Notification.Priority.MEDIUM,
        booking_id=payload["booking_id"],
    )
    queue_email(guest.email, title, message)


def on_booking_refunded(event: "DomainEvent") -> None:
    payload = event.payload
    guest = _guest(payload)
    if guest is None:
        return
    create_notification(
        guest,
        "Booking refunded",
        f"Booking {payload['booking_code']} was refunded ({payload['refunded_amount']}).",
        type=Notification.Type.REFUND_APPROVED,
        priority=Notification.Priority.MEDIUM,
        booking_id=payload["booking_id"],
    )


HANDLERS = {
    events.BOOKING_CREATED: on_booking_created,
    events.BOOKING_CONFIRMED: on_booking_confirmed,
    events.BOOKING_REJECTED: on_booking_rejected,
    events.BOOKING_CANCELLED: on_booking_cancelled,
    events.PAYMENT_FAILED: on_payment_failed,
    events.BOOKING_REFUNDED: on_booking_refunded,
    events.REFUND_REQUESTED: on_refund_requested,
    events.REFUND_APPROVED: on_refund_decided,
    events.REFUND_REJECTED: on_refund_decided,
}


def register_handlers(bus: "MessageBus") -> None:
    for event_name, handler in HANDLERS.items():
        bus.subscribe(event_name, handler)
