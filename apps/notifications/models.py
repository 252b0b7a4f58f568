"""Notification model.

Defines a notification delivered to users through the in-app feed.
Notifications are created by the event handlers in
``apps.notifications.services`` (new bookings, approvals, refund
decisions) and consumed by recipients. Each notification can be marked
as read.
"""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Notification(models.Model):
    """A message sent to a user about some event."""

    class Type(models.TextChoices):
        BOOKING_CREATED = "booking_created", _("Booking created")
        BOOKING_APPROVED = "booking_approved", _("Booking approved")
        BOOKING_REJECTED = "booking_rejected", _("Booking rejected")
        BOOKING_CANCELLED = "booking_cancelled", _("Booking cancelled")
        PAYMENT_RECEIVED = "payment_received", _("Payment received")
        PAYMENT_FAILED = "payment_failed", _("Payment failed")
        REFUND_REQUESTED = "refund_requested", _("Refund requested")
        REFUND_APPROVED = "refund_approved", _("Refund approved")
        REFUND_REJECTED = "refund_rejected", _("Refund rejected")
        SYSTEM_ALERT = "system_alert", _("System alert")

    class Priority(models.TextChoices):
        LOW = "low", _("Low")
        MEDIUM = "medium", _("Medium")
        HIGH = "high", _("High")

    user = models.ForeignKey(
        'users.CustomUser', on_delete=models.CASCADE, related_name='notifications'
    )
    type = models.CharField(max_length=32, choices=Type.choices, default=Type.SYSTEM_ALERT)
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.MEDIUM)
    title = models.CharField(max_length=255)
    message = models.TextField()
    booking = models.ForeignKey(
        'bookings.Booking',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='notifications',
    )
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self) -> str:
        return f"Notification to {self.user_id}: {self.title}"
