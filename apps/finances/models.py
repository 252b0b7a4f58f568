"""Financial domain models."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class PaymentEvent(models.Model):
    """Payment provider event received through the webhook.

    One row per provider event id, which makes redelivered events no-ops.
    """

    class EventType(models.TextChoices):
        PAYMENT_SUCCEEDED = "payment_succeeded", _("Payment succeeded")
        PAYMENT_FAILED = "payment_failed", _("Payment failed")
        REFUND_COMPLETED = "refund_completed", _("Refund completed")

    class Outcome(models.TextChoices):
        APPLIED = "applied", _("Applied")
        IGNORED = "ignored", _("Ignored")
        UNMATCHED = "unmatched", _("Unmatched")

    event_id = models.CharField(max_length=255, unique=True)
    event_type = models.CharField(max_length=32, choices=EventType.choices)
    payment_intent_id = models.CharField(max_length=255, db_index=True)
    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payment_events",
    )
    outcome = models.CharField(max_length=20, choices=Outcome.choices)
    payload = models.JSONField(default=dict, blank=True)
    received_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Payment event")
        verbose_name_plural = _("Payment events")
        ordering = ["-received_at"]

    def __str__(self) -> str:
        return f"{self.event_type} {self.payment_intent_id} ({self.outcome})"
