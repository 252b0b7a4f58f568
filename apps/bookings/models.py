"""Booking ledger models.

A booking references its room by ``(hotel, room_number)`` rather than by a
foreign key into the room table: rooms can be renumbered or removed from the
catalog without rewriting booking history.
"""

from __future__ import annotations

import logging
import random
import string
import time
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models, transaction  # type: ignore
from django.db.models import DecimalField, ExpressionWrapper, F, Q, Sum  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.exceptions import InvalidTransition

logger = logging.getLogger(__name__)

NET_REVENUE = ExpressionWrapper(
    F("total_price") - F("refunded_amount"),
    output_field=DecimalField(max_digits=12, decimal_places=2),
)


class BookingQuerySet(models.QuerySet):
    def blocking(self):
        """Bookings that hold their room: pending and confirmed."""
        return self.filter(status__in=Booking.BLOCKING_STATUSES)

    def for_room(self, hotel, room_number: str):
        hotel_id = getattr(hotel, "pk", hotel)
        return self.filter(hotel_id=hotel_id, room_number=str(room_number))

    def overlapping(self, check_in, check_out):
        # Same half-open rule as DateRange.overlaps_with
        return self.filter(Q(check_in__lt=check_out) & Q(check_out__gt=check_in))

    def net_revenue_total(self) -> Decimal:
        total = self.aggregate(total=Sum(NET_REVENUE))["total"]
        return total or Decimal("0.00")

    def refund_requests(self):
        return self.filter(refund_status=Booking.RefundStatus.REQUESTED).order_by("-refund_requested_at")


class Booking(models.Model):
    """Reservation of one hotel room for a stay."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        CONFIRMED = "confirmed", _("Confirmed")
        CANCELLED = "cancelled", _("Cancelled")
        COMPLETED = "completed", _("Completed")
        REFUNDED = "refunded", _("Refunded")

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        SUCCEEDED = "succeeded", _("Succeeded")
        FAILED = "failed", _("Failed")
        REFUNDED = "refunded", _("Refunded")

    class RefundStatus(models.TextChoices):
        NONE = "none", _("None")
        PENDING = "pending", _("Pending")
        PARTIAL = "partial", _("Partial")
        COMPLETED = "completed", _("Completed")
        REQUESTED = "requested", _("Requested")

    BLOCKING_STATUSES = (Status.PENDING, Status.CONFIRMED)
    FINAL_STATUSES = (Status.COMPLETED, Status.REFUNDED)

    # Fields that can still change on a completed or refunded booking
    REFUND_FIELDS = (
        "payment_status",
        "refunded_amount",
        "refund_status",
        "refund_reason",
        "refund_requested_amount",
        "refund_requested_at",
        "refund_admin_notes",
        "refund_processed_at",
        "refund_processed_by",
        "updated_at",
    )

    guest = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    hotel = models.ForeignKey(
        "hotels.Hotel",
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    booking_code = models.CharField(max_length=32, unique=True, editable=False)
    room_number = models.CharField(max_length=20)
    room_type = models.CharField(max_length=20)
    check_in = models.DateField()
    check_out = models.DateField()
    adults = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    children = models.PositiveSmallIntegerField(default=0)
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    payment_intent_id = models.CharField(max_length=255, unique=True, null=True, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )

    refunded_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    refund_status = models.CharField(
        max_length=20,
        choices=RefundStatus.choices,
        default=RefundStatus.NONE,
    )
    refund_reason = models.TextField(blank=True)
    refund_requested_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    refund_requested_at = models.DateTimeField(null=True, blank=True)
    refund_admin_notes = models.TextField(blank=True)
    refund_processed_at = models.DateTimeField(null=True, blank=True)
    refund_processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="processed_refunds",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out__gt=models.F("check_in")),
                name="booking_valid_dates",
            ),
            models.CheckConstraint(
                condition=models.Q(refunded_amount__gte=0) & models.Q(refunded_amount__lte=models.F("total_price")),
                name="booking_refund_within_total",
            ),
        ]
        indexes = [
            models.Index(fields=["hotel", "room_number", "check_in", "check_out"], name="booking_room_stay_idx"),
            models.Index(fields=["status"], name="booking_status_idx"),
            models.Index(fields=["refund_status"], name="booking_refund_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.booking_code} for room {self.room_number}"

    @property
    def net_revenue(self) -> Decimal:
        return self.total_price - self.refunded_amount

    @property
    def remaining_refundable(self) -> Decimal:
        return max(self.total_price - self.refunded_amount, Decimal("0.00"))

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    def is_blocking(self) -> bool:
        return self.status in self.BLOCKING_STATUSES

    def clean(self) -> None:
        if self.check_in and self.check_out and self.check_in >= self.check_out:
            raise ValidationError(_("Check-out date must be after check-in date."))
        if self.adults is not None and self.adults < 1:
            raise ValidationError(_("At least one adult is required."))
        if self.refunded_amount < 0 or self.refunded_amount > self.total_price:
            raise ValidationError(_("Refunded amount must be between zero and the total price."))

    @classmethod
    def from_db(cls, db, field_names, values):  # type: ignore
        instance = super().from_db(db, field_names, values)
        instance._loaded_status = instance.__dict__.get("status")
        return instance

    def _check_final_state(self, update_fields) -> None:
        if getattr(self, "_loaded_status", None) not in self.FINAL_STATUSES:
            return
        if update_fields is None or set(update_fields) - set(self.REFUND_FIELDS):
            raise InvalidTransition(f"Booking {self.booking_code} is {self._loaded_status} and can no longer change.")

    def _touches_availability(self, update_fields) -> bool:
        if update_fields is None:
            return True
        return bool({"check_in", "check_out", "room_number", "status", "hotel"} & set(update_fields))

    def save(self, *args, **kwargs):  # type: ignore
        update_fields = kwargs.get("update_fields")
        with transaction.atomic():
            if self._state.adding and not self.booking_code:
                self.booking_code = self.generate_booking_code()
            if not self._state.adding:
                self._check_final_state(update_fields)
            self.clean()
            if self.is_blocking() and self._touches_availability(update_fields):
                from .services import ensure_room_is_available  # local import to avoid circular

                ensure_room_is_available(
                    self.hotel_id,
                    self.room_number,
                    self.check_in,
                    self.check_out,
                    exclude_booking_id=self.pk,
                )
            if update_fields is not None:
                kwargs["update_fields"] = list(set(update_fields) | {"updated_at"})
            super().save(*args, **kwargs)
        self._loaded_status = self.status

    @staticmethod
    def generate_booking_code() -> str:
        suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=5))
        return f"BK{int(time.time() * 1000)}{suffix}".upper()

    # ----- transitions -----
    # Each returns True when the booking changed, False when it was a no-op.

    def confirm(self) -> bool:
        if self.status == self.Status.CONFIRMED and self.payment_status == self.PaymentStatus.SUCCEEDED:
            return False
        self.status = self.Status.CONFIRMED
        self.payment_status = self.PaymentStatus.SUCCEEDED
        self.save(update_fields=["status", "payment_status"])
        return True

    def mark_payment_succeeded(self) -> bool:
        if self.status != self.Status.PENDING:
            return False
        return self.confirm()

    def mark_payment_failed(self) -> bool:
        if self.status != self.Status.PENDING or self.payment_status == self.PaymentStatus.FAILED:
            return False
        self.payment_status = self.PaymentStatus.FAILED
        self.save(update_fields=["payment_status"])
        return True

    def mark_refunded_by_provider(self) -> bool:
        if self.payment_status == self.PaymentStatus.REFUNDED and self.refunded_amount == self.total_price:
            return False
        fields = ["payment_status", "refunded_amount", "refund_status"]
        self.payment_status = self.PaymentStatus.REFUNDED
        self.refunded_amount = self.total_price
        self.refund_status = self.RefundStatus.COMPLETED
        if self.status != self.Status.COMPLETED:
            self.status = self.Status.REFUNDED
            fields.append("status")
        self.save(update_fields=fields)
        return True

    def cancel(self, *, payment_failed: bool = False) -> bool:
        if self.status == self.Status.CANCELLED:
            return False
        fields = ["status"]
        self.status = self.Status.CANCELLED
        if payment_failed:
            self.payment_status = self.PaymentStatus.FAILED
            fields.append("payment_status")
        self.save(update_fields=fields)
        return True

    def complete(self) -> bool:
        if self.status != self.Status.CONFIRMED:
            return False
        self.status = self.Status.COMPLETED
        self.save(update_fields=["status"])
        return True

    def request_refund(self, reason: str, amount: Decimal) -> None:
        self.refund_status = self.RefundStatus.REQUESTED
        self.refund_reason = reason
        self.refund_requested_amount = amount
        self.refund_requested_at = timezone.now()
        self.save(
            update_fields=["refund_status", "refund_reason", "refund_requested_amount", "refund_requested_at"]
        )

    def apply_refund(self, amount: Decimal, *, processed_by=None, admin_notes: str = "") -> None:
        self.refunded_amount = min(self.refunded_amount + amount, self.total_price)
        fields = [
            "refunded_amount",
            "refund_status",
            "refund_admin_notes",
            "refund_processed_at",
            "refund_processed_by",
        ]
        if self.refunded_amount >= self.total_price:
            self.refund_status = self.RefundStatus.COMPLETED
            self.payment_status = self.PaymentStatus.REFUNDED
            fields.append("payment_status")
            if self.status != self.Status.COMPLETED:
                self.status = self.Status.REFUNDED
                fields.append("status")
        else:
            self.refund_status = self.RefundStatus.PARTIAL
        self.refund_admin_notes = admin_notes
        self.refund_processed_at = timezone.now()
        self.refund_processed_by = processed_by
        self.save(update_fields=fields)

    def reject_refund(self, *, processed_by=None, admin_notes: str = "") -> None:
        self.refund_status = self.RefundStatus.NONE
        self.refund_reason = ""
        self.refund_requested_amount = None
        self.refund_requested_at = None
        self.refund_admin_notes = admin_notes
        self.refund_processed_at = timezone.now()
        self.refund_processed_by = processed_by
        self.save(
            update_fields=[
                "refund_status",
                "refund_reason",
                "refund_requested_amount",
                "refund_requested_at",
                "refund_admin_notes",
                "refund_processed_at",
                "refund_processed_by",
            ]
        )
