"""
Refund workflow

Guests request refunds of paid bookings; administrators approve them in
full or in part (the provider refund is issued first) or reject them.
"""

from decimal import Decimal, InvalidOperation
import logging

from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import (
    AlreadyRequested,
    AuthorizationError,
    BookingNotFound,
    ConflictError,
    ExternalServiceError,
    ValidationError,
)
from apps.bookings.domain import events
from apps.bookings.models import Booking
from apps.finances import gateway
from apps.users.permissions import is_admin_user

logger = logging.getLogger(__name__)

REFUND_FULL = "full"
REFUND_PARTIAL = "partial"
REFUND_TYPES = (REFUND_FULL, REFUND_PARTIAL)
DEFAULT_PARTIAL_SHARE = Decimal("0.5")
CENTS = Decimal("0.01")


def _lock(booking) -> Booking:
    booking_id = getattr(booking, "pk", booking)
    try:
        return Booking.objects.select_for_update().get(pk=booking_id)
    except Booking.DoesNotExist:
        raise BookingNotFound(f"Booking {booking_id} not found.")


def _to_amount(value) -> Decimal:
    try:
        return Decimal(str(value)).quantize(CENTS)
    except (InvalidOperation, ValueError):
        raise ValidationError("Refund amount must be a number.", code="invalid_refund_amount")


def _check_amount(amount: Decimal, remaining: Decimal) -> None:
    if amount <= 0 or amount > remaining:
        raise ValidationError(
            f"Refund amount must be greater than 0 and at most {remaining}.",
            code="invalid_refund_amount",
        )


def _refund_payload(booking: Booking, **extra):
    payload = events.booking_payload(booking)
    payload.update({key: str(value) if isinstance(value, Decimal) else value for key, value in extra.items()})
    return payload


def request_refund(booking, user, reason: str, amount=None, *, sink) -> Booking:
    with DjangoUnitOfWork(sink) as uow:
        booking = _lock(booking)

        if booking.guest_id != user.pk:
            raise AuthorizationError("You can only request refunds for your own bookings.")
        if booking.refund_status == Booking.RefundStatus.COMPLETED:
            raise ConflictError("Booking has already been refunded.", code="already_refunded")
        if booking.refund_status == Booking.RefundStatus.PARTIAL:
            raise ConflictError("Booking has already been partially refunded.", code="already_partially_refunded")
        if booking.refund_status == Booking.RefundStatus.REQUESTED:
            raise AlreadyRequested()
        if booking.payment_status != Booking.PaymentStatus.SUCCEEDED:
            raise ValidationError("Only paid bookings can be refunded.", code="not_paid")

        remaining = booking.remaining_refundable
        amount = remaining if amount in (None, "") else _to_amount(amount)
        _check_amount(amount, remaining)

        booking.request_refund(reason or "", amount)
        uow.collect(events.REFUND_REQUESTED, _refund_payload(booking, amount=amount, reason=booking.refund_reason))

    logger.info(f"Refund of {amount} requested for booking {booking.booking_code}")
    return booking


def approve_refund(booking, admin, refund_type: str = REFUND_FULL, admin_notes: str = "", amount=None, *, sink) -> Booking:
    if not is_admin_user(admin):
        raise AuthorizationError()
    if refund_type not in REFUND_TYPES:
        raise ValidationError("Refund type must be 'full' or 'partial'.", code="invalid_refund_type")

    with DjangoUnitOfWork(sink) as uow:
        booking = _lock(booking)

        if booking.payment_status != Booking.PaymentStatus.SUCCEEDED:
            raise ValidationError("Only paid bookings can be refunded.", code="not_paid")
        remaining = booking.remaining_refundable
        if remaining <= 0:
            raise ConflictError("Booking has already been refunded.", code="already_refunded")

        if refund_type == REFUND_FULL:
            refund_amount = remaining
        elif amount not in (None, ""):
            refund_amount = _to_amount(amount)
        elif booking.refund_requested_amount:
            refund_amount = booking.refund_requested_amount
        else:
            refund_amount = min((booking.total_price * DEFAULT_PARTIAL_SHARE).quantize(CENTS), remaining)
        _check_amount(refund_amount, remaining)

        if booking.payment_intent_id:
            try:
                gateway.refund_payment(booking.payment_intent_id, refund_amount)
            except gateway.PaymentGatewayError as e:
                logger.error(f"Provider refund failed for booking {booking.booking_code}: {e}")
                raise ExternalServiceError("Refund could not be processed by the payment provider.")
        else:
            logger.warning(f"Booking {booking.booking_code} has no payment intent, refund recorded without provider call")

        booking.apply_refund(refund_amount, processed_by=admin, admin_notes=admin_notes or "")
        uow.collect(
            events.REFUND_APPROVED,
            _refund_payload(booking, amount=refund_amount, refund_type=refund_type, admin_notes=booking.refund_admin_notes),
        )

    logger.info(f"Refund of {refund_amount} ({refund_type}) approved for booking {booking.booking_code}")
    return booking


def reject_refund(booking, admin, admin_notes: str = "", *, sink) -> Booking:
    if not is_admin_user(admin):
        raise AuthorizationError()

    with DjangoUnitOfWork(sink) as uow:
        booking = _lock(booking)
        if booking.refund_status != Booking.RefundStatus.REQUESTED:
            raise ValidationError("There is no pending refund request for this booking.", code="no_refund_request")

        booking.reject_refund(processed_by=admin, admin_notes=admin_notes or "")
        uow.collect(events.REFUND_REJECTED, _refund_payload(booking, admin_notes=booking.refund_admin_notes))

    logger.info(f"Refund request rejected for booking {booking.booking_code}")
    return booking


def pending_refund_requests():
    return Booking.objects.refund_requests().select_related("guest", "hotel")
