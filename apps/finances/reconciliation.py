"""
Payment reconciliation

Applies payment provider events to the bookings they refer to. Events are
matched by payment intent id, the booking row is locked while it changes,
and each provider event id is recorded once so redelivered webhooks are
no-ops.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging
import uuid

from django.db import IntegrityError

from shared.application.uow import DjangoUnitOfWork
from apps.bookings.domain import events
from apps.bookings.models import Booking
from apps.finances.models import PaymentEvent

logger = logging.getLogger(__name__)

PAYMENT_SUCCEEDED = PaymentEvent.EventType.PAYMENT_SUCCEEDED
PAYMENT_FAILED = PaymentEvent.EventType.PAYMENT_FAILED
REFUND_COMPLETED = PaymentEvent.EventType.REFUND_COMPLETED

# Provider event names mapped to the canonical ones
EVENT_TYPE_MAPPING = {
    "payment_intent.succeeded": PAYMENT_SUCCEEDED,
    "payment_intent.payment_failed": PAYMENT_FAILED,
    "charge.refunded": REFUND_COMPLETED,
    "payment_succeeded": PAYMENT_SUCCEEDED,
    "payment_failed": PAYMENT_FAILED,
    "refund_completed": REFUND_COMPLETED,
}

PUBLISHED_EVENTS = {
    PAYMENT_SUCCEEDED: events.BOOKING_CONFIRMED,
    PAYMENT_FAILED: events.PAYMENT_FAILED,
    REFUND_COMPLETED: events.BOOKING_REFUNDED,
}


@dataclass
class ReconciliationResult:
    event_type: Optional[str]
    outcome: str
    booking: Optional[Booking] = None
    duplicate: bool = False


def normalize_event_type(event_type: str) -> Optional[str]:
    return EVENT_TYPE_MAPPING.get((event_type or "").strip())


def _transition(booking: Booking, event_type: str) -> bool:
    if event_type == PAYMENT_SUCCEEDED:
        return booking.mark_payment_succeeded()
    if event_type == PAYMENT_FAILED:
        return booking.mark_payment_failed()
    return booking.mark_refunded_by_provider()


def apply_payment_event(
    event_type: str,
    payment_intent_id: str,
    *,
    event_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
    sink,
) -> ReconciliationResult:
    """
    Apply one provider event

    Unknown event types and unknown payment intents are logged and reported
    back as ignored / unmatched, never raised: the provider must not retry
    them.
    """
    kind = normalize_event_type(event_type)
    if kind is None:
        logger.warning(f"Ignoring unsupported payment event type {event_type!r}")
        return ReconciliationResult(None, PaymentEvent.Outcome.IGNORED)

    if event_id and PaymentEvent.objects.filter(event_id=event_id).exists():
        logger.info(f"Payment event {event_id} already processed")
        return ReconciliationResult(kind, PaymentEvent.Outcome.IGNORED, duplicate=True)

    try:
        with DjangoUnitOfWork(sink) as uow:
            booking = Booking.objects.select_for_update().filter(payment_intent_id=payment_intent_id).first()

            if booking is None:
                logger.warning(f"No booking found for payment intent {payment_intent_id} ({kind})")
                outcome = PaymentEvent.Outcome.UNMATCHED
            elif _transition(booking, kind):
                logger.info(
                    f"Booking {booking.booking_code} reconciled with {kind}: "
                    f"status={booking.status}, payment_status={booking.payment_status}"
                )
                outcome = PaymentEvent.Outcome.APPLIED
                uow.collect(PUBLISHED_EVENTS[kind], events.booking_payload(booking))
            else:
                logger.info(f"Booking {booking.booking_code} already reflects {kind}, nothing to do")
                outcome = PaymentEvent.Outcome.IGNORED

            PaymentEvent.objects.create(
                event_id=event_id or f"local-{uuid.uuid4().hex}",
                event_type=kind,
                payment_intent_id=payment_intent_id,
                booking=booking,
                outcome=outcome,
                payload=payload or {},
            )
    except IntegrityError:
        # A concurrent delivery of the same event won
        logger.info(f"Payment event {event_id} recorded concurrently, skipping")
        return ReconciliationResult(kind, PaymentEvent.Outcome.IGNORED, duplicate=True)

    return ReconciliationResult(kind, outcome, booking)
