"""
Booking Domain Events

Names of the events published by the booking, payment and refund services,
and the payload shape they carry. Events are published after the
transaction that produced them has committed.
"""

from typing import Any, Dict

BOOKING_CREATED = "booking_created"
BOOKING_CONFIRMED = "booking_confirmed"
BOOKING_REJECTED = "booking_rejected"
BOOKING_CANCELLED = "booking_cancelled"
BOOKINGS_COMPLETED = "bookings_completed"
PAYMENT_FAILED = "payment_failed"
BOOKING_REFUNDED = "booking_refunded"
REFUND_REQUESTED = "refund_requested"
REFUND_APPROVED = "refund_approved"
REFUND_REJECTED = "refund_rejected"


def booking_payload(booking) -> Dict[str, Any]:
    return {
        "booking_id": booking.pk,
        "booking_code": booking.booking_code,
        "guest_id": booking.guest_id,
        "hotel_id": booking.hotel_id,
        "room_number": booking.room_number,
        "room_type": booking.room_type,
        "check_in": booking.check_in.isoformat(),
        "check_out": booking.check_out.isoformat(),
        "status": booking.status,
        "payment_status": booking.payment_status,
        "total_price": str(booking.total_price),
        "refunded_amount": str(booking.refunded_amount),
        "refund_status": booking.refund_status,
    }
