"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions and announce what
happened through the injected event sink once the transaction commits.

Commands:
- CreateBookingCommand: Create a new booking
- ApproveBookingCommand: Admin confirms a pending booking
- RejectBookingCommand: Admin rejects a pending booking
- CancelBookingCommand: Guest or admin cancels a booking
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, List, Optional
import logging

from django.conf import settings
from django.db import IntegrityError
from django.utils import timezone

from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import (
    AuthorizationError,
    BookingNotFound,
    ConflictError,
    HotelNotFound,
    InternalError,
    InvalidDateRange,
    InvalidTransition,
    PriceMismatch,
    RoomNotAvailable,
)
from apps.bookings import pricing
from apps.bookings.domain import events
from apps.bookings.models import Booking
from apps.bookings.services import (
    conflicting_bookings,
    ensure_room_is_available,
    is_room_available,
    select_room,
    stay_range,
)
from apps.hotels.models import Hotel

logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 3


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to create a new booking

    ``room_number`` is optional: without it the first free room of
    ``room_type`` is picked. ``total_price`` is the figure the client
    displayed; it is checked against the server-side price.
    """
    guest: Any
    hotel_id: int
    check_in: date
    check_out: date
    adults: int = 1
    children: int = 0
    room_type: str = ""
    room_number: Optional[str] = None
    total_price: Optional[Decimal] = None
    payment_intent_id: Optional[str] = None


@dataclass
class ApproveBookingCommand:
    booking_id: int
    approved_by: Any


@dataclass
class RejectBookingCommand:
    booking_id: int
    rejected_by: Any
    reason: str = ""


@dataclass
class CancelBookingCommand:
    """Command to cancel a booking"""
    booking_id: int
    cancelled_by: Any  # guest who owns the booking, or an admin


def _today() -> date:
    return timezone.localdate()


def _is_admin(user) -> bool:
    from apps.users.permissions import is_admin_user

    return is_admin_user(user)


def _get_locked_booking(booking_id) -> Booking:
    try:
        return Booking.objects.select_for_update().select_related("hotel").get(pk=booking_id)
    except Booking.DoesNotExist:
        raise BookingNotFound(f"Booking {booking_id} not found.")


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    Double booking prevention:
    1. Availability check before any write (fast rejection)
    2. Transaction with the hotel row locked (SELECT FOR UPDATE), so
       creations for rooms of one hotel serialise at the database
    3. Overlap rescan under the lock, then insert
    4. Post-insert check that no earlier blocking booking overlaps
    5. Event published only after commit
    """

    def __init__(self, sink):
        self.sink = sink

    def handle(self, command: CreateBookingCommand) -> Booking:
        logger.info(
            f"Creating booking for hotel {command.hotel_id}, "
            f"guest {getattr(command.guest, 'pk', None)}, dates {command.check_in} - {command.check_out}"
        )

        stay = stay_range(command.check_in, command.check_out)
        if stay.start_date < _today():
            raise InvalidDateRange("Check-in date cannot be in the past.")

        hotel = Hotel.objects.filter(pk=command.hotel_id).first()
        if hotel is None:
            raise HotelNotFound(f"Hotel {command.hotel_id} not found.")

        if command.room_number:
            room = hotel.get_room(command.room_number)
        else:
            room = select_room(hotel, command.room_type, stay.start_date, stay.end_date)
        room_type = command.room_type or room.room_type

        if not is_room_available(hotel, room.number, stay.start_date, stay.end_date):
            raise RoomNotAvailable()

        total_price = pricing.quote(
            hotel, room_type, stay.start_date, stay.end_date, command.adults, command.children, room=room
        )
        if command.total_price is not None and not pricing.price_matches(
            command.total_price, total_price, settings.BOOKING_PRICE_TOLERANCE
        ):
            raise PriceMismatch(
                f"Submitted total {command.total_price} does not match the current price {total_price}."
            )

        for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
            try:
                booking = self._persist(command, hotel, room.number, room_type, total_price)
                break
            except IntegrityError:
                if command.payment_intent_id and Booking.objects.filter(
                    payment_intent_id=command.payment_intent_id
                ).exists():
                    raise ConflictError(
                        "Payment intent is already attached to another booking.",
                        code="payment_intent_in_use",
                    )
                if attempt == MAX_CODE_ATTEMPTS:
                    logger.error("Could not generate a unique booking code", exc_info=True)
                    raise InternalError("Could not create booking, please retry.")
                logger.warning(f"Booking code collision, retrying ({attempt}/{MAX_CODE_ATTEMPTS})")

        logger.info(f"Booking created successfully: {booking.booking_code} (ID: {booking.pk})")
        return booking

    def _persist(self, command, hotel, room_number, room_type, total_price) -> Booking:
        with DjangoUnitOfWork(self.sink) as uow:
            Hotel.objects.select_for_update().get(pk=hotel.pk)
            ensure_room_is_available(hotel, room_number, command.check_in, command.check_out)

            booking = Booking(
                guest=command.guest,
                hotel=hotel,
                room_number=room_number,
                room_type=room_type,
                check_in=command.check_in,
                check_out=command.check_out,
                adults=command.adults,
                children=command.children,
                total_price=total_price,
                payment_intent_id=command.payment_intent_id or None,
            )
            booking.save()

            earlier = conflicting_bookings(
                hotel, room_number, booking.check_in, booking.check_out, exclude_booking_id=booking.pk
            ).filter(pk__lt=booking.pk)
            if earlier.exists():
                logger.warning(f"Lost booking race for room {room_number} of hotel {hotel.pk}")
                raise RoomNotAvailable()

            uow.collect(events.BOOKING_CREATED, events.booking_payload(booking))
        return booking


class ApproveBookingHandler:
    """Admin approval: pending -> confirmed with a succeeded payment"""

    def __init__(self, sink):
        self.sink = sink

    def handle(self, command: ApproveBookingCommand) -> Booking:
        if not _is_admin(command.approved_by):
            raise AuthorizationError()

        with DjangoUnitOfWork(self.sink) as uow:
            booking = _get_locked_booking(command.booking_id)
            if booking.status != Booking.Status.PENDING:
                raise InvalidTransition(f"Only pending bookings can be approved, this one is {booking.status}.")
            if booking.check_in < _today():
                raise InvalidDateRange("Cannot approve a booking whose check-in date has passed.")

            ensure_room_is_available(
                booking.hotel_id,
                booking.room_number,
                booking.check_in,
                booking.check_out,
                exclude_booking_id=booking.pk,
            )
            booking.confirm()
            uow.collect(events.BOOKING_CONFIRMED, events.booking_payload(booking))

        logger.info(f"Booking {booking.booking_code} approved by {command.approved_by.pk}")
        return booking


class RejectBookingHandler:
    """Admin rejection: the booking is cancelled and its payment marked failed"""

    def __init__(self, sink):
        self.sink = sink

    def handle(self, command: RejectBookingCommand) -> Booking:
        if not _is_admin(command.rejected_by):
            raise AuthorizationError()

        with DjangoUnitOfWork(self.sink) as uow:
            booking = _get_locked_booking(command.booking_id)
            if booking.status != Booking.Status.PENDING:
                raise InvalidTransition(f"Only pending bookings can be rejected, this one is {booking.status}.")
            booking.cancel(payment_failed=True)
            payload = events.booking_payload(booking)
            payload["reason"] = command.reason
            uow.collect(events.BOOKING_REJECTED, payload)

        logger.info(f"Booking {booking.booking_code} rejected by {command.rejected_by.pk}")
        return booking


class CancelBookingHandler:
    """Handler for cancelling booking"""

    def __init__(self, sink):
        self.sink = sink

    def handle(self, command: CancelBookingCommand) -> Booking:
        user = command.cancelled_by
        logger.info(f"Cancelling booking {command.booking_id} by user {user.pk}")

        with DjangoUnitOfWork(self.sink) as uow:
            booking = _get_locked_booking(command.booking_id)

            if _is_admin(user):
                allowed = booking.status in Booking.BLOCKING_STATUSES
            elif booking.guest_id == user.pk:
                allowed = booking.status == Booking.Status.PENDING
            else:
                raise AuthorizationError("You can only cancel your own bookings.")

            if not allowed:
                raise InvalidTransition(
                    f"Booking {booking.booking_code} cannot be cancelled. Current status: {booking.status}"
                )

            booking.cancel()
            uow.collect(events.BOOKING_CANCELLED, events.booking_payload(booking))

        logger.info(f"Booking {booking.booking_code} cancelled successfully")
        return booking


def complete_finished_bookings(sink, today: Optional[date] = None) -> List[Booking]:
    """Confirmed bookings whose check-out is in the past become completed."""
    today = today or _today()
    completed: List[Booking] = []

    with DjangoUnitOfWork(sink) as uow:
        finished = Booking.objects.select_for_update().filter(
            status=Booking.Status.CONFIRMED,
            check_out__lt=today,
        )
        for booking in finished:
            if booking.complete():
                completed.append(booking)

        if completed:
            uow.collect(
                events.BOOKINGS_COMPLETED,
                {
                    "count": len(completed),
                    "booking_ids": [booking.pk for booking in completed],
                },
            )

    logger.info(f"Completed {len(completed)} finished bookings")
    return completed
