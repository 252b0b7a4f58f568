"""Availability services for bookings.

Every availability question in the project goes through the helpers below,
which build their ORM filter from the half-open overlap rule of
``shared.domain.value_objects.DateRange``.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from shared.domain.exceptions import InvalidDateRange, NoRoomAvailable, RoomNotAvailable
from shared.domain.value_objects import DateRange

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from apps.hotels.models import Hotel, Room

logger = logging.getLogger(__name__)


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def stay_range(check_in: date, check_out: date) -> DateRange:
    try:
        return DateRange(check_in, check_out)
    except (TypeError, ValueError):
        raise InvalidDateRange("Check-out date must be after check-in date.")


def conflicting_bookings(hotel, room_number: str, check_in: date, check_out: date, *, exclude_booking_id=None):
    """Blocking bookings of the room that overlap the stay."""

    from .models import Booking  # Local import to prevent circular dependency

    stay = stay_range(check_in, check_out)
    qs = Booking.objects.blocking().for_room(hotel, room_number).overlapping(stay.start_date, stay.end_date)
    if exclude_booking_id is not None:
        qs = qs.exclude(pk=exclude_booking_id)
    return qs


def is_room_available(hotel, room_number: str, check_in: date, check_out: date, *, exclude_booking_id=None) -> bool:
    return not conflicting_bookings(
        hotel, room_number, check_in, check_out, exclude_booking_id=exclude_booking_id
    ).exists()


def ensure_room_is_available(
    hotel,
    room_number: str,
    check_in: date,
    check_out: date,
    *,
    exclude_booking_id=None,
) -> None:
    """Ensure the room is free for the given period."""

    bookings_qs = conflicting_bookings(
        hotel, room_number, check_in, check_out, exclude_booking_id=exclude_booking_id
    )
    bookings_qs = _lock_queryset_if_possible(bookings_qs)

    if bookings_qs.exists():
        logger.info(f"Room {room_number} of hotel {getattr(hotel, 'pk', hotel)} is busy for {check_in} - {check_out}")
        raise RoomNotAvailable()


def list_available_rooms(hotel: "Hotel", check_in: date, check_out: date, room_type: str | None = None) -> list["Room"]:
    """Catalog-available rooms with no blocking booking overlapping the stay."""

    from apps.hotels.models import Room
    from .models import Booking

    stay = stay_range(check_in, check_out)
    busy_numbers = set(
        Booking.objects.blocking()
        .filter(hotel=hotel)
        .overlapping(stay.start_date, stay.end_date)
        .values_list("room_number", flat=True)
    )
    rooms = hotel.rooms.filter(status=Room.Status.AVAILABLE).order_by("id")
    if room_type:
        rooms = rooms.filter(room_type=room_type)
    return [room for room in rooms if room.number not in busy_numbers]


def select_room(hotel: "Hotel", room_type: str, check_in: date, check_out: date) -> "Room":
    """Pick a room of the type, preferring one that is free for the stay."""

    free = list_available_rooms(hotel, check_in, check_out, room_type=room_type)
    if free:
        return free[0]
    room = hotel.first_available_room(room_type)
    if room is None:
        raise NoRoomAvailable(f"No available {room_type} rooms in {hotel.name}.")
    return room
