"""Hotel catalog models.

A hotel owns its rooms: rooms are created, renamed and removed only through
the ``Hotel`` room operations, which funnel through one room-number validator
and are backed by a unique constraint on ``(hotel, number)``. Bookings refer
to a room by hotel and room number.
"""

from __future__ import annotations

import logging
import math
from decimal import Decimal
from typing import Any

from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import IntegrityError, models, transaction  # type: ignore
from django.db.models import Avg, Count  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.exceptions import DuplicateRoomNumber, RoomNotFound

logger = logging.getLogger(__name__)


class Hotel(models.Model):
    """Hotel listed on the platform."""

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    base_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("100.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Nightly price used by rooms without their own price."),
    )
    amenities = models.JSONField(default=list, blank=True)
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=120, blank=True, db_index=True)
    country = models.CharField(max_length=120, blank=True)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    images = models.JSONField(default=list, blank=True)

    # Derived from reviews, see refresh_rating()
    average_rating = models.DecimalField(
        max_digits=2,
        decimal_places=1,
        default=Decimal("0.0"),
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )
    total_reviews = models.PositiveIntegerField(default=0)
    popularity = models.FloatField(default=0.0, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Hotel")
        verbose_name_plural = _("Hotels")
        ordering = ["-popularity", "name"]

    def __str__(self) -> str:
        return self.name

    # ----- rooms -----

    def _validate_room_number(self, number: str, *, exclude_pk: int | None = None) -> str:
        number = str(number).strip()
        if not number:
            raise DuplicateRoomNumber("Room number is required.", code="room_number_required")
        clash = self.rooms.filter(number=number)
        if exclude_pk is not None:
            clash = clash.exclude(pk=exclude_pk)
        if clash.exists():
            raise DuplicateRoomNumber(f"Room number {number} already exists in {self.name}.")
        return number

    def get_room(self, number: str) -> "Room":
        try:
            return self.rooms.get(number=str(number))
        except Room.DoesNotExist:
            raise RoomNotFound(f"Room {number} not found in {self.name}.")

    def add_room(self, number: str, **fields: Any) -> "Room":
        number = self._validate_room_number(number)
        try:
            with transaction.atomic():
                room = Room.objects.create(hotel=self, number=number, **fields)
        except IntegrityError:
            # Concurrent insert of the same number
            raise DuplicateRoomNumber(f"Room number {number} already exists in {self.name}.")
        logger.info(f"Room {number} added to hotel {self.pk}")
        return room

    def update_room(self, current_number: str, **changes: Any) -> "Room":
        room = self.get_room(current_number)
        new_number = changes.pop("number", None)
        if new_number is not None and str(new_number) != room.number:
            room.number = self._validate_room_number(new_number, exclude_pk=room.pk)
        for field, value in changes.items():
            setattr(room, field, value)
        try:
            with transaction.atomic():
                room.save()
        except IntegrityError:
            raise DuplicateRoomNumber(f"Room number {room.number} already exists in {self.name}.")
        logger.info(f"Room {current_number} updated in hotel {self.pk}")
        return room

    def remove_room(self, number: str) -> None:
        room = self.get_room(number)
        room.delete()
        logger.info(f"Room {number} removed from hotel {self.pk}")

    def rooms_of_type(self, room_type: str):
        return self.rooms.filter(room_type=room_type).order_by("id")

    def first_available_room(self, room_type: str) -> "Room | None":
        """First room of the type whose catalog status is available."""
        return self.rooms_of_type(room_type).filter(status=Room.Status.AVAILABLE).first()

    def nightly_price_for(self, room_type: str, room: "Room | None" = None) -> Decimal:
        """Room price when it defines one, otherwise the hotel base price."""
        if room is None:
            room = self.rooms_of_type(room_type).first()
        if room is not None and room.price and room.price > 0:
            return room.price
        return self.base_price

    # ----- rating -----

    def refresh_rating(self) -> None:
        stats = self.reviews.aggregate(avg=Avg("rating"), count=Count("id"))
        count = stats["count"] or 0
        if count:
            average = round(float(stats["avg"]), 1)
            self.average_rating = Decimal(str(average))
            self.total_reviews = count
            self.popularity = average * math.log(count + 1)
        else:
            self.average_rating = Decimal("0.0")
            self.total_reviews = 0
            self.popularity = 0.0
        self.save(update_fields=["average_rating", "total_reviews", "popularity", "updated_at"])


class Room(models.Model):
    """A bookable room, owned by its hotel."""

    class RoomType(models.TextChoices):
        STANDARD = "Standard", _("Standard")
        DELUXE = "Deluxe", _("Deluxe")
        SUITE = "Suite", _("Suite")
        PREMIUM = "Premium", _("Premium")
        EXECUTIVE = "Executive", _("Executive")
        ACCESSIBLE = "Accessible", _("Accessible")
        PRESIDENTIAL = "Presidential", _("Presidential")
        HONEYMOON = "Honeymoon", _("Honeymoon")
        FAMILY = "Family", _("Family")

    class Status(models.TextChoices):
        AVAILABLE = "available", _("Available")
        OCCUPIED = "occupied", _("Occupied")
        MAINTENANCE = "maintenance", _("Maintenance")

    hotel = models.ForeignKey(Hotel, on_delete=models.CASCADE, related_name="rooms")
    number = models.CharField(max_length=20)
    room_type = models.CharField(
        max_length=20,
        choices=RoomType.choices,
        default=RoomType.STANDARD,
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.AVAILABLE)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("0 means the hotel base price applies."),
    )
    max_guests = models.PositiveSmallIntegerField(default=2)
    images = models.JSONField(default=list, blank=True)

    class Meta:
        verbose_name = _("Room")
        verbose_name_plural = _("Rooms")
        ordering = ["hotel", "number"]
        constraints = [
            models.UniqueConstraint(fields=["hotel", "number"], name="unique_room_number_per_hotel"),
        ]

    def __str__(self) -> str:
        return f"{self.hotel} #{self.number} ({self.room_type})"

    @property
    def nightly_price(self) -> Decimal:
        return self.price if self.price and self.price > 0 else self.hotel.base_price
