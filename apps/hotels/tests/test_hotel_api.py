"""Integration tests for the hotel catalog API."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.hotels.models import Hotel, Room
from apps.users.models import User


class HotelRoomAPITests(APITestCase):
    """Room management through the hotel endpoints."""

    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            email="admin@example.com",
            password="AdminPass123",
            role=User.RoleChoices.ADMIN,
        )
        self.guest = User.objects.create_user(email="guest@example.com", password="GuestPass123")
        self.hotel = Hotel.objects.create(name="Seaside", city="Nice", country="France")
        self.hotel.add_room("101", room_type=Room.RoomType.STANDARD)
        self.rooms_url = reverse("hotel-add-room", args=[self.hotel.pk])

    def _room_url(self, number: str) -> str:
        return reverse("hotel-room-detail", kwargs={"pk": self.hotel.pk, "number": number})

    def test_admin_adds_room(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            self.rooms_url,
            {"number": "102", "room_type": "Deluxe", "price": "150.00"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["nightly_price"], "150.00")
        self.assertTrue(self.hotel.rooms.filter(number="102", room_type="Deluxe").exists())

    def test_duplicate_room_number_is_rejected(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.post(self.rooms_url, {"number": "101", "room_type": "Suite"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["code"], "duplicate_room_number")
        self.assertEqual(self.hotel.rooms.count(), 1)

    def test_rename_room_to_existing_number_is_rejected(self) -> None:
        self.hotel.add_room("102")
        self.client.force_authenticate(self.admin)

        response = self.client.patch(self._room_url("102"), {"number": "101"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertTrue(self.hotel.rooms.filter(number="102").exists())

    def test_update_and_remove_room(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.patch(
            self._room_url("101"),
            {"number": "201", "status": Room.Status.MAINTENANCE},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["number"], "201")
        self.assertEqual(response.data["status"], Room.Status.MAINTENANCE)

        response = self.client.delete(self._room_url("201"))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(self.hotel.rooms.exists())

        response = self.client.delete(self._room_url("201"))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "room_not_found")

    def test_guest_cannot_manage_rooms(self) -> None:
        self.client.force_authenticate(self.guest)

        response = self.client.post(self.rooms_url, {"number": "103"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_guest_cannot_create_hotel(self) -> None:
        self.client.force_authenticate(self.guest)

        response = self.client.post(reverse("hotel-list"), {"name": "Mine"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class HotelAvailabilityAPITests(APITestCase):
    def setUp(self) -> None:
        self.guest = User.objects.create_user(email="guest@example.com", password="GuestPass123")
        self.hotel = Hotel.objects.create(name="Alpine Lodge", base_price=Decimal("100.00"))
        self.hotel.add_room("1", room_type=Room.RoomType.STANDARD)
        self.hotel.add_room("2", room_type=Room.RoomType.STANDARD)
        self.hotel.add_room("3", room_type=Room.RoomType.STANDARD, status=Room.Status.MAINTENANCE)
        self.hotel.add_room("4", room_type=Room.RoomType.SUITE)
        self.check_in = timezone.localdate() + timedelta(days=10)
        self.check_out = self.check_in + timedelta(days=3)
        self.url = reverse("hotel-available-rooms", args=[self.hotel.pk])

    def _book(self, number: str, status_value: str = Booking.Status.PENDING) -> Booking:
        return Booking.objects.create(
            guest=self.guest,
            hotel=self.hotel,
            room_number=number,
            room_type=Room.RoomType.STANDARD,
            check_in=self.check_in,
            check_out=self.check_out,
            status=status_value,
        )

    def _numbers(self, response) -> list[str]:
        return [room["number"] for room in response.data["rooms"]]

    def test_booked_and_maintenance_rooms_are_not_listed(self) -> None:
        self._book("1")

        response = self.client.get(
            self.url,
            {"check_in": self.check_in, "check_out": self.check_out, "room_type": "Standard"},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(self._numbers(response), ["2"])

    def test_cancelled_booking_releases_room(self) -> None:
        self._book("1", Booking.Status.CANCELLED)

        response = self.client.get(self.url, {"check_in": self.check_in, "check_out": self.check_out})

        self.assertEqual(self._numbers(response), ["1", "2", "4"])

    def test_adjacent_stay_does_not_block_room(self) -> None:
        self._book("1")

        response = self.client.get(
            self.url,
            {
                "check_in": self.check_out,
                "check_out": self.check_out + timedelta(days=2),
                "room_type": "Standard",
            },
        )

        self.assertEqual(self._numbers(response), ["1", "2"])

    def test_invalid_range_is_rejected(self) -> None:
        response = self.client.get(self.url, {"check_in": self.check_out, "check_out": self.check_in})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "invalid_date_range")


class HotelFilterAPITests(APITestCase):
    def setUp(self) -> None:
        Hotel.objects.create(
            name="City Inn",
            city="Paris",
            country="France",
            base_price=Decimal("80.00"),
            amenities=["WiFi", "Breakfast"],
        )
        Hotel.objects.create(
            name="Grand Palace",
            city="Vienna",
            country="Austria",
            base_price=Decimal("300.00"),
            amenities=["WiFi", "Spa", "Pool"],
        )
        self.url = reverse("hotel-list")

    def _names(self, response) -> list[str]:
        return sorted(hotel["name"] for hotel in response.data["results"])

    def test_filter_by_city(self) -> None:
        response = self.client.get(self.url, {"city": "pari"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self._names(response), ["City Inn"])

    def test_filter_by_price_range(self) -> None:
        response = self.client.get(self.url, {"price_min": "100", "price_max": "500"})

        self.assertEqual(self._names(response), ["Grand Palace"])

    def test_filter_by_amenities_requires_all(self) -> None:
        response = self.client.get(self.url, {"amenities": "wifi,spa"})
        self.assertEqual(self._names(response), ["Grand Palace"])

        response = self.client.get(self.url, {"amenities": "wifi"})
        self.assertEqual(self._names(response), ["City Inn", "Grand Palace"])

    def test_search(self) -> None:
        response = self.client.get(self.url, {"search": "austria"})

        self.assertEqual(self._names(response), ["Grand Palace"])
