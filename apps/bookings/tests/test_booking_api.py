"""Integration tests for booking API endpoints."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.hotels.models import Hotel, Room
from apps.users.models import User


def next_monday() -> date:
    today = timezone.localdate()
    return today + timedelta(days=(7 - today.weekday()) % 7 or 7)


class BookingAPITestMixin:
    def setUp(self) -> None:
        self.guest = User.objects.create_user(email="guest@example.com", password="GuestPass123")
        self.other_guest = User.objects.create_user(email="other@example.com", password="OtherPass123")
        self.admin = User.objects.create_user(
            email="admin@example.com",
            password="AdminPass123",
            role=User.RoleChoices.ADMIN,
        )
        self.hotel = Hotel.objects.create(name="Lakeside", base_price=Decimal("100.00"))
        self.hotel.add_room("101", room_type=Room.RoomType.STANDARD)
        self.hotel.add_room("102", room_type=Room.RoomType.STANDARD)
        self.list_url = reverse("booking-list")
        self.check_in = next_monday()
        self.check_out = self.check_in + timedelta(days=2)

    def _payload(self, check_in: date, check_out: date, **extra) -> dict:
        payload = {
            "hotel": self.hotel.pk,
            "check_in": str(check_in),
            "check_out": str(check_out),
            "adults": 2,
            "room_type": "Standard",
        }
        payload.update(extra)
        return payload

    def _booking(self, **fields) -> Booking:
        values = {
            "guest": self.guest,
            "hotel": self.hotel,
            "room_number": "101",
            "room_type": Room.RoomType.STANDARD,
            "check_in": self.check_in,
            "check_out": self.check_out,
            "total_price": Decimal("400.00"),
        }
        values.update(fields)
        return Booking.objects.create(**values)


class BookingCreateAPITests(BookingAPITestMixin, APITestCase):
    """Covers creation, pricing and conflicts."""

    def setUp(self) -> None:
        super().setUp()
        self.client.force_authenticate(self.guest)

    def test_guest_can_create_booking(self) -> None:
        response = self.client.post(self.list_url, self._payload(self.check_in, self.check_out), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        booking = Booking.objects.get()
        self.assertEqual(booking.guest, self.guest)
        self.assertEqual(booking.room_number, "101")
        self.assertEqual(booking.status, Booking.Status.PENDING)
        self.assertEqual(booking.payment_status, Booking.PaymentStatus.PENDING)
        self.assertEqual(booking.total_price, Decimal("400.00"))
        self.assertTrue(booking.booking_code.startswith("BK"))
        self.assertEqual(response.data["booking_code"], booking.booking_code)

    def test_submitted_price_within_tolerance_is_accepted(self) -> None:
        payload = self._payload(self.check_in, self.check_out, total_price="400.40")

        response = self.client.post(self.list_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["total_price"], "400.00")

    def test_price_mismatch_is_rejected(self) -> None:
        payload = self._payload(self.check_in, self.check_out, total_price="350.00")

        response = self.client.post(self.list_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "price_mismatch")
        self.assertFalse(Booking.objects.exists())

    def test_past_check_in_is_rejected(self) -> None:
        yesterday = timezone.localdate() - timedelta(days=1)

        response = self.client.post(
            self.list_url,
            self._payload(yesterday, yesterday + timedelta(days=2)),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "invalid_date_range")

    def test_past_check_in_is_rejected_before_hotel_lookup(self) -> None:
        yesterday = timezone.localdate() - timedelta(days=1)
        payload = self._payload(yesterday, yesterday + timedelta(days=2))
        payload["hotel"] = self.hotel.pk + 99

        response = self.client.post(self.list_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "invalid_date_range")

    def test_check_out_must_follow_check_in(self) -> None:
        response = self.client.post(
            self.list_url,
            self._payload(self.check_in, self.check_in),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "invalid_date_range")

    def test_prevent_double_booking_on_overlap(self) -> None:
        first = self._payload(self.check_in, self.check_out, room_number="101")
        second = self._payload(
            self.check_in + timedelta(days=1),
            self.check_out + timedelta(days=1),
            room_number="101",
        )

        first_response = self.client.post(self.list_url, first, format="json")
        self.assertEqual(first_response.status_code, status.HTTP_201_CREATED, first_response.data)

        conflict_response = self.client.post(self.list_url, second, format="json")
        self.assertEqual(conflict_response.status_code, status.HTTP_400_BAD_REQUEST, conflict_response.data)
        self.assertEqual(conflict_response.data["code"], "room_not_available")
        self.assertEqual(Booking.objects.count(), 1)

    def test_adjacent_stay_is_allowed(self) -> None:
        self._booking(room_number="101")

        response = self.client.post(
            self.list_url,
            self._payload(self.check_out, self.check_out + timedelta(days=1), room_number="101"),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

    def test_room_type_picks_next_free_room(self) -> None:
        self._booking(room_number="101")

        response = self.client.post(self.list_url, self._payload(self.check_in, self.check_out), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["room_number"], "102")

        response = self.client.post(self.list_url, self._payload(self.check_in, self.check_out), format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(Booking.objects.count(), 2)

    def test_unknown_room_type_has_no_room(self) -> None:
        response = self.client.post(
            self.list_url,
            self._payload(self.check_in, self.check_out, room_type="Suite"),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "no_room_available")

    def test_unknown_hotel_returns_404(self) -> None:
        payload = self._payload(self.check_in, self.check_out)
        payload["hotel"] = self.hotel.pk + 100

        response = self.client.post(self.list_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND, response.data)
        self.assertEqual(response.data["code"], "hotel_not_found")

    def test_room_type_or_number_required(self) -> None:
        payload = self._payload(self.check_in, self.check_out)
        payload.pop("room_type")

        response = self.client.post(self.list_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_payment_intent_cannot_be_reused(self) -> None:
        self._booking(room_number="102", payment_intent_id="pi_shared")

        response = self.client.post(
            self.list_url,
            self._payload(self.check_in, self.check_out, room_number="101", payment_intent_id="pi_shared"),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["code"], "payment_intent_in_use")

    def test_requires_authentication(self) -> None:
        self.client.force_authenticate(None)

        response = self.client.post(self.list_url, self._payload(self.check_in, self.check_out), format="json")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_guest_sees_only_own_bookings(self) -> None:
        own = self._booking(room_number="101")
        self._booking(guest=self.other_guest, room_number="102")

        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item["id"] for item in response.data["results"]], [own.pk])

    def test_check_availability(self) -> None:
        self._booking(room_number="101")
        self.client.force_authenticate(None)
        url = reverse("booking-check-availability")
        params = {"hotel": self.hotel.pk, "check_in": self.check_in, "check_out": self.check_out}

        busy = self.client.get(url, {**params, "room_number": "101"})
        free = self.client.get(url, {**params, "room_number": "102"})

        self.assertEqual(busy.status_code, status.HTTP_200_OK, busy.data)
        self.assertFalse(busy.data["available"])
        self.assertTrue(free.data["available"])


class BookingLifecycleAPITests(BookingAPITestMixin, APITestCase):
    """Approval, rejection, cancellation and completion."""

    def _url(self, name: str, booking: Booking) -> str:
        return reverse(f"booking-{name}", args=[booking.pk])

    def test_admin_approves_pending_booking(self) -> None:
        booking = self._booking()
        self.client.force_authenticate(self.admin)

        response = self.client.post(self._url("approve", booking))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.CONFIRMED)
        self.assertEqual(booking.payment_status, Booking.PaymentStatus.SUCCEEDED)

    def test_only_pending_bookings_can_be_approved(self) -> None:
        booking = self._booking(status=Booking.Status.CONFIRMED)
        self.client.force_authenticate(self.admin)

        response = self.client.post(self._url("approve", booking))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["code"], "invalid_transition")

    def test_guest_cannot_approve(self) -> None:
        booking = self._booking()
        self.client.force_authenticate(self.guest)

        response = self.client.post(self._url("approve", booking))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.PENDING)

    def test_admin_rejects_booking(self) -> None:
        booking = self._booking()
        self.client.force_authenticate(self.admin)

        response = self.client.post(self._url("reject", booking), {"reason": "Overbooked"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.CANCELLED)
        self.assertEqual(booking.payment_status, Booking.PaymentStatus.FAILED)

    def test_guest_cancels_pending_booking(self) -> None:
        booking = self._booking()
        self.client.force_authenticate(self.guest)

        response = self.client.post(self._url("cancel", booking))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.CANCELLED)

    def test_guest_cannot_cancel_confirmed_booking(self) -> None:
        booking = self._booking(status=Booking.Status.CONFIRMED)
        self.client.force_authenticate(self.guest)

        response = self.client.post(self._url("cancel", booking))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)

    def test_admin_cancels_confirmed_booking(self) -> None:
        booking = self._booking(status=Booking.Status.CONFIRMED)
        self.client.force_authenticate(self.admin)

        response = self.client.post(self._url("cancel", booking))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], Booking.Status.CANCELLED)

    def test_other_guest_cannot_see_booking(self) -> None:
        booking = self._booking()
        self.client.force_authenticate(self.other_guest)

        response = self.client.post(self._url("cancel", booking))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_cancelled_booking_frees_room(self) -> None:
        booking = self._booking(room_number="101")
        self.client.force_authenticate(self.guest)
        self.client.post(self._url("cancel", booking))

        response = self.client.post(
            self.list_url,
            self._payload(self.check_in, self.check_out, room_number="101"),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

    def test_auto_complete_finished_bookings(self) -> None:
        today = timezone.localdate()
        finished = self._booking(
            status=Booking.Status.CONFIRMED,
            check_in=today - timedelta(days=5),
            check_out=today - timedelta(days=2),
        )
        upcoming = self._booking(status=Booking.Status.CONFIRMED)
        self.client.force_authenticate(self.admin)

        response = self.client.post(reverse("booking-auto-complete"))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["booking_ids"], [finished.pk])
        finished.refresh_from_db()
        upcoming.refresh_from_db()
        self.assertEqual(finished.status, Booking.Status.COMPLETED)
        self.assertEqual(upcoming.status, Booking.Status.CONFIRMED)
