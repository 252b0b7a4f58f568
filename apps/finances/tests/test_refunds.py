"""Tests for the refund request and approval workflow."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.finances.gateway import PaymentGatewayError
from apps.hotels.models import Hotel
from apps.users.models import User


class RefundAPITests(APITestCase):
    def setUp(self) -> None:
        self.guest = User.objects.create_user(email="guest@example.com", password="GuestPass123")
        self.admin = User.objects.create_user(
            email="admin@example.com",
            password="AdminPass123",
            role=User.RoleChoices.ADMIN,
        )
        self.hotel = Hotel.objects.create(name="Old Town")
        self.hotel.add_room("5")
        check_in = timezone.localdate() + timedelta(days=3)
        self.booking = Booking.objects.create(
            guest=self.guest,
            hotel=self.hotel,
            room_number="5",
            room_type="Standard",
            check_in=check_in,
            check_out=check_in + timedelta(days=5),
            total_price=Decimal("500.00"),
            payment_intent_id="pi_refund",
            status=Booking.Status.CONFIRMED,
            payment_status=Booking.PaymentStatus.SUCCEEDED,
        )

    def _url(self, name: str) -> str:
        return reverse(f"booking-{name}", args=[self.booking.pk])

    def _request_refund(self, **payload):
        self.client.force_authenticate(self.guest)
        return self.client.post(self._url("request-refund"), {"reason": "Plans changed", **payload}, format="json")

    def test_guest_requests_refund(self) -> None:
        response = self._request_refund(amount="200.00")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.refund_status, Booking.RefundStatus.REQUESTED)
        self.assertEqual(self.booking.refund_requested_amount, Decimal("200.00"))
        self.assertEqual(self.booking.refund_reason, "Plans changed")

    def test_second_request_is_rejected(self) -> None:
        self._request_refund()

        response = self._request_refund()

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["code"], "refund_already_requested")

    def test_unpaid_booking_cannot_be_refunded(self) -> None:
        Booking.objects.filter(pk=self.booking.pk).update(payment_status=Booking.PaymentStatus.PENDING)

        response = self._request_refund()

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "not_paid")

    def test_amount_above_total_is_rejected(self) -> None:
        response = self._request_refund(amount="600.00")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "invalid_refund_amount")

    def test_partial_refund_reduces_net_revenue(self) -> None:
        self._request_refund(amount="200.00")
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            self._url("refund"),
            {"refund_type": "partial", "admin_notes": "Goodwill"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.refunded_amount, Decimal("200.00"))
        self.assertEqual(self.booking.net_revenue, Decimal("300.00"))
        self.assertEqual(self.booking.refund_status, Booking.RefundStatus.PARTIAL)
        self.assertEqual(self.booking.status, Booking.Status.CONFIRMED)
        self.assertEqual(self.booking.refund_processed_by, self.admin)
        self.assertEqual(response.data["net_revenue"], "300.00")

    def test_full_refund(self) -> None:
        self._request_refund()
        self.client.force_authenticate(self.admin)

        response = self.client.post(self._url("refund"), {"refund_type": "full"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.refunded_amount, Decimal("500.00"))
        self.assertEqual(self.booking.refund_status, Booking.RefundStatus.COMPLETED)
        self.assertEqual(self.booking.payment_status, Booking.PaymentStatus.REFUNDED)
        self.assertEqual(self.booking.status, Booking.Status.REFUNDED)

    def test_provider_failure_leaves_booking_unchanged(self) -> None:
        self._request_refund()
        self.client.force_authenticate(self.admin)

        with mock.patch(
            "apps.finances.gateway.refund_payment",
            side_effect=PaymentGatewayError("provider down"),
        ):
            response = self.client.post(self._url("refund"), {"refund_type": "full"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY, response.data)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.refunded_amount, Decimal("0.00"))
        self.assertEqual(self.booking.refund_status, Booking.RefundStatus.REQUESTED)

    def test_admin_rejects_refund_request(self) -> None:
        self._request_refund()
        self.client.force_authenticate(self.admin)

        response = self.client.post(self._url("reject-refund"), {"admin_notes": "Non-refundable"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.refund_status, Booking.RefundStatus.NONE)
        self.assertEqual(self.booking.refund_admin_notes, "Non-refundable")

    def test_reject_without_request_fails(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.post(self._url("reject-refund"), {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "no_refund_request")

    def test_partially_refunded_booking_cannot_request_again(self) -> None:
        self._request_refund(amount="100.00")
        self.client.force_authenticate(self.admin)
        self.client.post(self._url("refund"), {"refund_type": "partial"}, format="json")

        response = self._request_refund()

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["code"], "already_partially_refunded")

    def test_refund_requests_listed_for_admin(self) -> None:
        self._request_refund()
        self.client.force_authenticate(self.admin)

        response = self.client.get(reverse("booking-refund-requests"))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual([item["id"] for item in response.data["results"]], [self.booking.pk])

    def test_guest_cannot_approve_refund(self) -> None:
        self._request_refund()

        response = self.client.post(self._url("refund"), {"refund_type": "full"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
