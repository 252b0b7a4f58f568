"""API tests for the revenue report."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.hotels.models import Hotel
from apps.users.models import User


class RevenueAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            email="admin@example.com",
            password="AdminPass123",
            role=User.RoleChoices.ADMIN,
        )
        self.guest = User.objects.create_user(email="guest@example.com", password="GuestPass123")
        self.hotel = Hotel.objects.create(name="Summit")
        self.hotel.add_room("1")
        self.hotel.add_room("2")
        self.url = reverse("analytics-revenue")
        check_in = timezone.localdate() + timedelta(days=2)

        # Paid 500, 200 refunded
        Booking.objects.create(
            guest=self.guest,
            hotel=self.hotel,
            room_number="1",
            room_type="Standard",
            check_in=check_in,
            check_out=check_in + timedelta(days=2),
            total_price=Decimal("500.00"),
            refunded_amount=Decimal("200.00"),
            refund_status=Booking.RefundStatus.PARTIAL,
            status=Booking.Status.CONFIRMED,
            payment_status=Booking.PaymentStatus.SUCCEEDED,
        )
        # Not paid, not counted
        Booking.objects.create(
            guest=self.guest,
            hotel=self.hotel,
            room_number="2",
            room_type="Standard",
            check_in=check_in,
            check_out=check_in + timedelta(days=2),
            total_price=Decimal("700.00"),
        )

    def test_revenue_is_net_of_refunds(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["bookings"], 1)
        self.assertEqual(Decimal(str(response.data["gross_revenue"])), Decimal("500.00"))
        self.assertEqual(Decimal(str(response.data["refunded"])), Decimal("200.00"))
        self.assertEqual(Decimal(str(response.data["net_revenue"])), Decimal("300.00"))
        self.assertEqual(Decimal(str(response.data["by_hotel"][0]["net_revenue"])), Decimal("300.00"))

    def test_report_is_admin_only(self) -> None:
        self.client.force_authenticate(self.guest)

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
