"""Tests for notifications produced by booking events."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.core import mail
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.application.command_handlers import (
    ApproveBookingCommand,
    ApproveBookingHandler,
    CreateBookingCommand,
    CreateBookingHandler,
)
from apps.bookings.domain import events
from apps.bookings.models import Booking
from apps.finances import refunds
from apps.hotels.models import Hotel
from apps.notifications.models import Notification
from apps.notifications.services import on_booking_rejected
from apps.users.models import User
from shared.application.message_bus import get_event_sink
from shared.domain.base import DomainEvent


class BookingNotificationTests(TestCase):
    def setUp(self) -> None:
        self.guest = User.objects.create_user(email="guest@example.com", password="GuestPass123")
        self.admin = User.objects.create_user(
            email="admin@example.com",
            password="AdminPass123",
            role=User.RoleChoices.ADMIN,
        )
        self.hotel = Hotel.objects.create(name="Dune Resort", base_price=Decimal("100.00"))
        self.hotel.add_room("9")
        self.check_in = timezone.localdate() + timedelta(days=6)

    def _create_booking(self) -> Booking:
        command = CreateBookingCommand(
            guest=self.guest,
            hotel_id=self.hotel.pk,
            check_in=self.check_in,
            check_out=self.check_in + timedelta(days=2),
            room_number="9",
        )
        with self.captureOnCommitCallbacks(execute=True):
            return CreateBookingHandler(get_event_sink()).handle(command)

    def test_new_booking_notifies_admins(self) -> None:
        booking = self._create_booking()

        notification = Notification.objects.get(user=self.admin)
        self.assertEqual(notification.type, Notification.Type.BOOKING_CREATED)
        self.assertEqual(notification.booking, booking)
        self.assertIn(booking.booking_code, notification.message)
        self.assertFalse(Notification.objects.filter(user=self.guest).exists())

    def test_approval_notifies_and_emails_guest(self) -> None:
        booking = self._create_booking()

        with self.captureOnCommitCallbacks(execute=True):
            ApproveBookingHandler(get_event_sink()).handle(
                ApproveBookingCommand(booking_id=booking.pk, approved_by=self.admin)
            )

        notification = Notification.objects.get(user=self.guest)
        self.assertEqual(notification.type, Notification.Type.BOOKING_APPROVED)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["guest@example.com"])
        self.assertTrue(mail.outbox[0].body.startswith("Hello guest@example.com,"))

    def test_rejection_message_carries_reason(self) -> None:
        booking = self._create_booking()
        payload = events.booking_payload(booking)
        payload["reason"] = "Renovation"

        on_booking_rejected(DomainEvent(name=events.BOOKING_REJECTED, payload=payload))

        notification = Notification.objects.get(user=self.guest)
        self.assertIn("Renovation", notification.message)

    def test_refund_request_notifies_admins(self) -> None:
        booking = self._create_booking()
        Booking.objects.filter(pk=booking.pk).update(payment_status=Booking.PaymentStatus.SUCCEEDED)

        with self.captureOnCommitCallbacks(execute=True):
            refunds.request_refund(booking, self.guest, "Flight cancelled", sink=get_event_sink())

        self.assertTrue(
            Notification.objects.filter(user=self.admin, type=Notification.Type.REFUND_REQUESTED).exists()
        )


class NotificationAPITests(APITestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(email="reader@example.com", password="ReaderPass123")
        self.other = User.objects.create_user(email="other@example.com", password="OtherPass123")
        self.notification = Notification.objects.create(user=self.user, title="Hello", message="Welcome")
        Notification.objects.create(user=self.other, title="Private", message="Not yours")
        self.client.force_authenticate(self.user)

    def test_user_sees_only_own_notifications(self) -> None:
        response = self.client.get(reverse("notification-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item["id"] for item in response.data["results"]], [self.notification.pk])

    def test_mark_read(self) -> None:
        response = self.client.post(reverse("notification-mark-read", args=[self.notification.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.notification.refresh_from_db()
        self.assertTrue(self.notification.is_read)

    def test_mark_all_read(self) -> None:
        response = self.client.post(reverse("notification-mark-all-read"))

        self.assertEqual(response.data["updated"], 1)
        self.assertFalse(Notification.objects.filter(user=self.other, is_read=True).exists())
