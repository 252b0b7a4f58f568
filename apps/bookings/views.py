"""API views for the booking domain."""

from __future__ import annotations

import logging

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import filters, mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.finances import refunds
from apps.users.permissions import IsAdminRole, is_admin_user
from shared.application.message_bus import get_event_sink

from .application.command_handlers import (
    ApproveBookingCommand,
    ApproveBookingHandler,
    CancelBookingCommand,
    CancelBookingHandler,
    CreateBookingCommand,
    CreateBookingHandler,
    RejectBookingCommand,
    RejectBookingHandler,
    complete_finished_bookings,
)
from .models import Booking
from .serializers import (
    AvailabilityQuerySerializer,
    BookingCreateSerializer,
    BookingReasonSerializer,
    BookingSerializer,
    RefundDecisionSerializer,
    RefundRejectSerializer,
    RefundRequestSerializer,
)
from .services import is_room_available, stay_range

logger = logging.getLogger(__name__)


class IsBookingStakeholder(permissions.BasePermission):
    """The guest who booked and administrators have access to a booking."""

    def has_object_permission(self, request, view, obj: Booking):  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if is_admin_user(user):
            return True
        return obj.guest_id == user.id


class BookingViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Viewset for creating and managing bookings."""

    queryset = Booking.objects.select_related("hotel", "guest").all()
    permission_classes = [permissions.IsAuthenticated, IsBookingStakeholder]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["status", "payment_status", "refund_status", "hotel"]
    search_fields = ["booking_code", "guest__email", "hotel__name", "room_number"]
    ordering_fields = ["created_at", "check_in", "total_price"]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        return BookingSerializer

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if not user.is_authenticated:
            return qs.none()
        if is_admin_user(user):
            return qs
        return qs.filter(guest=user)

    def _respond(self, booking: Booking, status_code=status.HTTP_200_OK) -> Response:
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data, status=status_code)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        command = CreateBookingCommand(
            guest=request.user,
            hotel_id=data["hotel"],
            check_in=data["check_in"],
            check_out=data["check_out"],
            adults=data["adults"],
            children=data["children"],
            room_type=data.get("room_type") or "",
            room_number=data.get("room_number") or None,
            total_price=data.get("total_price"),
            payment_intent_id=data.get("payment_intent_id") or None,
        )
        booking = CreateBookingHandler(get_event_sink()).handle(command)
        return self._respond(booking, status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        booking = CancelBookingHandler(get_event_sink()).handle(
            CancelBookingCommand(booking_id=booking.pk, cancelled_by=request.user)
        )
        return self._respond(booking)

    @action(detail=True, methods=["post"], permission_classes=[IsAdminRole])
    def approve(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        booking = ApproveBookingHandler(get_event_sink()).handle(
            ApproveBookingCommand(booking_id=booking.pk, approved_by=request.user)
        )
        return self._respond(booking)

    @action(detail=True, methods=["post"], permission_classes=[IsAdminRole])
    def reject(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = BookingReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = RejectBookingHandler(get_event_sink()).handle(
            RejectBookingCommand(
                booking_id=booking.pk,
                rejected_by=request.user,
                reason=serializer.validated_data["reason"],
            )
        )
        return self._respond(booking)

    @action(detail=False, methods=["post"], url_path="auto-complete", permission_classes=[IsAdminRole])
    def auto_complete(self, request):  # type: ignore
        completed = complete_finished_bookings(get_event_sink())
        return Response({"completed": len(completed), "booking_ids": [b.pk for b in completed]})

    @action(
        detail=False,
        methods=["get"],
        url_path="check-availability",
        permission_classes=[permissions.AllowAny],
    )
    def check_availability(self, request):  # type: ignore
        serializer = AvailabilityQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        stay = stay_range(data["check_in"], data["check_out"])
        available = is_room_available(data["hotel"], data["room_number"], stay.start_date, stay.end_date)
        return Response(
            {
                "hotel": data["hotel"],
                "room_number": data["room_number"],
                "check_in": stay.start_date,
                "check_out": stay.end_date,
                "available": available,
            }
        )

    # ----- refunds -----

    @action(detail=True, methods=["post"], url_path="request-refund")
    def request_refund(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = RefundRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = refunds.request_refund(
            booking,
            request.user,
            serializer.validated_data["reason"],
            serializer.validated_data.get("amount"),
            sink=get_event_sink(),
        )
        return self._respond(booking)

    @action(detail=False, methods=["get"], url_path="refund-requests", permission_classes=[IsAdminRole])
    def refund_requests(self, request):  # type: ignore
        qs = refunds.pending_refund_requests()
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(BookingSerializer(page, many=True).data)
        return Response(BookingSerializer(qs, many=True).data)

    @action(detail=True, methods=["post"], permission_classes=[IsAdminRole])
    def refund(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = RefundDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        booking = refunds.approve_refund(
            booking,
            request.user,
            refund_type=data["refund_type"],
            admin_notes=data["admin_notes"],
            amount=data.get("amount"),
            sink=get_event_sink(),
        )
        return self._respond(booking)

    @action(detail=True, methods=["post"], url_path="reject-refund", permission_classes=[IsAdminRole])
    def reject_refund(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = RefundRejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = refunds.reject_refund(
            booking,
            request.user,
            serializer.validated_data["admin_notes"],
            sink=get_event_sink(),
        )
        return self._respond(booking)
