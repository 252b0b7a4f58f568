"""API views for payments.

Payment intents are created for a stay priced server-side. Payment status
changes arrive from the provider through the webhook and are applied by
``apps.finances.reconciliation``.
"""

from __future__ import annotations

import json
import logging

from django.utils.decorators import method_decorator  # type: ignore
from django.views.decorators.csrf import csrf_exempt  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings import pricing
from apps.bookings.services import stay_range
from apps.hotels.models import Hotel
from apps.users.permissions import IsAdminRole
from shared.application.message_bus import get_event_sink
from shared.domain.exceptions import ExternalServiceError, HotelNotFound

from . import gateway
from .models import PaymentEvent
from .reconciliation import apply_payment_event
from .serializers import PaymentEventSerializer, PaymentIntentSerializer

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Payment-Signature"


class PaymentIntentView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):  # type: ignore
        serializer = PaymentIntentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        hotel = Hotel.objects.filter(pk=data["hotel"]).first()
        if hotel is None:
            raise HotelNotFound(f"Hotel {data['hotel']} not found.")
        stay = stay_range(data["check_in"], data["check_out"])
        room = hotel.get_room(data["room_number"]) if data.get("room_number") else None
        room_type = data.get("room_type") or room.room_type
        amount = pricing.quote(
            hotel, room_type, stay.start_date, stay.end_date, data["adults"], data["children"], room=room
        )

        try:
            intent = gateway.create_payment_intent(
                amount,
                metadata={"hotel_id": hotel.pk, "room_type": room_type, "user_id": request.user.pk},
            )
        except gateway.PaymentGatewayError as e:
            logger.error(f"Payment intent creation failed for user {request.user.pk}: {e}")
            raise ExternalServiceError("Payment could not be initiated. Please try again later.")

        return Response(
            {
                "payment_intent_id": intent["payment_intent_id"],
                "client_secret": intent["client_secret"],
                "amount": str(amount),
                "currency": intent["currency"],
            },
            status=status.HTTP_201_CREATED,
        )


def _extract_event(data: dict) -> tuple[str, str, str]:
    """Event id, type and payment intent id from a provider or canonical payload."""
    event_type = str(data.get("type") or data.get("event_type") or "")
    event_id = str(data.get("id") or data.get("event_id") or "")
    inner = data.get("data")
    obj = inner.get("object") if isinstance(inner, dict) else None
    if isinstance(obj, dict) and obj:
        if obj.get("object") == "charge" or event_type.startswith("charge."):
            intent_id = obj.get("payment_intent") or ""
        else:
            intent_id = obj.get("id") or ""
    else:
        intent_id = data.get("payment_intent_id") or ""
    return event_id, event_type, str(intent_id)


@method_decorator(csrf_exempt, name="dispatch")
class PaymentWebhookView(APIView):
    """
    Payment provider webhook

    Always answers 200 for well-formed, correctly signed events, including
    the ones that match no booking, so the provider does not retry them.
    """

    authentication_classes: list = []
    permission_classes = [permissions.AllowAny]

    def post(self, request):  # type: ignore
        body = request.body
        if not gateway.verify_webhook_signature(body, request.headers.get(SIGNATURE_HEADER, "")):
            logger.error("Payment webhook with invalid signature")
            return Response({"detail": "Invalid signature"}, status=status.HTTP_403_FORBIDDEN)

        try:
            data = json.loads(body or b"{}")
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.error("Payment webhook: invalid JSON")
            return Response({"detail": "Invalid JSON"}, status=status.HTTP_400_BAD_REQUEST)
        if not isinstance(data, dict):
            logger.error("Payment webhook: payload is not a JSON object")
            return Response({"detail": "Payload must be a JSON object"}, status=status.HTTP_400_BAD_REQUEST)

        event_id, event_type, intent_id = _extract_event(data)
        logger.info(f"Payment webhook received: {event_type} {event_id} for {intent_id}")
        if not intent_id:
            return Response({"detail": "payment intent id is required"}, status=status.HTTP_400_BAD_REQUEST)

        result = apply_payment_event(
            event_type,
            intent_id,
            event_id=event_id or None,
            payload=data,
            sink=get_event_sink(),
        )
        return Response(
            {
                "received": True,
                "event_type": result.event_type,
                "outcome": result.outcome,
                "duplicate": result.duplicate,
            },
            status=status.HTTP_200_OK,
        )


class PaymentEventViewSet(viewsets.ReadOnlyModelViewSet):
    """Audit log of received payment events (admins only)."""

    queryset = PaymentEvent.objects.select_related("booking").all()
    serializer_class = PaymentEventSerializer
    permission_classes = [IsAdminRole]
    filterset_fields = ["event_type", "outcome", "payment_intent_id"]
