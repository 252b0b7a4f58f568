"""Revenue reporting over the booking ledger.

Revenue is counted for bookings whose payment was collected (succeeded, or
later refunded) and is always net of refunds.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.db.models import Count, Sum  # type: ignore

from apps.bookings.models import NET_REVENUE, Booking

COLLECTED_PAYMENT_STATUSES = (Booking.PaymentStatus.SUCCEEDED, Booking.PaymentStatus.REFUNDED)


def collected_bookings(date_from: date | None = None, date_to: date | None = None):
    qs = Booking.objects.filter(payment_status__in=COLLECTED_PAYMENT_STATUSES)
    if date_from:
        qs = qs.filter(created_at__date__gte=date_from)
    if date_to:
        qs = qs.filter(created_at__date__lte=date_to)
    return qs


def revenue_report(date_from: date | None = None, date_to: date | None = None) -> dict:
    qs = collected_bookings(date_from, date_to)
    totals = qs.aggregate(
        bookings=Count("id"),
        gross=Sum("total_price"),
        refunded=Sum("refunded_amount"),
    )
    by_hotel = (
        qs.values("hotel_id", "hotel__name")
        .annotate(bookings=Count("id"), net_revenue=Sum(NET_REVENUE))
        .order_by("-net_revenue")
    )
    return {
        "bookings": totals["bookings"] or 0,
        "gross_revenue": totals["gross"] or Decimal("0.00"),
        "refunded": totals["refunded"] or Decimal("0.00"),
        "net_revenue": qs.net_revenue_total(),
        "by_hotel": [
            {
                "hotel": row["hotel_id"],
                "hotel_name": row["hotel__name"],
                "bookings": row["bookings"],
                "net_revenue": row["net_revenue"] or Decimal("0.00"),
            }
            for row in by_hotel
        ],
    }
