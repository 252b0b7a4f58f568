"""Server-side booking price calculation."""

from __future__ import annotations

import math
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

# Friday and Saturday (date.weekday())
WEEKEND_DAYS = frozenset({4, 5})
WEEKEND_MULTIPLIER = Decimal("1.2")
CHILD_FACTOR = Decimal("0.5")
CENTS = Decimal("0.01")


def count_nights(check_in: date, check_out: date) -> int:
    days = (check_out - check_in).total_seconds() / 86400
    return max(math.ceil(days), 0)


def is_weekend_stay(check_in: date, check_out: date) -> bool:
    return check_in.weekday() in WEEKEND_DAYS or check_out.weekday() in WEEKEND_DAYS


def calculate_total_price(
    unit_price: Decimal,
    check_in: date,
    check_out: date,
    adults: int,
    children: int = 0,
) -> Decimal:
    """
    Total price of a stay

    unit price (x1.2 when check-in or check-out falls on Friday or
    Saturday) times nights times guests, where a child counts as half.
    """
    nights = count_nights(check_in, check_out)
    unit = Decimal(unit_price)
    if is_weekend_stay(check_in, check_out):
        unit *= WEEKEND_MULTIPLIER
    guests = Decimal(adults) + Decimal(children) * CHILD_FACTOR
    return (unit * nights * guests).quantize(CENTS, rounding=ROUND_HALF_UP)


def quote(hotel, room_type: str, check_in: date, check_out: date, adults: int, children: int = 0, room=None) -> Decimal:
    unit_price = hotel.nightly_price_for(room_type, room)
    return calculate_total_price(unit_price, check_in, check_out, adults, children)


def price_matches(submitted, computed: Decimal, tolerance) -> bool:
    return abs(Decimal(str(submitted)) - computed) <= Decimal(str(tolerance))
