"""Tests for the stay period value object and its overlap rule."""

from __future__ import annotations

from datetime import date

import pytest

from shared.domain.value_objects import DateRange, overlaps


def test_overlap_is_symmetric() -> None:
    first = DateRange(date(2030, 3, 25), date(2030, 3, 28))
    second = DateRange(date(2030, 3, 27), date(2030, 3, 30))

    assert overlaps(first, second)
    assert overlaps(second, first)


def test_adjacent_stays_do_not_overlap() -> None:
    first = DateRange(date(2030, 3, 25), date(2030, 3, 28))
    second = DateRange(date(2030, 3, 28), date(2030, 3, 31))

    assert not overlaps(first, second)
    assert not overlaps(second, first)


def test_range_overlaps_itself_and_enclosed_ranges() -> None:
    outer = DateRange(date(2030, 3, 1), date(2030, 3, 10))
    inner = DateRange(date(2030, 3, 4), date(2030, 3, 5))

    assert overlaps(outer, outer)
    assert overlaps(outer, inner)
    assert overlaps(inner, outer)


def test_nights_and_contains() -> None:
    stay = DateRange(date(2030, 3, 1), date(2030, 3, 4))

    assert stay.nights == 3
    assert len(stay) == 3
    assert stay.contains(date(2030, 3, 1))
    assert not stay.contains(date(2030, 3, 4))


@pytest.mark.parametrize(
    "start,end",
    [
        (date(2030, 3, 5), date(2030, 3, 5)),
        (date(2030, 3, 6), date(2030, 3, 5)),
    ],
)
def test_empty_or_negative_ranges_are_rejected(start, end) -> None:
    with pytest.raises(ValueError):
        DateRange(start, end)
