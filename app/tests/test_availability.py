from datetime import date
from decimal import Decimal

import pytest

from app.core.exceptions import ValidationError
from app.domain.availability import (
    MAX_TOTAL_PRICE,
    find_conflicts,
    quote_total,
    ranges_overlap,
    rental_days,
    validate_date_range,
)
from app.domain.booking_state import BookingStatus
from app.domain.entities import BookingRecord


def make_booking(start: date, end: date, status: BookingStatus = BookingStatus.CONFIRMED) -> BookingRecord:
    return BookingRecord(
        id=f"b-{start.isoformat()}-{status.value}",
        user_id="renter",
        car_id="car1",
        start_date=start,
        end_date=end,
        total_price=Decimal("0"),
        status=status,
    )


@pytest.mark.parametrize(
    "start, end",
    [
        (date(2024, 6, 2), date(2024, 6, 2)),  # inside
        (date(2024, 5, 30), date(2024, 6, 1)),  # ends on existing start
        (date(2024, 6, 3), date(2024, 6, 5)),  # starts on existing end
        (date(2024, 5, 30), date(2024, 6, 10)),  # encloses
        (date(2024, 6, 1), date(2024, 6, 3)),  # identical
    ],
)
def test_ranges_overlap_detects_collisions(start, end):
    assert ranges_overlap(date(2024, 6, 1), date(2024, 6, 3), start, end)


@pytest.mark.parametrize(
    "start, end",
    [
        (date(2024, 5, 28), date(2024, 5, 31)),
        (date(2024, 6, 4), date(2024, 6, 5)),
    ],
)
def test_ranges_overlap_allows_disjoint_ranges(start, end):
    assert not ranges_overlap(date(2024, 6, 1), date(2024, 6, 3), start, end)


def test_find_conflicts_ignores_cancelled_bookings():
    bookings = [
        make_booking(date(2024, 6, 1), date(2024, 6, 3), BookingStatus.CANCELLED),
        make_booking(date(2024, 6, 10), date(2024, 6, 12)),
    ]

    assert find_conflicts(bookings, date(2024, 6, 2), date(2024, 6, 4)) == []
    assert [b.start_date for b in find_conflicts(bookings, date(2024, 6, 12), date(2024, 6, 14))] == [
        date(2024, 6, 10)
    ]


def test_find_conflicts_counts_pending_and_completed():
    bookings = [
        make_booking(date(2024, 6, 1), date(2024, 6, 3), BookingStatus.PENDING),
        make_booking(date(2024, 6, 5), date(2024, 6, 6), BookingStatus.COMPLETED),
    ]

    assert len(find_conflicts(bookings, date(2024, 6, 3), date(2024, 6, 5))) == 2


def test_single_day_rental_is_one_day():
    assert rental_days(date(2024, 6, 1), date(2024, 6, 1)) == 1
    assert quote_total(Decimal("75"), date(2024, 6, 1), date(2024, 6, 1)) == Decimal("75.00")


def test_quote_total_uses_inclusive_days():
    assert quote_total(Decimal("75"), date(2024, 6, 4), date(2024, 6, 5)) == Decimal("150.00")
    assert quote_total(Decimal("49.99"), date(2024, 6, 1), date(2024, 6, 3)) == Decimal("149.97")


def test_end_before_start_is_rejected():
    with pytest.raises(ValidationError):
        validate_date_range(date(2024, 6, 5), date(2024, 6, 4))
    with pytest.raises(ValidationError):
        quote_total(Decimal("75"), date(2024, 6, 5), date(2024, 6, 4))


def test_total_at_the_money_column_limit_is_accepted():
    assert quote_total(MAX_TOTAL_PRICE, date(2024, 6, 1), date(2024, 6, 1)) == MAX_TOTAL_PRICE


@pytest.mark.parametrize(
    "price, start, end",
    [
        (Decimal("99999999.99"), date(2024, 6, 1), date(2024, 6, 2)),
        (Decimal("75"), date(2024, 1, 1), date(9999, 12, 31)),
    ],
)
def test_total_beyond_the_money_column_is_rejected(price, start, end):
    with pytest.raises(ValidationError):
        quote_total(price, start, end)
