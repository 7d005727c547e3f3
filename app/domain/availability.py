"""Date-range overlap and pricing rules for car bookings.

Ranges are inclusive on both ends: a booking ending on day D and another
starting on day D share day D and therefore conflict.
"""

from collections.abc import Iterable
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from app.core.exceptions import ValidationError
from app.domain.booking_state import BLOCKING_STATUSES
from app.domain.entities import BookingRecord

CENTS = Decimal("0.01")

# Largest amount a Numeric(10, 2) money column holds
MAX_TOTAL_PRICE = Decimal("99999999.99")


def ranges_overlap(
    existing_start: date,
    existing_end: date,
    start: date,
    end: date,
) -> bool:
    """Check whether a requested range collides with an existing one."""
    return (
        (existing_start <= start <= existing_end)
        or (existing_start <= end <= existing_end)
        or (start <= existing_start and end >= existing_end)
    )


def find_conflicts(
    bookings: Iterable[BookingRecord],
    start: date,
    end: date,
) -> list[BookingRecord]:
    """Return the blocking bookings whose dates overlap [start, end]."""
    return [
        b
        for b in bookings
        if b.status in BLOCKING_STATUSES
        and ranges_overlap(b.start_date, b.end_date, start, end)
    ]


def validate_date_range(start: date, end: date) -> None:
    if end < start:
        raise ValidationError("endDate must be on or after startDate")


def rental_days(start: date, end: date) -> int:
    """Inclusive day count; a same-day rental is one day."""
    validate_date_range(start, end)
    return (end - start).days + 1


def quote_total(price_per_day: Decimal, start: date, end: date) -> Decimal:
    """Total price of renting at price_per_day from start through end.

    Raises:
        ValidationError: If the range is inverted or the total exceeds
            MAX_TOTAL_PRICE
    """
    total = (Decimal(price_per_day) * rental_days(start, end)).quantize(
        CENTS, rounding=ROUND_HALF_UP
    )
    if total > MAX_TOTAL_PRICE:
        raise ValidationError("Total price exceeds the maximum bookable amount; shorten the rental")
    return total
