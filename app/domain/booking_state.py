"""Booking status values and the optional booking state machine.

Host-initiated status changes are unrestricted unless strict transitions are
switched on, in which case BOOKING_TRANSITIONS applies:

- pending: requested, awaiting the host
- confirmed: admitted into the ledger (new bookings start here)
- completed: rental finished
- cancelled: released; no longer blocks the car's calendar
"""

from enum import Enum

from app.core.exceptions import InvalidBookingStatus, ValidationError


class BookingStatus(str, Enum):
    """Booking lifecycle status."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


BOOKING_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
}

# Statuses that hold a car's dates
BLOCKING_STATUSES = frozenset(
    {BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.COMPLETED}
)


def parse_booking_status(value: str) -> BookingStatus:
    """Parse a raw status string.

    Raises:
        ValidationError: If the value is not one of the four statuses
    """
    try:
        return BookingStatus(value)
    except ValueError:
        raise ValidationError("Invalid status")


def assert_booking_transition(current: BookingStatus, target: BookingStatus) -> None:
    allowed = BOOKING_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise InvalidBookingStatus(
            f"Invalid booking transition: {current.value} → {target.value}"
        )
