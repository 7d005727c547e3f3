"""Booking admission and status transitions.

Admission checks run inside the store's admission scope so that the
availability check, the overlap check and the insert form one atomic step
per car: of two concurrent requests for overlapping dates, exactly one is
confirmed and the other is rejected as a conflict.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from app.config import settings
from app.core.exceptions import AuthorizationError, DatesNotAvailable, NotFoundError
from app.core.permissions import (
    allowed_status_targets,
    can_view_car_bookings,
    can_view_user_bookings,
    is_booking_party,
)
from app.domain.availability import find_conflicts, quote_total, validate_date_range
from app.domain.booking_state import BookingStatus, assert_booking_transition, parse_booking_status
from app.domain.entities import BookingRecord, CarRecord, Identity, UserRecord
from app.repositories.base import MarketplaceStore

logger = logging.getLogger(__name__)


@dataclass
class RenterBooking:
    """A renter's booking with a summary of the booked car."""

    booking: BookingRecord
    car: CarRecord | None


@dataclass
class HostBooking:
    """A booking on a host's car with the renter's contact details."""

    booking: BookingRecord
    user: UserRecord | None


class BookingService:
    """Service for admitting bookings and changing their status."""

    def __init__(
        self,
        store: MarketplaceStore,
        strict_transitions: bool | None = None,
    ) -> None:
        """
        Args:
            store: Storage backend
            strict_transitions: Enforce the booking state machine on status
                changes (defaults to STRICT_STATUS_TRANSITIONS)
        """
        self.store = store
        self.strict_transitions = (
            settings.strict_status_transitions if strict_transitions is None else strict_transitions
        )

    async def create_booking(
        self,
        identity: Identity,
        car_id: str,
        start_date: date,
        end_date: date,
        total_price: Decimal | None = None,
    ) -> BookingRecord:
        """Admit a booking for the caller.

        Raises:
            ValidationError: If end_date is before start_date
            NotFoundError: If the car does not exist or is not available
            DatesNotAvailable: If the dates overlap a non-cancelled booking
        """
        validate_date_range(start_date, end_date)

        async with self.store.admission(car_id):
            car = await self.store.get_car(car_id)
            if car is None or not car.availability:
                raise NotFoundError("Available car", car_id)

            existing = await self.store.list_bookings_for_car(car_id, exclude_cancelled=True)
            conflicts = find_conflicts(existing, start_date, end_date)
            if conflicts:
                logger.info(
                    f"Rejected booking of car {car_id} for {start_date}..{end_date}: "
                    f"overlaps booking {conflicts[0].id}"
                )
                raise DatesNotAvailable()

            quoted = quote_total(car.price, start_date, end_date)
            if total_price is not None and Decimal(str(total_price)) != quoted:
                logger.warning(
                    f"Client total {total_price} for car {car_id} differs from quote {quoted}; "
                    "storing the quote"
                )

            booking = await self.store.add_booking(
                user_id=identity.id,
                car_id=car_id,
                start_date=start_date,
                end_date=end_date,
                total_price=quoted,
                status=BookingStatus.CONFIRMED,
            )

        logger.info(f"Booking {booking.id} confirmed for car {car_id} by user {identity.id}")
        return booking

    async def update_booking_status(
        self,
        identity: Identity,
        booking_id: str,
        new_status: str,
    ) -> BookingRecord:
        """Change a booking's status on behalf of its renter or the car's host.

        Raises:
            ValidationError: If new_status is not a known status
            NotFoundError: If the booking does not exist
            AuthorizationError: If the caller may not make this change
            InvalidBookingStatus: If strict transitions forbid the move
        """
        target = parse_booking_status(new_status)

        booking = await self.store.get_booking(booking_id)
        if booking is None:
            raise NotFoundError("Booking", booking_id)

        car = await self.store.get_car(booking.car_id)
        if car is None:
            raise NotFoundError("Car", booking.car_id)

        if not is_booking_party(identity, booking, car.host_id):
            logger.info(f"User {identity.id} denied access to booking {booking_id}")
            raise AuthorizationError("Not authorized")

        if target not in allowed_status_targets(identity, booking, car.host_id):
            raise AuthorizationError("Users can only cancel bookings")

        if self.strict_transitions:
            assert_booking_transition(booking.status, target)

        updated = await self.store.set_booking_status(booking_id, target)
        if updated is None:
            raise NotFoundError("Booking", booking_id)

        logger.info(
            f"Booking {booking_id} status {booking.status.value} -> {target.value} by {identity.id}"
        )
        return updated

    async def list_for_user(self, identity: Identity, user_id: str) -> list[RenterBooking]:
        """A renter's own bookings, newest first."""
        if not can_view_user_bookings(identity, user_id):
            raise AuthorizationError("Not authorized")
        bookings = await self.store.list_bookings_for_user(user_id)
        cars = await self.store.get_cars(b.car_id for b in bookings)
        return [RenterBooking(booking=b, car=cars.get(b.car_id)) for b in bookings]

    async def list_for_car(self, identity: Identity, car_id: str) -> list[HostBooking]:
        """All bookings on a car, by start date. Owning host only."""
        car = await self.store.get_car(car_id)
        if car is None:
            raise NotFoundError("Car", car_id)
        if not can_view_car_bookings(identity, car):
            raise AuthorizationError("Not authorized")
        bookings = await self.store.list_bookings_for_car(car_id)
        users = await self.store.get_users(b.user_id for b in bookings)
        return [HostBooking(booking=b, user=users.get(b.user_id)) for b in bookings]
