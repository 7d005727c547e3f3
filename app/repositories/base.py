"""Storage interface for the marketplace.

Two implementations exist: MemoryStore (process-local dictionaries) and
SqlStore (SQLAlchemy). Services depend only on this interface.
Business rules do NOT live in stores - only persistence and the admission
scope that makes a booking check-and-insert atomic.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from contextlib import AbstractAsyncContextManager
from datetime import date
from decimal import Decimal
from typing import Any

from app.domain.booking_state import BookingStatus
from app.domain.entities import BookingRecord, CarRecord, UserRole, UserRecord


class MarketplaceStore(ABC):
    """Abstract base class for marketplace storage backends."""

    # ==================== USERS ====================

    @abstractmethod
    async def add_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: UserRole,
    ) -> UserRecord:
        """Persist a new user account."""

    @abstractmethod
    async def get_user(self, user_id: str) -> UserRecord | None:
        pass

    @abstractmethod
    async def get_user_by_email(self, email: str) -> UserRecord | None:
        """Look up a user by email (case-insensitive)."""

    @abstractmethod
    async def get_users(self, user_ids: Iterable[str]) -> dict[str, UserRecord]:
        """Fetch several users at once, keyed by id. Unknown ids are skipped."""

    @abstractmethod
    async def update_user(self, user_id: str, changes: dict[str, Any]) -> UserRecord | None:
        pass

    # ==================== CARS ====================

    @abstractmethod
    async def add_car(
        self,
        host_id: str,
        make: str,
        model: str,
        year: int,
        price: Decimal,
        location: str,
        description: str | None = None,
        image_url: str | None = None,
        features: list[str] | None = None,
        availability: bool = True,
    ) -> CarRecord:
        """Persist a new car."""

    @abstractmethod
    async def get_car(self, car_id: str) -> CarRecord | None:
        pass

    @abstractmethod
    async def get_cars(self, car_ids: Iterable[str]) -> dict[str, CarRecord]:
        """Fetch several cars at once, keyed by id. Unknown ids are skipped."""

    @abstractmethod
    async def list_cars(
        self,
        available_only: bool = False,
        host_id: str | None = None,
        location: str | None = None,
    ) -> list[CarRecord]:
        """List cars, newest first.

        Args:
            available_only: Only cars with availability set
            host_id: Only cars owned by this host
            location: Case-insensitive substring the location must contain
        """

    @abstractmethod
    async def update_car(self, car_id: str, changes: dict[str, Any]) -> CarRecord | None:
        """Apply field changes; returns None if the car does not exist."""

    @abstractmethod
    async def delete_car(self, car_id: str) -> bool:
        """Delete a car; returns False if it did not exist."""

    # ==================== BOOKINGS ====================

    @abstractmethod
    async def add_booking(
        self,
        user_id: str,
        car_id: str,
        start_date: date,
        end_date: date,
        total_price: Decimal,
        status: BookingStatus,
    ) -> BookingRecord:
        """Persist a new booking."""

    @abstractmethod
    async def get_booking(self, booking_id: str) -> BookingRecord | None:
        pass

    @abstractmethod
    async def list_bookings_for_car(
        self,
        car_id: str,
        exclude_cancelled: bool = False,
    ) -> list[BookingRecord]:
        """Bookings for a car ordered by start date."""

    @abstractmethod
    async def list_bookings_for_user(self, user_id: str) -> list[BookingRecord]:
        """Bookings made by a renter, newest first."""

    @abstractmethod
    async def set_booking_status(
        self,
        booking_id: str,
        status: BookingStatus,
    ) -> BookingRecord | None:
        """Overwrite a booking's status."""

    # ==================== ADMISSION ====================

    @abstractmethod
    def admission(self, car_id: str) -> AbstractAsyncContextManager[None]:
        """Scope in which reads and the insert of a booking for car_id are atomic.

        While one task is inside the scope for a car, no other admission for
        the same car can observe or change that car's bookings. Writes made in
        the scope are durable once it exits normally and discarded if it
        exits with an exception.
        """
