"""Process-local storage backend.

Used by the test suite and by single-process demo deployments
(STORAGE_BACKEND=memory). Records are copied on the way in and out so callers
never share mutable state with the store.
"""

import itertools
import uuid
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any

from app.config import settings
from app.core.locks import KeyedLock
from app.domain.booking_state import BookingStatus
from app.domain.entities import BookingRecord, CarRecord, UserRole, UserRecord
from app.repositories.base import MarketplaceStore

CAR_FIELDS = {
    "make",
    "model",
    "year",
    "price",
    "location",
    "description",
    "image_url",
    "features",
    "availability",
}
USER_FIELDS = {"name", "password_hash", "role"}


class MemoryStore(MarketplaceStore):
    """Dictionary-backed store."""

    def __init__(self, lock_timeout: float | None = None) -> None:
        self.users: dict[str, UserRecord] = {}
        self.cars: dict[str, CarRecord] = {}
        self.bookings: dict[str, BookingRecord] = {}
        self.lock_timeout = (
            settings.admission_lock_timeout_seconds if lock_timeout is None else lock_timeout
        )
        self._locks = KeyedLock()
        # Insertion sequence breaks created_at ties in "newest first" listings
        self._seq = itertools.count()
        self._order: dict[str, int] = {}

    def _stamp(self, record_id: str) -> datetime:
        self._order[record_id] = next(self._seq)
        return datetime.now(UTC)

    def _newest_first(self, records: Iterable[Any]) -> list[Any]:
        return sorted(records, key=lambda r: self._order[r.id], reverse=True)

    # ==================== USERS ====================

    async def add_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: UserRole,
    ) -> UserRecord:
        user_id = str(uuid.uuid4())
        user = UserRecord(
            id=user_id,
            name=name,
            email=email,
            password_hash=password_hash,
            role=UserRole(role),
            created_at=self._stamp(user_id),
        )
        self.users[user_id] = user
        return replace(user)

    async def get_user(self, user_id: str) -> UserRecord | None:
        user = self.users.get(user_id)
        return replace(user) if user else None

    async def get_user_by_email(self, email: str) -> UserRecord | None:
        wanted = email.lower()
        for user in self.users.values():
            if user.email.lower() == wanted:
                return replace(user)
        return None

    async def get_users(self, user_ids: Iterable[str]) -> dict[str, UserRecord]:
        return {uid: replace(self.users[uid]) for uid in set(user_ids) if uid in self.users}

    async def update_user(self, user_id: str, changes: dict[str, Any]) -> UserRecord | None:
        user = self.users.get(user_id)
        if user is None:
            return None
        for key, value in changes.items():
            if key not in USER_FIELDS:
                raise KeyError(f"Unknown user field: {key}")
            setattr(user, key, UserRole(value) if key == "role" else value)
        return replace(user)

    # ==================== CARS ====================

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
        car_id = str(uuid.uuid4())
        car = CarRecord(
            id=car_id,
            host_id=host_id,
            make=make,
            model=model,
            year=year,
            price=Decimal(price),
            location=location,
            description=description,
            image_url=image_url,
            features=list(features or []),
            availability=availability,
            created_at=self._stamp(car_id),
        )
        self.cars[car_id] = car
        return replace(car, features=list(car.features))

    async def get_car(self, car_id: str) -> CarRecord | None:
        car = self.cars.get(car_id)
        return replace(car, features=list(car.features)) if car else None

    async def get_cars(self, car_ids: Iterable[str]) -> dict[str, CarRecord]:
        return {
            cid: replace(self.cars[cid], features=list(self.cars[cid].features))
            for cid in set(car_ids)
            if cid in self.cars
        }

    async def list_cars(
        self,
        available_only: bool = False,
        host_id: str | None = None,
        location: str | None = None,
    ) -> list[CarRecord]:
        cars = self.cars.values()
        if available_only:
            cars = [c for c in cars if c.availability]
        if host_id is not None:
            cars = [c for c in cars if c.host_id == host_id]
        if location:
            needle = location.lower()
            cars = [c for c in cars if needle in c.location.lower()]
        return [replace(c, features=list(c.features)) for c in self._newest_first(cars)]

    async def update_car(self, car_id: str, changes: dict[str, Any]) -> CarRecord | None:
        car = self.cars.get(car_id)
        if car is None:
            return None
        for key, value in changes.items():
            if key not in CAR_FIELDS:
                raise KeyError(f"Unknown car field: {key}")
            if key == "price":
                value = Decimal(value)
            elif key == "features":
                value = list(value or [])
            setattr(car, key, value)
        return replace(car, features=list(car.features))

    async def delete_car(self, car_id: str) -> bool:
        return self.cars.pop(car_id, None) is not None

    # ==================== BOOKINGS ====================

    async def add_booking(
        self,
        user_id: str,
        car_id: str,
        start_date: date,
        end_date: date,
        total_price: Decimal,
        status: BookingStatus,
    ) -> BookingRecord:
        booking_id = str(uuid.uuid4())
        booking = BookingRecord(
            id=booking_id,
            user_id=user_id,
            car_id=car_id,
            start_date=start_date,
            end_date=end_date,
            total_price=Decimal(total_price),
            status=BookingStatus(status),
            created_at=self._stamp(booking_id),
        )
        self.bookings[booking_id] = booking
        return replace(booking)

    async def get_booking(self, booking_id: str) -> BookingRecord | None:
        booking = self.bookings.get(booking_id)
        return replace(booking) if booking else None

    async def list_bookings_for_car(
        self,
        car_id: str,
        exclude_cancelled: bool = False,
    ) -> list[BookingRecord]:
        bookings = [b for b in self.bookings.values() if b.car_id == car_id]
        if exclude_cancelled:
            bookings = [b for b in bookings if b.status != BookingStatus.CANCELLED]
        bookings.sort(key=lambda b: (b.start_date, self._order[b.id]))
        return [replace(b) for b in bookings]

    async def list_bookings_for_user(self, user_id: str) -> list[BookingRecord]:
        bookings = [b for b in self.bookings.values() if b.user_id == user_id]
        return [replace(b) for b in self._newest_first(bookings)]

    async def set_booking_status(
        self,
        booking_id: str,
        status: BookingStatus,
    ) -> BookingRecord | None:
        booking = self.bookings.get(booking_id)
        if booking is None:
            return None
        booking.status = BookingStatus(status)
        return replace(booking)

    # ==================== ADMISSION ====================

    @asynccontextmanager
    async def admission(self, car_id: str) -> AsyncIterator[None]:
        # The insert is the last write in an admission, so a failure needs no undo
        async with self._locks.hold(f"car:{car_id}", timeout=self.lock_timeout):
            yield
