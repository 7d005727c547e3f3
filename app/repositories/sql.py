"""SQLAlchemy storage backend (PostgreSQL in production, SQLite in tests)."""

import logging
import uuid
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from datetime import date
from decimal import Decimal
from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import InternalError
from app.core.locks import KeyedLock
from app.domain.booking_state import BookingStatus
from app.domain.entities import BookingRecord, CarRecord, UserRole, UserRecord
from app.models.booking import Booking
from app.models.car import Car
from app.models.user import User
from app.repositories.base import MarketplaceStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Shared by every request-scoped SqlStore in this process
_admission_locks = KeyedLock()

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


def _parse_id(value: str) -> uuid.UUID | None:
    """Parse a string id; malformed ids cannot match any row."""
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _store_errors(fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Log driver failures and surface them as InternalError."""

    @wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await fn(*args, **kwargs)
        except SQLAlchemyError:
            logger.exception(f"Store operation {fn.__name__} failed")
            raise InternalError()

    return wrapper


def user_to_record(user: User) -> UserRecord:
    return UserRecord(
        id=str(user.id),
        name=user.name,
        email=user.email,
        password_hash=user.password_hash,
        role=UserRole(user.role),
        created_at=user.created_at,
    )


def car_to_record(car: Car) -> CarRecord:
    return CarRecord(
        id=str(car.id),
        host_id=str(car.host_id),
        make=car.make,
        model=car.model,
        year=car.year,
        price=Decimal(car.price),
        location=car.location,
        description=car.description,
        image_url=car.image_url,
        features=list(car.features or []),
        availability=car.availability,
        created_at=car.created_at,
    )


def booking_to_record(booking: Booking) -> BookingRecord:
    return BookingRecord(
        id=str(booking.id),
        user_id=str(booking.user_id),
        car_id=str(booking.car_id),
        start_date=booking.start_date,
        end_date=booking.end_date,
        total_price=Decimal(booking.total_price),
        status=BookingStatus(booking.status),
        created_at=booking.created_at,
    )


class SqlStore(MarketplaceStore):
    """Store bound to one AsyncSession (normally request-scoped)."""

    def __init__(self, db: AsyncSession, lock_timeout: float | None = None) -> None:
        self.db = db
        self.lock_timeout = (
            settings.admission_lock_timeout_seconds if lock_timeout is None else lock_timeout
        )

    # ==================== USERS ====================

    @_store_errors
    async def add_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: UserRole,
    ) -> UserRecord:
        user = User(name=name, email=email, password_hash=password_hash, role=UserRole(role).value)
        self.db.add(user)
        await self.db.flush()
        return user_to_record(user)

    @_store_errors
    async def get_user(self, user_id: str) -> UserRecord | None:
        uid = _parse_id(user_id)
        if uid is None:
            return None
        user = await self.db.get(User, uid)
        return user_to_record(user) if user else None

    @_store_errors
    async def get_user_by_email(self, email: str) -> UserRecord | None:
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        user = result.scalar_one_or_none()
        return user_to_record(user) if user else None

    @_store_errors
    async def get_users(self, user_ids: Iterable[str]) -> dict[str, UserRecord]:
        ids = [uid for uid in (_parse_id(u) for u in set(user_ids)) if uid is not None]
        if not ids:
            return {}
        result = await self.db.execute(select(User).where(User.id.in_(ids)))
        return {str(u.id): user_to_record(u) for u in result.scalars().all()}

    @_store_errors
    async def update_user(self, user_id: str, changes: dict[str, Any]) -> UserRecord | None:
        uid = _parse_id(user_id)
        user = await self.db.get(User, uid) if uid else None
        if user is None:
            return None
        for key, value in changes.items():
            if key not in USER_FIELDS:
                raise KeyError(f"Unknown user field: {key}")
            setattr(user, key, UserRole(value).value if key == "role" else value)
        await self.db.flush()
        return user_to_record(user)

    # ==================== CARS ====================

    @_store_errors
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
        car = Car(
            host_id=uuid.UUID(host_id),
            make=make,
            model=model,
            year=year,
            price=Decimal(price),
            location=location,
            description=description,
            image_url=image_url,
            features=list(features or []),
            availability=availability,
        )
        self.db.add(car)
        await self.db.flush()
        return car_to_record(car)

    @_store_errors
    async def get_car(self, car_id: str) -> CarRecord | None:
        cid = _parse_id(car_id)
        if cid is None:
            return None
        car = await self.db.get(Car, cid)
        return car_to_record(car) if car else None

    @_store_errors
    async def get_cars(self, car_ids: Iterable[str]) -> dict[str, CarRecord]:
        ids = [cid for cid in (_parse_id(c) for c in set(car_ids)) if cid is not None]
        if not ids:
            return {}
        result = await self.db.execute(select(Car).where(Car.id.in_(ids)))
        return {str(c.id): car_to_record(c) for c in result.scalars().all()}

    @_store_errors
    async def list_cars(
        self,
        available_only: bool = False,
        host_id: str | None = None,
        location: str | None = None,
    ) -> list[CarRecord]:
        query = select(Car)
        if available_only:
            query = query.where(Car.availability.is_(True))
        if host_id is not None:
            hid = _parse_id(host_id)
            if hid is None:
                return []
            query = query.where(Car.host_id == hid)
        if location:
            query = query.where(
                func.lower(Car.location).contains(location.lower(), autoescape=True)
            )
        query = query.order_by(Car.created_at.desc(), Car.id)
        result = await self.db.execute(query)
        return [car_to_record(c) for c in result.scalars().all()]

    @_store_errors
    async def update_car(self, car_id: str, changes: dict[str, Any]) -> CarRecord | None:
        cid = _parse_id(car_id)
        car = await self.db.get(Car, cid) if cid else None
        if car is None:
            return None
        for key, value in changes.items():
            if key not in CAR_FIELDS:
                raise KeyError(f"Unknown car field: {key}")
            if key == "features":
                value = list(value or [])
            setattr(car, key, value)
        await self.db.flush()
        return car_to_record(car)

    @_store_errors
    async def delete_car(self, car_id: str) -> bool:
        cid = _parse_id(car_id)
        car = await self.db.get(Car, cid) if cid else None
        if car is None:
            return False
        await self.db.delete(car)
        await self.db.flush()
        return True

    # ==================== BOOKINGS ====================

    @_store_errors
    async def add_booking(
        self,
        user_id: str,
        car_id: str,
        start_date: date,
        end_date: date,
        total_price: Decimal,
        status: BookingStatus,
    ) -> BookingRecord:
        booking = Booking(
            user_id=uuid.UUID(user_id),
            car_id=uuid.UUID(car_id),
            start_date=start_date,
            end_date=end_date,
            total_price=Decimal(total_price),
            status=BookingStatus(status).value,
        )
        self.db.add(booking)
        await self.db.flush()
        return booking_to_record(booking)

    @_store_errors
    async def get_booking(self, booking_id: str) -> BookingRecord | None:
        bid = _parse_id(booking_id)
        if bid is None:
            return None
        booking = await self.db.get(Booking, bid)
        return booking_to_record(booking) if booking else None

    @_store_errors
    async def list_bookings_for_car(
        self,
        car_id: str,
        exclude_cancelled: bool = False,
    ) -> list[BookingRecord]:
        cid = _parse_id(car_id)
        if cid is None:
            return []
        query = select(Booking).where(Booking.car_id == cid)
        if exclude_cancelled:
            query = query.where(Booking.status != BookingStatus.CANCELLED.value)
        query = query.order_by(Booking.start_date.asc(), Booking.created_at.asc())
        result = await self.db.execute(query)
        return [booking_to_record(b) for b in result.scalars().all()]

    @_store_errors
    async def list_bookings_for_user(self, user_id: str) -> list[BookingRecord]:
        uid = _parse_id(user_id)
        if uid is None:
            return []
        result = await self.db.execute(
            select(Booking)
            .where(Booking.user_id == uid)
            .order_by(Booking.created_at.desc(), Booking.id)
        )
        return [booking_to_record(b) for b in result.scalars().all()]

    @_store_errors
    async def set_booking_status(
        self,
        booking_id: str,
        status: BookingStatus,
    ) -> BookingRecord | None:
        bid = _parse_id(booking_id)
        booking = await self.db.get(Booking, bid) if bid else None
        if booking is None:
            return None
        booking.status = BookingStatus(status).value
        await self.db.flush()
        return booking_to_record(booking)

    # ==================== ADMISSION ====================

    @asynccontextmanager
    async def admission(self, car_id: str) -> AsyncIterator[None]:
        """Serialize admissions for one car and commit them as a unit.

        The in-process lock covers a single worker (and SQLite, which ignores
        FOR UPDATE); the car row lock covers concurrent workers on PostgreSQL.
        The commit happens before the lock is released.
        """
        async with _admission_locks.hold(f"car:{car_id}", timeout=self.lock_timeout):
            try:
                cid = _parse_id(car_id)
                if cid is not None:
                    await self.db.execute(
                        select(Car.id).where(Car.id == cid).with_for_update()
                    )
                yield
                await self.db.commit()
            except SQLAlchemyError:
                await self.db.rollback()
                logger.exception(f"Booking admission for car {car_id} failed")
                raise InternalError()
            except BaseException:
                await self.db.rollback()
                raise
