"""Plain records exchanged between the stores, the services and the API."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from app.domain.booking_state import BookingStatus


class UserRole(str, Enum):
    """User roles in the system."""

    USER = "user"
    HOST = "host"
    ADMIN = "admin"


@dataclass(frozen=True)
class Identity:
    """Verified caller identity taken from a bearer token."""

    id: str
    email: str
    role: UserRole


@dataclass
class UserRecord:
    id: str
    name: str
    email: str
    password_hash: str
    role: UserRole
    created_at: datetime


@dataclass
class CarRecord:
    id: str
    host_id: str
    make: str
    model: str
    year: int
    price: Decimal  # per day
    location: str
    description: str | None
    image_url: str | None
    features: list[str] = field(default_factory=list)
    availability: bool = True
    created_at: datetime | None = None


@dataclass
class BookingRecord:
    id: str
    user_id: str
    car_id: str
    start_date: date
    end_date: date
    total_price: Decimal
    status: BookingStatus
    created_at: datetime | None = None
