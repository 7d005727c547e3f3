"""Pydantic schemas for API validation."""

from app.schemas.booking import (
    BookingCreate,
    BookingResponse,
    BookingStatusUpdate,
    HostBookingResponse,
    RenterBookingResponse,
)
from app.schemas.car import CarCreate, CarResponse, CarSummary, CarUpdate
from app.schemas.common import MessageResponse
from app.schemas.user import (
    RefreshTokenRequest,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
)

__all__ = [
    # User
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "TokenResponse",
    "RefreshTokenRequest",
    # Car
    "CarCreate",
    "CarUpdate",
    "CarResponse",
    "CarSummary",
    # Booking
    "BookingCreate",
    "BookingStatusUpdate",
    "BookingResponse",
    "RenterBookingResponse",
    "HostBookingResponse",
    # Common
    "MessageResponse",
]
