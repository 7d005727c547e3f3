"""Database models."""

from app.models.booking import Booking
from app.models.car import Car
from app.models.user import User

__all__ = [
    # User
    "User",
    # Car
    "Car",
    # Booking
    "Booking",
]
