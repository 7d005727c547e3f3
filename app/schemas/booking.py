"""Booking-related Pydantic schemas."""

from datetime import date
from decimal import Decimal

from pydantic import Field, field_serializer

from app.domain.booking_state import BookingStatus
from app.domain.entities import BookingRecord
from app.schemas.car import CarSummary
from app.schemas.common import CamelModel
from app.services.booking_service import HostBooking, RenterBooking


class BookingCreate(CamelModel):
    """Schema for requesting a booking.

    total_price is accepted for client compatibility; the stored price is
    always derived from the car's daily price.
    """

    car_id: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    total_price: Decimal | None = None


class BookingStatusUpdate(CamelModel):
    """Schema for changing a booking's status."""

    status: str


class BookingResponse(CamelModel):
    """Schema for booking response."""

    id: str
    user_id: str
    car_id: str
    start_date: date
    end_date: date
    total_price: Decimal
    status: BookingStatus

    @field_serializer("total_price")
    def serialize_total_price(self, total_price: Decimal) -> float:
        return float(total_price)

    @classmethod
    def from_record(cls, booking: BookingRecord) -> "BookingResponse":
        return cls.model_validate(booking)


class BookingUserSummary(CamelModel):
    """Renter details shown to the car's host."""

    name: str
    email: str


class RenterBookingResponse(BookingResponse):
    """A renter's booking with the booked car."""

    car: CarSummary | None = None

    @classmethod
    def from_entry(cls, entry: RenterBooking) -> "RenterBookingResponse":
        response = cls.model_validate(entry.booking)
        if entry.car is not None:
            response.car = CarSummary.model_validate(entry.car)
        return response


class HostBookingResponse(BookingResponse):
    """A booking on the host's car with the renter's details."""

    user: BookingUserSummary | None = None

    @classmethod
    def from_entry(cls, entry: HostBooking) -> "HostBookingResponse":
        response = cls.model_validate(entry.booking)
        if entry.user is not None:
            response.user = BookingUserSummary.model_validate(entry.user)
        return response
