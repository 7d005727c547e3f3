"""Booking endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.api.deps import CurrentIdentity, get_booking_service
from app.core.middleware import booking_limiter
from app.schemas.booking import (
    BookingCreate,
    BookingResponse,
    BookingStatusUpdate,
    HostBookingResponse,
    RenterBookingResponse,
)
from app.services.booking_service import BookingService

router = APIRouter()

BookingServiceDep = Annotated[BookingService, Depends(get_booking_service)]


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(booking_limiter)],
)
async def create_booking(
    booking_data: BookingCreate,
    current_identity: CurrentIdentity,
    service: BookingServiceDep,
) -> BookingResponse:
    """Book a car for an inclusive date range."""
    booking = await service.create_booking(
        current_identity,
        car_id=booking_data.car_id,
        start_date=booking_data.start_date,
        end_date=booking_data.end_date,
        total_price=booking_data.total_price,
    )
    return BookingResponse.from_record(booking)


@router.get("/user/{user_id}", response_model=list[RenterBookingResponse])
async def get_user_bookings(
    user_id: str,
    current_identity: CurrentIdentity,
    service: BookingServiceDep,
) -> list[RenterBookingResponse]:
    """Get the caller's own bookings, newest first."""
    entries = await service.list_for_user(current_identity, user_id)
    return [RenterBookingResponse.from_entry(e) for e in entries]


@router.get("/car/{car_id}", response_model=list[HostBookingResponse])
async def get_car_bookings(
    car_id: str,
    current_identity: CurrentIdentity,
    service: BookingServiceDep,
) -> list[HostBookingResponse]:
    """Get all bookings on a car (owning host only)."""
    entries = await service.list_for_car(current_identity, car_id)
    return [HostBookingResponse.from_entry(e) for e in entries]


@router.patch("/{booking_id}", response_model=BookingResponse)
async def update_booking_status(
    booking_id: str,
    request: BookingStatusUpdate,
    current_identity: CurrentIdentity,
    service: BookingServiceDep,
) -> BookingResponse:
    """Change a booking's status.

    Renters may only cancel; the car's host may set any status.
    """
    booking = await service.update_booking_status(current_identity, booking_id, request.status)
    return BookingResponse.from_record(booking)
