"""Car listing endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import CurrentIdentity, HostIdentity, get_car_service
from app.schemas.car import CarCreate, CarResponse, CarUpdate
from app.schemas.common import MessageResponse
from app.services.car_service import CarService

router = APIRouter()

CarServiceDep = Annotated[CarService, Depends(get_car_service)]


@router.get("", response_model=list[CarResponse])
async def list_available_cars(service: CarServiceDep) -> list[CarResponse]:
    """List all cars currently available for rent, newest first."""
    cars = await service.list_available()
    return [CarResponse.model_validate(c) for c in cars]


@router.get("/search", response_model=list[CarResponse])
async def search_cars(
    service: CarServiceDep,
    location: str | None = Query(default=None, max_length=255),
) -> list[CarResponse]:
    """Search available cars by location (case-insensitive substring)."""
    cars = await service.search(location)
    return [CarResponse.model_validate(c) for c in cars]


@router.get("/host/{host_id}", response_model=list[CarResponse])
async def list_host_cars(
    host_id: str,
    current_identity: CurrentIdentity,
    service: CarServiceDep,
) -> list[CarResponse]:
    """List every car of a host, including unavailable ones."""
    cars = await service.list_for_host(host_id)
    return [CarResponse.model_validate(c) for c in cars]


@router.get("/{car_id}", response_model=CarResponse)
async def get_car(car_id: str, service: CarServiceDep) -> CarResponse:
    """Get a car by ID."""
    return CarResponse.model_validate(await service.get(car_id))


@router.post("", response_model=CarResponse, status_code=status.HTTP_201_CREATED)
async def create_car(
    car_data: CarCreate,
    current_identity: HostIdentity,
    service: CarServiceDep,
) -> CarResponse:
    """List a new car owned by the caller."""
    car = await service.create(current_identity, **car_data.model_dump())
    return CarResponse.model_validate(car)


@router.put("/{car_id}", response_model=CarResponse)
async def update_car(
    car_id: str,
    car_data: CarUpdate,
    current_identity: HostIdentity,
    service: CarServiceDep,
) -> CarResponse:
    """Update a car (owning host only)."""
    car = await service.update(current_identity, car_id, car_data.model_dump(exclude_unset=True))
    return CarResponse.model_validate(car)


@router.delete("/{car_id}", response_model=MessageResponse)
async def delete_car(
    car_id: str,
    current_identity: HostIdentity,
    service: CarServiceDep,
) -> MessageResponse:
    """Delete a car (owning host only)."""
    await service.delete(current_identity, car_id)
    return MessageResponse(message="Car deleted successfully")
