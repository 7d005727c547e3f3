"""Car catalog operations."""

import logging
from decimal import Decimal
from typing import Any

from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from app.core.permissions import Permission, can_create_car, can_delete_car, can_edit_car, has_permission
from app.domain.entities import CarRecord, Identity
from app.repositories.base import MarketplaceStore

logger = logging.getLogger(__name__)

# Fields a host may clear; a null for any other field leaves it unchanged
NULLABLE_CAR_FIELDS = {"description", "image_url"}


class CarService:
    """Listing, search and host-side management of cars."""

    def __init__(self, store: MarketplaceStore) -> None:
        self.store = store

    async def list_available(self) -> list[CarRecord]:
        return await self.store.list_cars(available_only=True)

    async def search(self, location: str | None) -> list[CarRecord]:
        """Available cars whose location contains the given text, any case."""
        location = (location or "").strip()
        return await self.store.list_cars(available_only=True, location=location or None)

    async def list_for_host(self, host_id: str) -> list[CarRecord]:
        return await self.store.list_cars(host_id=host_id)

    async def get(self, car_id: str) -> CarRecord:
        car = await self.store.get_car(car_id)
        if car is None:
            raise NotFoundError("Car", car_id)
        return car

    async def create(self, identity: Identity, **fields: Any) -> CarRecord:
        """Create a car owned by the caller.

        Any client-supplied owner is ignored; the caller becomes the host.
        """
        if not can_create_car(identity):
            raise AuthorizationError("Host access required")
        fields.pop("host_id", None)
        self._check_price(fields.get("price"))
        car = await self.store.add_car(host_id=identity.id, **fields)
        logger.info(f"Car {car.id} listed by host {identity.id}")
        return car

    async def update(self, identity: Identity, car_id: str, changes: dict[str, Any]) -> CarRecord:
        if not has_permission(identity.role, Permission.EDIT_CAR):
            raise AuthorizationError("Host access required")
        car = await self.get(car_id)
        if not can_edit_car(identity, car):
            raise AuthorizationError("Not authorized")
        changes = {
            k: v
            for k, v in changes.items()
            if k != "host_id" and (v is not None or k in NULLABLE_CAR_FIELDS)
        }
        if "price" in changes:
            self._check_price(changes["price"])
        if not changes:
            return car
        updated = await self.store.update_car(car_id, changes)
        if updated is None:
            raise NotFoundError("Car", car_id)
        return updated

    async def delete(self, identity: Identity, car_id: str) -> None:
        if not has_permission(identity.role, Permission.DELETE_CAR):
            raise AuthorizationError("Host access required")
        car = await self.get(car_id)
        if not can_delete_car(identity, car):
            raise AuthorizationError("Not authorized")
        # Bookings are permanent records and keep referencing their car
        if await self.store.list_bookings_for_car(car_id):
            raise ConflictError("Car has bookings and cannot be deleted; set availability to false instead")
        if not await self.store.delete_car(car_id):
            raise NotFoundError("Car", car_id)
        logger.info(f"Car {car_id} deleted by host {identity.id}")

    @staticmethod
    def _check_price(price: Any) -> None:
        if price is None or Decimal(price) <= 0:
            raise ValidationError("price must be greater than 0")
