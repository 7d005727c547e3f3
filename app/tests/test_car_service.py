from datetime import date
from decimal import Decimal

import pytest

from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from app.domain.entities import Identity, UserRole
from app.services.booking_service import BookingService
from app.services.car_service import CarService
from app.tests.factories import identity_of, seed_car


@pytest.fixture
def service(memory_store) -> CarService:
    return CarService(memory_store)


async def test_create_assigns_caller_as_host(service, host, other_host):
    car = await service.create(
        identity_of(host),
        make="Honda",
        model="Civic",
        year=2021,
        price=Decimal("60"),
        location="Austin, TX",
        host_id=other_host.id,
    )

    assert car.host_id == host.id
    assert car.availability is True


async def test_renter_cannot_create(service, renter):
    with pytest.raises(AuthorizationError):
        await service.create(
            identity_of(renter), make="Honda", model="Civic", year=2021, price=Decimal("60"), location="X"
        )


async def test_price_must_be_positive(service, host, car):
    with pytest.raises(ValidationError):
        await service.create(
            identity_of(host), make="Honda", model="Civic", year=2021, price=Decimal("0"), location="X"
        )
    with pytest.raises(ValidationError):
        await service.update(identity_of(host), car.id, {"price": Decimal("-5")})


async def test_update_is_partial(service, host, car):
    updated = await service.update(identity_of(host), car.id, {"price": Decimal("80"), "availability": False})

    assert updated.price == Decimal("80")
    assert updated.availability is False
    assert updated.make == car.make
    assert updated.location == car.location


async def test_update_check_order(service, renter, other_host, car):
    with pytest.raises(AuthorizationError):
        await service.update(identity_of(renter), "missing", {"make": "Ford"})
    with pytest.raises(NotFoundError):
        await service.update(identity_of(other_host), "missing", {"make": "Ford"})
    with pytest.raises(AuthorizationError):
        await service.update(identity_of(other_host), car.id, {"make": "Ford"})


async def test_admin_is_not_the_owner(service, car):
    admin = Identity(id="admin-1", email="admin@example.com", role=UserRole.ADMIN)
    with pytest.raises(AuthorizationError):
        await service.delete(admin, car.id)


async def test_delete_car(service, host, car):
    await service.delete(identity_of(host), car.id)

    with pytest.raises(NotFoundError):
        await service.get(car.id)


async def test_delete_car_with_bookings_conflicts(service, memory_store, host, renter, car):
    await BookingService(memory_store).create_booking(
        identity_of(renter), car.id, date(2024, 6, 1), date(2024, 6, 2)
    )

    with pytest.raises(ConflictError):
        await service.delete(identity_of(host), car.id)


async def test_listing_and_search(service, memory_store, host, car):
    hidden = await seed_car(memory_store, host, location="Oakland, CA", availability=False)
    newer = await seed_car(memory_store, host, make="Tesla", location="Los Angeles, CA")

    assert [c.id for c in await service.list_available()] == [newer.id, car.id]
    assert [c.id for c in await service.search("san FRAN")] == [car.id]
    assert [c.id for c in await service.search("   ")] == [newer.id, car.id]
    assert await service.search("oakland") == []
    assert {c.id for c in await service.list_for_host(host.id)} == {car.id, hidden.id, newer.id}


async def test_get_is_idempotent(service, car):
    first = await service.get(car.id)
    second = await service.get(car.id)

    assert first == second
