import asyncio
from datetime import date
from decimal import Decimal

import pytest

from app.core.exceptions import (
    AuthorizationError,
    DatesNotAvailable,
    InternalError,
    InvalidBookingStatus,
    NotFoundError,
    ValidationError,
)
from app.domain.booking_state import BookingStatus
from app.domain.entities import BookingRecord
from app.services.booking_service import BookingService
from app.tests.factories import identity_of, seed_car


@pytest.fixture
def service(memory_store) -> BookingService:
    return BookingService(memory_store, strict_transitions=False)


@pytest.fixture
async def existing_booking(service, renter, car) -> BookingRecord:
    """Booking A on car1: 2024-06-01..2024-06-03, confirmed."""
    return await service.create_booking(identity_of(renter), car.id, date(2024, 6, 1), date(2024, 6, 3))


async def test_admitted_booking_is_confirmed_and_priced(service, renter, car):
    booking = await service.create_booking(
        identity_of(renter), car.id, date(2024, 6, 1), date(2024, 6, 3)
    )

    assert booking.status is BookingStatus.CONFIRMED
    assert booking.total_price == Decimal("225.00")
    assert booking.user_id == renter.id
    assert booking.car_id == car.id


async def test_boundary_day_conflicts(service, renter, car, existing_booking):
    with pytest.raises(DatesNotAvailable):
        await service.create_booking(identity_of(renter), car.id, date(2024, 6, 3), date(2024, 6, 5))


async def test_adjacent_range_is_accepted(service, renter, car, existing_booking):
    booking = await service.create_booking(
        identity_of(renter), car.id, date(2024, 6, 4), date(2024, 6, 5)
    )

    assert booking.total_price == Decimal("150.00")


async def test_single_day_booking(service, renter, car):
    booking = await service.create_booking(
        identity_of(renter), car.id, date(2024, 7, 1), date(2024, 7, 1)
    )

    assert booking.total_price == Decimal("75.00")


async def test_end_before_start_is_rejected(service, renter, car):
    with pytest.raises(ValidationError):
        await service.create_booking(identity_of(renter), car.id, date(2024, 6, 5), date(2024, 6, 4))


async def test_unavailable_or_missing_car_is_not_found(service, memory_store, renter, host):
    hidden = await seed_car(memory_store, host, availability=False)

    with pytest.raises(NotFoundError):
        await service.create_booking(identity_of(renter), hidden.id, date(2024, 6, 1), date(2024, 6, 2))
    with pytest.raises(NotFoundError):
        await service.create_booking(identity_of(renter), "missing", date(2024, 6, 1), date(2024, 6, 2))


async def test_client_total_is_ignored(service, renter, car):
    booking = await service.create_booking(
        identity_of(renter), car.id, date(2024, 6, 1), date(2024, 6, 2), total_price=Decimal("1.00")
    )

    assert booking.total_price == Decimal("150.00")


async def test_cancelled_booking_releases_dates(service, renter, car, existing_booking):
    await service.update_booking_status(identity_of(renter), existing_booking.id, "cancelled")

    booking = await service.create_booking(
        identity_of(renter), car.id, date(2024, 6, 2), date(2024, 6, 3)
    )
    assert booking.status is BookingStatus.CONFIRMED


async def test_concurrent_overlapping_requests_admit_exactly_one(service, renter, car):
    results = await asyncio.gather(
        service.create_booking(identity_of(renter), car.id, date(2024, 8, 1), date(2024, 8, 5)),
        service.create_booking(identity_of(renter), car.id, date(2024, 8, 3), date(2024, 8, 7)),
        return_exceptions=True,
    )

    admitted = [r for r in results if isinstance(r, BookingRecord)]
    rejected = [r for r in results if isinstance(r, DatesNotAvailable)]
    assert len(admitted) == 1
    assert len(rejected) == 1


async def test_admission_lock_timeout_is_internal_error(memory_store, renter, car):
    memory_store.lock_timeout = 0.05
    service = BookingService(memory_store)

    async with memory_store.admission(car.id):
        with pytest.raises(InternalError):
            await service.create_booking(
                identity_of(renter), car.id, date(2024, 9, 1), date(2024, 9, 2)
            )


# ==================== STATUS CHANGES ====================


async def test_renter_cannot_confirm(service, renter, existing_booking):
    with pytest.raises(AuthorizationError) as exc_info:
        await service.update_booking_status(identity_of(renter), existing_booking.id, "confirmed")

    assert exc_info.value.detail == "Users can only cancel bookings"


async def test_renter_can_cancel(service, renter, existing_booking):
    updated = await service.update_booking_status(
        identity_of(renter), existing_booking.id, "cancelled"
    )

    assert updated.status is BookingStatus.CANCELLED


async def test_host_can_set_any_status(service, host, existing_booking):
    for status in ("pending", "completed", "confirmed", "cancelled"):
        updated = await service.update_booking_status(identity_of(host), existing_booking.id, status)
        assert updated.status.value == status


async def test_stranger_is_forbidden(service, other_host, existing_booking):
    with pytest.raises(AuthorizationError) as exc_info:
        await service.update_booking_status(
            identity_of(other_host), existing_booking.id, "cancelled"
        )

    assert exc_info.value.detail == "Not authorized"


async def test_unknown_status_and_booking(service, host, existing_booking):
    with pytest.raises(ValidationError):
        await service.update_booking_status(identity_of(host), existing_booking.id, "archived")
    with pytest.raises(NotFoundError):
        await service.update_booking_status(identity_of(host), "missing", "cancelled")


async def test_strict_transitions_reject_reopening(memory_store, host, renter, car):
    service = BookingService(memory_store, strict_transitions=True)
    booking = await service.create_booking(
        identity_of(renter), car.id, date(2024, 6, 1), date(2024, 6, 3)
    )
    await service.update_booking_status(identity_of(host), booking.id, "cancelled")

    with pytest.raises(InvalidBookingStatus):
        await service.update_booking_status(identity_of(host), booking.id, "confirmed")


# ==================== LISTINGS ====================


async def test_list_for_user_is_self_only_and_carries_car(service, renter, other_host, car, existing_booking):
    entries = await service.list_for_user(identity_of(renter), renter.id)

    assert [e.booking.id for e in entries] == [existing_booking.id]
    assert entries[0].car.make == "Toyota"
    with pytest.raises(AuthorizationError):
        await service.list_for_user(identity_of(other_host), renter.id)


async def test_list_for_user_newest_first(service, renter, car):
    first = await service.create_booking(identity_of(renter), car.id, date(2024, 6, 10), date(2024, 6, 11))
    second = await service.create_booking(identity_of(renter), car.id, date(2024, 6, 1), date(2024, 6, 2))

    entries = await service.list_for_user(identity_of(renter), renter.id)
    assert [e.booking.id for e in entries] == [second.id, first.id]


async def test_list_for_car_is_host_only_by_start_date(service, host, renter, car):
    late = await service.create_booking(identity_of(renter), car.id, date(2024, 6, 10), date(2024, 6, 11))
    early = await service.create_booking(identity_of(renter), car.id, date(2024, 6, 1), date(2024, 6, 2))

    entries = await service.list_for_car(identity_of(host), car.id)
    assert [e.booking.id for e in entries] == [early.id, late.id]
    assert entries[0].user.email == renter.email

    with pytest.raises(AuthorizationError):
        await service.list_for_car(identity_of(renter), car.id)
    with pytest.raises(NotFoundError):
        await service.list_for_car(identity_of(host), "missing")


async def test_total_too_large_to_store_is_rejected(service, memory_store, renter, host):
    pricey = await seed_car(memory_store, host, price=Decimal("99999999.99"))

    with pytest.raises(ValidationError):
        await service.create_booking(
            identity_of(renter), pricey.id, date(2024, 6, 1), date(2024, 6, 2)
        )
    assert await memory_store.list_bookings_for_car(pricey.id) == []


async def test_host_reopening_cancelled_booking_skips_overlap_check(service, host, renter, car):
    cancelled = await service.create_booking(
        identity_of(renter), car.id, date(2024, 6, 1), date(2024, 6, 3)
    )
    await service.update_booking_status(identity_of(host), cancelled.id, "cancelled")
    replacement = await service.create_booking(
        identity_of(renter), car.id, date(2024, 6, 2), date(2024, 6, 4)
    )

    reopened = await service.update_booking_status(identity_of(host), cancelled.id, "confirmed")

    # Status changes overwrite unconditionally; only admission checks overlaps
    assert reopened.status is BookingStatus.CONFIRMED
    entries = await service.list_for_car(identity_of(host), car.id)
    assert {e.booking.id for e in entries if e.booking.status is BookingStatus.CONFIRMED} == {
        cancelled.id,
        replacement.id,
    }


async def test_strict_transitions_forbid_reopening_over_a_replacement(memory_store, host, renter, car):
    service = BookingService(memory_store, strict_transitions=True)
    cancelled = await service.create_booking(
        identity_of(renter), car.id, date(2024, 6, 1), date(2024, 6, 3)
    )
    await service.update_booking_status(identity_of(host), cancelled.id, "cancelled")
    await service.create_booking(identity_of(renter), car.id, date(2024, 6, 2), date(2024, 6, 4))

    with pytest.raises(InvalidBookingStatus):
        await service.update_booking_status(identity_of(host), cancelled.id, "confirmed")
