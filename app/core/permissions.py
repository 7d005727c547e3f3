"""Role-based access control and per-operation capability checks."""

from enum import Enum

from app.domain.booking_state import BookingStatus
from app.domain.entities import BookingRecord, CarRecord, Identity, UserRole


class Permission(str, Enum):
    """System permissions."""

    # Car permissions
    VIEW_CAR = "view_car"
    CREATE_CAR = "create_car"
    EDIT_CAR = "edit_car"
    DELETE_CAR = "delete_car"

    # Booking permissions
    CREATE_BOOKING = "create_booking"
    CANCEL_BOOKING = "cancel_booking"
    MANAGE_BOOKING_STATUS = "manage_booking_status"


# Role to permissions mapping
ROLE_PERMISSIONS: dict[UserRole, set[Permission]] = {
    UserRole.USER: {
        Permission.VIEW_CAR,
        Permission.CREATE_BOOKING,
        Permission.CANCEL_BOOKING,
    },
    UserRole.HOST: {
        Permission.VIEW_CAR,
        Permission.CREATE_CAR,
        Permission.EDIT_CAR,
        Permission.DELETE_CAR,
        Permission.CREATE_BOOKING,
        Permission.CANCEL_BOOKING,
        Permission.MANAGE_BOOKING_STATUS,
    },
    UserRole.ADMIN: {
        # Admins have all permissions
        perm for perm in Permission
    },
}


def has_permission(role: UserRole, permission: Permission) -> bool:
    """Check if a role has a specific permission."""
    return permission in ROLE_PERMISSIONS.get(role, set())


def can_create_car(identity: Identity) -> bool:
    return has_permission(identity.role, Permission.CREATE_CAR)


def can_edit_car(identity: Identity, car: CarRecord) -> bool:
    """Only the owning host may change a car; admins are not exempt."""
    return has_permission(identity.role, Permission.EDIT_CAR) and car.host_id == identity.id


def can_delete_car(identity: Identity, car: CarRecord) -> bool:
    return has_permission(identity.role, Permission.DELETE_CAR) and car.host_id == identity.id


def can_view_user_bookings(identity: Identity, user_id: str) -> bool:
    return identity.id == user_id


def can_view_car_bookings(identity: Identity, car: CarRecord) -> bool:
    return identity.id == car.host_id


def is_booking_party(identity: Identity, booking: BookingRecord, host_id: str) -> bool:
    """True for the booking's renter and for the owning host of its car."""
    return identity.id in (booking.user_id, host_id)


def allowed_status_targets(
    identity: Identity,
    booking: BookingRecord,
    host_id: str,
) -> frozenset[BookingStatus]:
    """Statuses the caller may move a booking to.

    The owning host may set any status. A renter who is not also the host may
    only cancel. Everyone else gets nothing.
    """
    if identity.id == host_id:
        return frozenset(BookingStatus)
    if identity.id == booking.user_id:
        return frozenset({BookingStatus.CANCELLED})
    return frozenset()
