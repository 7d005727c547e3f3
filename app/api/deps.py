"""API dependencies for authentication and common operations."""

from typing import Annotated, Any, Callable

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import AuthenticationError, AuthorizationError
from app.core.security import decode_identity
from app.database import get_db
from app.domain.entities import Identity, UserRole
from app.repositories.base import MarketplaceStore
from app.repositories.memory import MemoryStore
from app.repositories.sql import SqlStore
from app.services.booking_service import BookingService
from app.services.car_service import CarService

# Security scheme; missing credentials are reported by get_current_identity
security = HTTPBearer(auto_error=False)

# Process-wide store for STORAGE_BACKEND=memory
_memory_store: MemoryStore | None = None


def get_memory_store() -> MemoryStore:
    global _memory_store
    if _memory_store is None:
        _memory_store = MemoryStore()
    return _memory_store


def get_store(db: Annotated[AsyncSession, Depends(get_db)]) -> MarketplaceStore:
    """Return the configured storage backend for this request."""
    if settings.storage_backend == "memory":
        return get_memory_store()
    return SqlStore(db)


def get_car_service(
    store: Annotated[MarketplaceStore, Depends(get_store)],
) -> CarService:
    return CarService(store)


def get_booking_service(
    store: Annotated[MarketplaceStore, Depends(get_store)],
) -> BookingService:
    return BookingService(store)


async def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Identity:
    """Get the caller's identity from the bearer token."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access token required")
    return decode_identity(credentials.credentials)


def require_role(*allowed_roles: UserRole) -> Callable[..., Any]:
    """Dependency to require specific roles."""

    async def role_checker(
        identity: Annotated[Identity, Depends(get_current_identity)],
    ) -> Identity:
        if identity.role not in allowed_roles:
            raise AuthorizationError("Access denied")
        return identity

    return role_checker


# Convenience dependencies
require_host = require_role(UserRole.HOST, UserRole.ADMIN)

CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
HostIdentity = Annotated[Identity, Depends(require_host)]
