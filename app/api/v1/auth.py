"""Authentication endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.api.deps import CurrentIdentity, get_store
from app.core.exceptions import AuthenticationError, NotFoundError, ValidationError
from app.core.middleware import login_limiter, register_limiter
from app.core.security import (
    TokenType,
    decode_identity,
    hash_password,
    issue_tokens,
    verify_password,
)
from app.domain.entities import Identity, UserRecord, UserRole
from app.repositories.base import MarketplaceStore
from app.schemas.user import (
    RefreshTokenRequest,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

StoreDep = Annotated[MarketplaceStore, Depends(get_store)]


def _token_response(user: UserRecord) -> TokenResponse:
    tokens = issue_tokens(Identity(id=user.id, email=user.email, role=user.role))
    return TokenResponse(**tokens, user=UserResponse.model_validate(user))


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(register_limiter)],
)
async def register(user_data: UserCreate, store: StoreDep) -> TokenResponse:
    """Register a new renter or host account."""
    if await store.get_user_by_email(user_data.email):
        raise ValidationError("Email already registered")

    user = await store.add_user(
        name=user_data.name,
        email=user_data.email,
        password_hash=hash_password(user_data.password),
        role=UserRole(user_data.role),
    )
    logger.info(f"Registered {user.role.value} account {user.id}")
    return _token_response(user)


@router.post("/login", response_model=TokenResponse, dependencies=[Depends(login_limiter)])
async def login(credentials: UserLogin, store: StoreDep) -> TokenResponse:
    """Login with email and password."""
    user = await store.get_user_by_email(credentials.email)
    if not user or not verify_password(credentials.password, user.password_hash):
        raise AuthenticationError("Invalid email or password")
    return _token_response(user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(request: RefreshTokenRequest, store: StoreDep) -> TokenResponse:
    """Refresh access token using refresh token."""
    identity = decode_identity(request.refresh_token, TokenType.REFRESH)
    user = await store.get_user(identity.id)
    if not user:
        raise AuthenticationError("User not found")
    return _token_response(user)


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(
    current_identity: CurrentIdentity,
    store: StoreDep,
) -> UserResponse:
    """Get current authenticated user profile."""
    user = await store.get_user(current_identity.id)
    if not user:
        raise NotFoundError("User", current_identity.id)
    return UserResponse.model_validate(user)
