"""Password hashing and bearer tokens that carry a caller identity.

A token's claims are exactly an Identity (sub, email, role) plus its kind
("access" or "refresh") and expiry. Access tokens authenticate API calls;
refresh tokens are only accepted by the refresh endpoint.
"""

from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config import settings
from app.core.exceptions import InvalidTokenError
from app.domain.entities import Identity, UserRole

# Password hashing context using Argon2
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)


def _lifetime(token_type: TokenType) -> timedelta:
    if token_type is TokenType.REFRESH:
        return timedelta(days=settings.refresh_token_expire_days)
    return timedelta(minutes=settings.access_token_expire_minutes)


def encode_identity(
    identity: Identity,
    token_type: TokenType = TokenType.ACCESS,
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a token of the given kind for identity."""
    claims: dict[str, Any] = {
        "sub": identity.id,
        "email": identity.email,
        "role": identity.role.value,
        "type": token_type.value,
        "exp": datetime.now(UTC) + (expires_delta or _lifetime(token_type)),
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def issue_tokens(identity: Identity) -> dict[str, str]:
    """Access and refresh token pair for a freshly authenticated identity."""
    return {
        "access_token": encode_identity(identity, TokenType.ACCESS),
        "refresh_token": encode_identity(identity, TokenType.REFRESH),
        "token_type": "bearer",
    }


def decode_identity(token: str, token_type: TokenType = TokenType.ACCESS) -> Identity:
    """Verify a token and turn its claims back into an Identity.

    Raises:
        InvalidTokenError: On a bad signature, expiry, wrong kind of token,
            or claims that do not describe an identity
    """
    try:
        claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise InvalidTokenError(f"Token validation failed: {e}")

    if claims.get("type") != token_type.value:
        raise InvalidTokenError("Invalid token type")

    user_id, email = claims.get("sub"), claims.get("email")
    if not user_id or not email:
        raise InvalidTokenError("Invalid token payload")
    try:
        role = UserRole(claims.get("role"))
    except ValueError:
        raise InvalidTokenError("Invalid token payload")

    return Identity(id=str(user_id), email=email, role=role)
