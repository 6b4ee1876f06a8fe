"""Identity provider token handling.

Tokens are issued by the external identity provider and only verified here.
``create_access_token`` exists for development tooling and tests.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any
from uuid import UUID

from jose import JWTError, jwt

from himaagarshare.config import settings
from himaagarshare.core.exceptions import AuthenticationError


class Role(str, Enum):
    """Role claim carried by identity tokens."""

    HOST = "host"
    RENTER = "renter"


@dataclass(frozen=True)
class ActingUser:
    """Authenticated caller passed explicitly into every booking operation."""

    id: UUID
    role: Role

    @property
    def is_host(self) -> bool:
        return self.role == Role.HOST

    @property
    def is_renter(self) -> bool:
        return self.role == Role.RENTER


def create_access_token(
    user_id: UUID | str,
    role: Role | str,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token."""
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode = {
        "sub": str(user_id),
        "role": Role(role).value,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str, token_type: str = "access") -> dict[str, Any]:
    """Verify and decode a JWT token."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        raise AuthenticationError(f"Token validation failed: {str(e)}")
    if payload.get("type") != token_type:
        raise AuthenticationError("Invalid token type")
    return payload


def acting_user_from_token(token: str) -> ActingUser:
    """Resolve the ``sub`` and ``role`` claims into an ``ActingUser``."""
    payload = verify_token(token, token_type="access")
    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or not role:
        raise AuthenticationError("Invalid token payload")
    try:
        return ActingUser(id=UUID(user_id), role=Role(role))
    except ValueError:
        raise AuthenticationError("Invalid token payload")
