"""API dependencies for authentication and common operations."""

from datetime import date
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from himaagarshare.core.exceptions import AuthenticationError, AuthorizationError
from himaagarshare.core.security import ActingUser, acting_user_from_token
from himaagarshare.database import get_db
from himaagarshare.gateways.mock import get_payment_gateway
from himaagarshare.utils.clock import today

# Security scheme
security = HTTPBearer(auto_error=False)

__all__ = [
    "get_acting_user",
    "get_current_host",
    "get_current_renter",
    "get_db",
    "get_payment_gateway",
    "get_today",
]


async def get_acting_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> ActingUser:
    """Resolve the identity provider token into the acting user."""
    if credentials is None:
        raise AuthenticationError("Access denied. No token provided.")
    return acting_user_from_token(credentials.credentials)


async def get_current_host(
    acting_user: Annotated[ActingUser, Depends(get_acting_user)],
) -> ActingUser:
    """Get acting user and verify they are a host."""
    if not acting_user.is_host:
        raise AuthorizationError("Access denied. Host role required.")
    return acting_user


async def get_current_renter(
    acting_user: Annotated[ActingUser, Depends(get_acting_user)],
) -> ActingUser:
    """Get acting user and verify they are a renter."""
    if not acting_user.is_renter:
        raise AuthorizationError("Access denied. Renter role required.")
    return acting_user


def get_today() -> date:
    """Calendar date used for the no-past-dating check."""
    return today()
