"""
Product Catalog Backend — Bearer Token Authentication
=======================================================

What:  FastAPI dependency that turns an `Authorization: Bearer <jwt>` header
       into a CurrentUser, plus a helper that issues such tokens.
How:   PyJWT verifies the signature and expiry with the configured secret.
       The user id is read from the `id` claim (falling back to `sub`).
Who:   Injected into the protected product routes; the resulting CurrentUser
       is passed explicitly into every ProductService call.

Failure modes (all → 401):
    - no Authorization header / not a Bearer scheme → "Not authorized, no token"
    - bad signature, expired, malformed, no user id → "Not authorized"
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import settings
from app.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

# auto_error=False: a missing header is reported through UnauthorizedError
# so it gets the same JSON error body as every other failure
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """The authenticated caller of a request."""
    id: str


def create_access_token(
    user_id: str,
    expires_in: Optional[timedelta] = None,
) -> str:
    """
    Issues a signed access token for `user_id`.

    Used by the test suite and local tooling; production tokens come from
    the user service that shares JWT_SECRET.
    """
    now = datetime.now(timezone.utc)
    lifetime = expires_in if expires_in is not None else timedelta(days=settings.jwt_expires_days)
    payload = {
        "id": str(user_id),
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> CurrentUser:
    """
    Verifies `token` and returns the user it identifies.

    Raises:
        UnauthorizedError: invalid signature, expired, malformed, or no user id.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired access token")
        raise UnauthorizedError(message="Not authorized", context={"reason": "expired"})
    except jwt.InvalidTokenError as e:
        logger.info("Rejected invalid access token: %s", type(e).__name__)
        raise UnauthorizedError(message="Not authorized", context={"reason": "invalid"})

    user_id = payload.get("id") or payload.get("sub")
    if not user_id:
        raise UnauthorizedError(message="Not authorized", context={"reason": "no_user_id"})
    return CurrentUser(id=str(user_id))


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    """
    Resolves the authenticated user for protected routes.

    Example:
        @router.post("/products")
        async def add_product(user: CurrentUser = Depends(get_current_user)):
            ...
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError(message="Not authorized, no token")
    return decode_access_token(credentials.credentials)
