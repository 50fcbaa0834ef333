# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Resolves the caller's identity (a username) from the bearer token.
#
# A missing header, a non-Bearer scheme and a token that fails to decode
# all resolve to "anonymous" (None). Routes that need a caller use
# require_identity, which turns anonymous into a 401.
#
# Usage:
#   from app.auth import CurrentUsername
#
#   @router.get("/protected")
#   def protected(username: CurrentUsername):
#       return {"username": username}
# =============================================================================

import logging
from typing import Annotated, Optional

from fastapi import Depends, Header
from jose import JWTError, jwt
from pydantic import ValidationError as PayloadError

from app.config import settings
from app.auth.models import TokenPayload
from app.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)


def decode_username(token: str) -> str:
    """
    Verify a token and return its subject.

    Raises:
        JWTError: If the signature, expiry or claims are invalid
        pydantic.ValidationError: If the payload has no usable subject
    """
    payload = jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        options={"verify_aud": False},
    )
    username = TokenPayload(**payload).sub.strip()
    if not username:
        raise JWTError("Token subject is empty")
    return username


def resolve_identity(authorization: Optional[str]) -> Optional[str]:
    """
    Resolve a raw Authorization header value to a username.

    Returns None unless the value is "Bearer <valid token>".
    """
    if not authorization or not authorization.startswith("Bearer "):
        logger.debug("No valid Authorization header found")
        return None
    return _username_or_none(authorization[len("Bearer "):])


def _username_or_none(token: str) -> Optional[str]:
    try:
        return decode_username(token)
    except (JWTError, PayloadError) as e:
        logger.warning(f"Error extracting username from token: {e}")
        return None


async def get_identity(
    authorization: Optional[str] = Header(None)
) -> Optional[str]:
    """
    Optionally get the caller's username from the Authorization header.

    The header must read exactly "Bearer <token>"; anything else is
    anonymous. Returns None instead of raising.
    """
    return resolve_identity(authorization)


async def require_identity(
    identity: Optional[str] = Depends(get_identity)
) -> str:
    """
    Get the caller's username, or fail with 401.

    Raises:
        UnauthorizedError: If no valid token was sent
    """
    if identity is None:
        raise UnauthorizedError()
    return identity


# Type aliases for dependency injection
Identity = Annotated[Optional[str], Depends(get_identity)]
CurrentUsername = Annotated[str, Depends(require_identity)]
