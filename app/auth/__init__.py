# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Resolves bearer tokens to usernames.
#
# Usage:
#   from app.auth import CurrentUsername, Identity
#
#   @router.get("/protected")
#   def protected(username: CurrentUsername):
#       return {"username": username}
# =============================================================================

from app.auth.dependencies import (
    CurrentUsername,
    Identity,
    decode_username,
    get_identity,
    require_identity,
    resolve_identity,
)
from app.auth.models import TokenPayload

__all__ = [
    "CurrentUsername",
    "Identity",
    "TokenPayload",
    "decode_username",
    "get_identity",
    "require_identity",
    "resolve_identity",
]
