# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from typing import Optional

from pydantic import BaseModel, ConfigDict


class TokenPayload(BaseModel):
    """
    Decoded bearer token payload.

    Tokens are issued by the account service; only the subject
    (the username) is used here.
    """

    model_config = ConfigDict(extra="allow")

    sub: str  # Username
    exp: Optional[int] = None  # Expiration timestamp
    iat: Optional[int] = None  # Issued at timestamp
