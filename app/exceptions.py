# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every failure the services raise maps to one HTTP status here; the
# handlers in main.py turn them into structured JSON responses.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class MarketplaceException(Exception):
    """
    Base exception for the marketplace API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "MARKETPLACE_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}
        self.headers = headers

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Request Exceptions
# =============================================================================

class ValidationError(MarketplaceException):
    """Raised when a required field is missing or has an invalid value."""

    def __init__(self, field: str, message: str):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            suggestion=f"Provide a valid value for '{field}'",
            details={"field": field},
        )
        self.field = field


# =============================================================================
# Access Exceptions
# =============================================================================

class UnauthorizedError(MarketplaceException):
    """Raised when no valid bearer token accompanies the request."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            code="UNAUTHORIZED",
            status_code=401,
            suggestion="Send a valid token in the 'Authorization: Bearer <token>' header",
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(MarketplaceException):
    """Raised when the caller is authenticated but not allowed to act."""

    def __init__(self, message: str, action: str | None = None):
        super().__init__(
            message=message,
            code="FORBIDDEN",
            status_code=403,
            details={"action": action} if action else None,
        )


# =============================================================================
# Lookup Exceptions
# =============================================================================

class NotFoundError(MarketplaceException):
    """Raised when a requested row doesn't exist."""

    def __init__(
        self,
        message: str,
        code: str = "NOT_FOUND",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=404,
            suggestion=suggestion,
            details=details,
        )


class SoftwareNotFoundError(NotFoundError):
    """Raised when a software ID doesn't exist."""

    def __init__(self, software_id: int):
        super().__init__(
            message=f"Software not found: {software_id}",
            code="SOFTWARE_NOT_FOUND",
            suggestion="Check that the software id is correct and the listing hasn't been deleted",
            details={"software_id": software_id},
        )


class UserNotFoundError(NotFoundError):
    """Raised when the token's username has no user record."""

    def __init__(self, username: str):
        super().__init__(
            message=f"User not found: {username}",
            code="USER_NOT_FOUND",
            details={"username": username},
        )


# =============================================================================
# Purchase Exceptions
# =============================================================================

class ConflictError(MarketplaceException):
    """Raised when a write collides with existing state."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=409,
            details=details,
        )


class AlreadyPurchasedError(ConflictError):
    """Raised when a user buys a listing they already own."""

    def __init__(self, username: str, software_id: int):
        super().__init__(
            message="Software already purchased",
            code="ALREADY_PURCHASED",
            details={"username": username, "software_id": software_id},
        )


# =============================================================================
# Storage Exceptions
# =============================================================================

class StorageError(MarketplaceException):
    """Raised when the upload directory can't be written or cleaned up."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(
            message=message,
            code="STORAGE_ERROR",
            status_code=500,
            suggestion="Check that the upload directory exists and is writable",
            details={"path": path} if path else None,
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def marketplace_exception_handler(
    request: Request,
    exc: MarketplaceException
) -> JSONResponse:
    """
    Convert MarketplaceException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle request parsing errors raised by FastAPI (e.g. non-integer ids).
    """
    errors = exc.errors() if hasattr(exc, "errors") else str(exc)
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "code": "REQUEST_VALIDATION_ERROR",
            "errors": [
                {"loc": list(err.get("loc", [])), "msg": err.get("msg")}
                for err in errors
            ] if isinstance(errors, list) else errors,
        }
    )
