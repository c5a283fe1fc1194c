"""Exceptions raised by the storefront client."""
from typing import Optional


class StorefrontException(Exception):
    """Base exception for all storefront client errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class AuthenticationRequired(StorefrontException):
    """No session token is available for an authenticated call."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class AuthorizationException(StorefrontException):
    """The current user lacks the role required for the action."""

    pass


class ApiError(StorefrontException):
    """Backend call failed at the transport, HTTP or envelope level."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ValidationException(StorefrontException):
    """User input rejected before any network call."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class StorageException(StorefrontException):
    """Client-side persistence failed."""

    pass
