"""
Authentication domain exceptions.
"""

from glaneur.domain.exceptions.base import GlaneurException


class SignatureInvalidError(GlaneurException):
    """
    Raised when a signed challenge cannot be accepted.

    Covers bad signatures as well as unknown, expired, reused or
    mismatched challenges. Never retried.
    """

    def __init__(self, reason: str = "Invalid wallet signature"):
        super().__init__(reason, code="SIGNATURE_INVALID")
        self.reason = reason


class AuthRequiredError(GlaneurException):
    """Raised when a protected endpoint is called without a bearer token."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="AUTH_REQUIRED")


class InvalidTokenError(GlaneurException):
    """Raised when a session token is malformed, tampered or unknown."""

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message, code="AUTH_INVALID")


class ExpiredTokenError(InvalidTokenError):
    """Raised when a session token has expired."""

    def __init__(self):
        super().__init__("Authentication token has expired")
