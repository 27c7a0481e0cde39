"""
Domain exceptions package.
"""

# Auth exceptions
from glaneur.domain.exceptions.auth import (
    AuthRequiredError,
    ExpiredTokenError,
    InvalidTokenError,
    SignatureInvalidError,
)

# Base exceptions
from glaneur.domain.exceptions.base import (
    DuplicateEntityError,
    EntityNotFoundError,
    GlaneurException,
    ValidationError,
)

# Blockchain exceptions
from glaneur.domain.exceptions.blockchain import (
    SignerNotConfiguredError,
    TransactionRejectedError,
    UpstreamError,
)

# Collect exceptions
from glaneur.domain.exceptions.collect import (
    CollectSupersededError,
    RateLimitedError,
)

__all__ = [
    # Base
    "GlaneurException",
    "EntityNotFoundError",
    "DuplicateEntityError",
    "ValidationError",
    # Auth
    "SignatureInvalidError",
    "AuthRequiredError",
    "InvalidTokenError",
    "ExpiredTokenError",
    # Collect
    "RateLimitedError",
    "CollectSupersededError",
    # Blockchain
    "UpstreamError",
    "TransactionRejectedError",
    "SignerNotConfiguredError",
]
