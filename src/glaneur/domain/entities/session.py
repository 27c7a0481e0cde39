"""
Session entity - issued bearer credential.
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class Session:
    """
    Bearer session issued after a verified sign-in.

    Self-expiring and never mutated. Carries no key material.
    """

    token: str
    user_id: UUID
    wallet_address: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """Identity extracted from a valid session token."""

    user_id: UUID
    wallet_address: str
