"""
Challenge entity - single-use sign-in challenge.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Optional


@dataclass
class Challenge:
    """
    Challenge a wallet must sign to prove key ownership.

    Business rules:
    - Nonce is globally unique and keys the challenge in storage
    - Usable exactly once: ISSUED -> CONSUMED or EXPIRED, both terminal
    - Expires after a fixed TTL
    """

    wallet_address: str
    nonce: str
    message: str
    issued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    expires_at: Optional[datetime] = None
    consumed: bool = False

    def __post_init__(self):
        """Validate challenge data after initialization."""
        if not self.nonce:
            raise ValueError("Challenge nonce is required")
        if not self.message:
            raise ValueError("Challenge message is required")
        if self.expires_at is None:
            self.expires_at = self.issued_at + timedelta(minutes=5)
        if self.expires_at <= self.issued_at:
            raise ValueError("Challenge must expire after it is issued")

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check whether the challenge TTL has elapsed."""
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at

    def consume(self) -> "Challenge":
        """
        Mark challenge as consumed.

        Returns:
            Snapshot of the challenge as it was before consumption

        Raises:
            ValueError: If challenge was already consumed
        """
        if self.consumed:
            raise ValueError(f"Challenge {self.nonce[:8]} already consumed")

        snapshot = replace(self)
        self.consumed = True
        return snapshot

    def ttl_seconds(self, now: Optional[datetime] = None) -> int:
        """Whole seconds left before expiry (never negative)."""
        now = now or datetime.now(timezone.utc)
        return max(0, int((self.expires_at - now).total_seconds()))

    def to_dict(self) -> dict:
        """Convert entity to dictionary representation."""
        return {
            "wallet_address": self.wallet_address,
            "nonce": self.nonce,
            "message": self.message,
            "issued_at": self.issued_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "consumed": self.consumed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Challenge":
        """Rebuild entity from its dictionary representation."""
        return cls(
            wallet_address=data["wallet_address"],
            nonce=data["nonce"],
            message=data["message"],
            issued_at=datetime.fromisoformat(data["issued_at"]),
            expires_at=datetime.fromisoformat(data["expires_at"]),
            consumed=bool(data.get("consumed", False)),
        )
