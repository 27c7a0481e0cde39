"""
Collection entity - one collect request for a (post, user) pair.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4


class CollectionStatus(str, Enum):
    """Collection processing states."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass
class Collection:
    """
    Collection entity tracking a server-signed compressed mint.

    Business rules:
    - At most one row per (post_id, user_id)
    - Status transitions: PENDING -> CONFIRMED or FAILED, exactly once
    - A FAILED row may be re-armed to PENDING for a retry
    - tx_signature is recorded before the transaction is broadcast
    - asset_id is only known once CONFIRMED
    """

    post_id: UUID
    user_id: UUID
    wallet_address: str
    id: UUID = field(default_factory=uuid4)
    status: CollectionStatus = field(default=CollectionStatus.PENDING)
    tx_signature: Optional[str] = None
    asset_id: Optional[str] = None
    client_ip: Optional[str] = None
    last_valid_block_height: Optional[int] = None
    failure_reason: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        """Validate collection data after initialization."""
        if not self.wallet_address:
            raise ValueError("Recipient wallet address is required")

    @property
    def is_pending(self) -> bool:
        return self.status == CollectionStatus.PENDING

    def age(self, now: Optional[datetime] = None) -> timedelta:
        """Time since the current attempt started."""
        return (now or datetime.now()) - self.created_at

    def is_stale(self, threshold_seconds: int, now: Optional[datetime] = None) -> bool:
        """Check if a pending attempt outlived the stale threshold."""
        return self.age(now).total_seconds() > threshold_seconds

    def attach_signature(self, tx_signature: str, last_valid_block_height: int) -> None:
        """
        Record the signed transaction before broadcast.

        Raises:
            ValueError: If not in PENDING status or already signed
        """
        if self.status != CollectionStatus.PENDING:
            raise ValueError(
                f"Cannot sign collection in {self.status.value} status"
            )
        if self.tx_signature:
            raise ValueError("Collection already has a transaction signature")

        self.tx_signature = tx_signature
        self.last_valid_block_height = last_valid_block_height
        self.updated_at = datetime.now()

    def confirm(self, asset_id: Optional[str] = None) -> None:
        """
        Mark collection as confirmed.

        Raises:
            ValueError: If not in PENDING status
        """
        if self.status != CollectionStatus.PENDING:
            raise ValueError(
                f"Cannot confirm collection in {self.status.value} status"
            )

        self.status = CollectionStatus.CONFIRMED
        self.asset_id = asset_id or self.asset_id
        self.updated_at = datetime.now()

    def fail(self, reason: str) -> None:
        """
        Mark collection as failed.

        Raises:
            ValueError: If not in PENDING status
        """
        if self.status != CollectionStatus.PENDING:
            raise ValueError(f"Cannot fail collection in {self.status.value} status")

        self.status = CollectionStatus.FAILED
        self.failure_reason = reason
        self.updated_at = datetime.now()

    def rearm(self, wallet_address: str, client_ip: Optional[str]) -> None:
        """
        Reset a failed collection for a new attempt.

        Raises:
            ValueError: If not in FAILED status
        """
        if self.status != CollectionStatus.FAILED:
            raise ValueError(
                f"Cannot retry collection in {self.status.value} status"
            )

        now = datetime.now()
        self.status = CollectionStatus.PENDING
        self.wallet_address = wallet_address
        self.client_ip = client_ip
        self.tx_signature = None
        self.asset_id = None
        self.last_valid_block_height = None
        self.failure_reason = None
        self.created_at = now
        self.updated_at = now

    def to_dict(self) -> dict:
        """Convert entity to dictionary representation."""
        return {
            "id": str(self.id),
            "post_id": str(self.post_id),
            "user_id": str(self.user_id),
            "wallet_address": self.wallet_address,
            "status": self.status.value,
            "tx_signature": self.tx_signature,
            "asset_id": self.asset_id,
            "failure_reason": self.failure_reason,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
