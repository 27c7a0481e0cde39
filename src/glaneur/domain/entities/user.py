"""
User entity - canonical identity anchored on a wallet address.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from glaneur.domain.value_objects.wallet_address import WalletAddress

DEFAULT_WALLET_LABEL = "External Wallet"


@dataclass
class User:
    """
    User entity - minimal Web3 identity.

    Created lazily on first verified sign-in. The wallet address is the
    immutable anchor; display name and slug are derived from it.
    """

    id: UUID = field(default_factory=uuid4)
    wallet_address: str = field(default="")
    display_name: str = field(default="")
    slug: str = field(default="")
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        """Validate user data after initialization."""
        if not self.wallet_address:
            raise ValueError("Wallet address is required")

        wallet = WalletAddress(self.wallet_address)
        if not self.display_name:
            self.display_name = wallet.abbreviated()
        if not self.slug:
            self.slug = wallet.slug_base()

    def to_dict(self) -> dict:
        """Convert entity to dictionary representation."""
        return {
            "id": str(self.id),
            "wallet_address": self.wallet_address,
            "display_name": self.display_name,
            "slug": self.slug,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class UserWallet:
    """Wallet linked to a user account."""

    user_id: UUID
    address: str
    id: UUID = field(default_factory=uuid4)
    label: Optional[str] = None
    is_primary: bool = False
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        """Validate wallet address format."""
        WalletAddress(self.address)
