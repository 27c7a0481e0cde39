"""
WalletAddress value object - Immutable Solana wallet address.
"""

from dataclasses import dataclass

BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"


@dataclass(frozen=True)
class WalletAddress:
    """
    Value object representing a syntactically plausible Solana address.

    Business rules:
    - Base58 alphabet only
    - Length between 32-44 characters
    - Charset/length check only, not a curve-point check
    - Immutable once created
    """

    address: str

    def __post_init__(self):
        """Validate wallet address on creation."""
        if not self.address:
            raise ValueError("Wallet address cannot be empty")

        if len(self.address) < 32 or len(self.address) > 44:
            raise ValueError(f"Invalid wallet address length: {len(self.address)}")

        if not all(c in BASE58_ALPHABET for c in self.address):
            raise ValueError("Wallet address contains invalid characters")

    @classmethod
    def is_valid(cls, address: str) -> bool:
        """Check an address without raising."""
        try:
            cls(address)
        except (TypeError, ValueError):
            return False
        return True

    def abbreviated(self) -> str:
        """Return display form, e.g. 'Abcd...wxyZ'."""
        return f"{self.address[:4]}...{self.address[-4:]}"

    def slug_base(self) -> str:
        """Return lower-case slug seed, e.g. 'abcd-wxyz'."""
        return f"{self.address[:4]}-{self.address[-4:]}".lower()

    def __str__(self) -> str:
        """String representation returns full address."""
        return self.address
