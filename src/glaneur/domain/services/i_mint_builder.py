"""
Compressed mint builder interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from glaneur.domain.entities.post import Post


@dataclass(frozen=True)
class SignedMint:
    """A locally signed mint transaction, not yet broadcast."""

    tx_signature: str
    transaction: bytes
    last_valid_block_height: int


class IMintBuilder(ABC):
    """Builds and signs server-paid compressed NFT mints."""

    @abstractmethod
    async def build_signed_mint(self, post: Post, recipient: str) -> SignedMint:
        """
        Build a mint of the post's collectible to the recipient and sign it.

        The platform keypair signs as tree authority and fee payer. The
        recipient does not sign.

        Args:
            post: Collectible post providing the metadata
            recipient: Wallet receiving the asset

        Returns:
            SignedMint with the signature known before broadcast

        Raises:
            SignerNotConfiguredError: If keypair or tree is missing
            UpstreamError: If the blockhash cannot be fetched
        """
