"""
Solana chain client interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, Tuple


@dataclass(frozen=True)
class SignatureStatus:
    """Result of a getSignatureStatuses lookup for one signature."""

    confirmation_status: Optional[str] = None
    err: Optional[Any] = None

    @property
    def failed(self) -> bool:
        return self.err is not None

    @property
    def landed(self) -> bool:
        return self.err is None and self.confirmation_status in (
            "confirmed",
            "finalized",
        )


class IChainClient(ABC):
    """
    Minimal Solana JSON-RPC surface used by the collect pipeline.

    Implementations retry transport errors with bounded backoff and raise
    UpstreamError once retries are exhausted.
    """

    @abstractmethod
    async def get_latest_blockhash(self) -> Tuple[str, int]:
        """
        Fetch a fresh blockhash.

        Returns:
            Tuple of (blockhash, last_valid_block_height)
        """

    @abstractmethod
    async def send_transaction(self, transaction: bytes) -> str:
        """
        Broadcast a signed transaction.

        Args:
            transaction: Serialized signed transaction

        Returns:
            Transaction signature

        Raises:
            TransactionRejectedError: If the node rejects the transaction
            UpstreamError: If the node cannot be reached
        """

    @abstractmethod
    async def get_signature_status(self, tx_signature: str) -> Optional[SignatureStatus]:
        """
        Look up a signature's status.

        Returns:
            SignatureStatus, or None if the node has not seen it
        """

    @abstractmethod
    async def get_block_height(self) -> int:
        """Current block height at the configured commitment."""

    @abstractmethod
    async def get_asset_id(self, tx_signature: str) -> Optional[str]:
        """
        Extract the compressed asset id from a mint transaction's logs.

        Returns:
            Asset id, or None if the logs do not carry one
        """

    @abstractmethod
    async def close(self) -> None:
        """Release network resources."""
