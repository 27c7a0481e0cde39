"""
Wallet authenticator service interface.
"""

from abc import ABC, abstractmethod


class IWalletAuthenticator(ABC):
    """
    Abstract service interface for Solana wallet authentication.

    Implements signature verification for Web3 authentication:
    - User signs the challenge message with the wallet private key
    - Backend verifies the ed25519 signature against the wallet address
    """

    @abstractmethod
    async def verify_signature(
        self,
        wallet_address: str,
        message: str,
        signature: str,
    ) -> bool:
        """
        Verify wallet signature.

        Args:
            wallet_address: Wallet address claiming ownership
            message: Original message that was signed
            signature: Detached signature, base58 or base64 encoded

        Returns:
            True if signature is valid, False otherwise
        """
