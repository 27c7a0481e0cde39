"""
Solana wallet authentication adapter.

Implements wallet signature verification using Ed25519.
"""

import base64
import binascii

import base58
from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

from glaneur.domain.services.i_wallet_authenticator import IWalletAuthenticator

SIGNATURE_LENGTH = 64
PUBLIC_KEY_LENGTH = 32


def decode_signature(signature: str) -> bytes:
    """
    Decode a detached signature.

    Base64 if it contains any of '+', '/' or '=', base58 otherwise.

    Raises:
        ValueError: If the signature cannot be decoded
    """
    if any(c in signature for c in "+/="):
        try:
            return base64.b64decode(signature, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 signature: {e}") from e
    return base58.b58decode(signature)


class SolanaWalletAdapter(IWalletAuthenticator):
    """
    Solana wallet authentication using Ed25519 signatures.

    Verifies wallet ownership via signature verification.
    """

    async def verify_signature(
        self,
        wallet_address: str,
        message: str,
        signature: str,
    ) -> bool:
        """
        Verify Solana wallet signature.

        Args:
            wallet_address: Solana wallet address (base58)
            message: Original message that was signed
            signature: Signature (base58 or base64 encoded)

        Returns:
            True if signature is valid, False otherwise
        """
        try:
            public_key_bytes = base58.b58decode(wallet_address)
            signature_bytes = decode_signature(signature)
        except ValueError:
            return False

        if len(public_key_bytes) != PUBLIC_KEY_LENGTH:
            return False
        if len(signature_bytes) != SIGNATURE_LENGTH:
            return False

        try:
            VerifyKey(public_key_bytes).verify(message.encode("utf-8"), signature_bytes)
        except (BadSignatureError, ValueError):
            return False

        return True
