"""
Verify Signature use case.

Checks a signed challenge and burns it, whatever the outcome.
"""

import re
from typing import Optional

from glaneur.domain.entities.challenge import Challenge
from glaneur.domain.exceptions import SignatureInvalidError, ValidationError
from glaneur.domain.services.i_challenge_store import IChallengeStore
from glaneur.domain.services.i_wallet_authenticator import IWalletAuthenticator
from glaneur.domain.value_objects.wallet_address import WalletAddress
from glaneur.infrastructure.monitoring import get_logger, metrics

logger = get_logger(__name__)

NONCE_PATTERN = re.compile(r"^Nonce:\s*([0-9A-Za-z]+)\s*$", re.MULTILINE)


def extract_nonce(message: str) -> Optional[str]:
    """Pull the nonce out of a challenge message, if present."""
    match = NONCE_PATTERN.search(message or "")
    return match.group(1) if match else None


class VerifySignature:
    """
    Verify a signed sign-in challenge.

    Business rules:
    - Challenge is consumed on every attempt, success or failure
    - Unknown, reused or expired challenges are rejected
    - Challenge must have been issued to the claimed wallet
    - Submitted message must be byte-identical to the issued one
    - Signature must be a valid ed25519 signature by the wallet key
    """

    def __init__(
        self,
        challenge_store: IChallengeStore,
        wallet_authenticator: IWalletAuthenticator,
    ):
        """
        Initialize use case with dependencies.

        Args:
            challenge_store: Storage for issued challenges
            wallet_authenticator: Service for signature verification
        """
        self.challenge_store = challenge_store
        self.wallet_authenticator = wallet_authenticator

    async def execute(
        self,
        wallet_address: str,
        message: str,
        signature: str,
    ) -> Challenge:
        """
        Execute signature verification.

        Args:
            wallet_address: Wallet address claiming ownership
            message: Challenge message that was signed
            signature: Signature (base58 or base64 encoded)

        Returns:
            The verified challenge

        Raises:
            ValidationError: If wallet address is malformed
            SignatureInvalidError: If the challenge or signature is rejected
        """
        # 1. Validate address format
        if not WalletAddress.is_valid(wallet_address):
            raise ValidationError(
                field="walletAddress",
                reason="Invalid Solana wallet address",
            )

        try:
            challenge = await self._consume_and_check(
                wallet_address, message, signature
            )
        except SignatureInvalidError as e:
            metrics.signature_verifications_total.labels(result="rejected").inc()
            logger.info(
                "Signature rejected",
                extra={"wallet": wallet_address, "reason": e.reason},
            )
            raise

        metrics.signature_verifications_total.labels(result="valid").inc()
        return challenge

    async def _consume_and_check(
        self,
        wallet_address: str,
        message: str,
        signature: str,
    ) -> Challenge:
        # 2. Locate challenge by nonce
        nonce = extract_nonce(message)
        if not nonce:
            raise SignatureInvalidError("Challenge nonce missing from message")

        # 3. Burn it before anything else can fail
        challenge = await self.challenge_store.consume(nonce)

        if challenge is None:
            raise SignatureInvalidError("Unknown or expired challenge")
        if challenge.consumed:
            raise SignatureInvalidError("Challenge has already been used")
        if challenge.is_expired():
            raise SignatureInvalidError("Challenge has expired")
        if challenge.wallet_address != wallet_address:
            raise SignatureInvalidError("Challenge was issued to a different wallet")
        if challenge.message != message:
            raise SignatureInvalidError("Signed message does not match challenge")

        # 4. Verify ed25519 signature
        is_valid = await self.wallet_authenticator.verify_signature(
            wallet_address=wallet_address,
            message=message,
            signature=signature,
        )
        if not is_valid:
            raise SignatureInvalidError("Invalid wallet signature")

        return challenge
