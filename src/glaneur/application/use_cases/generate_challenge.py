"""
Generate Challenge use case.

Issues a single-use sign-in challenge for a wallet.
"""

import secrets
from datetime import datetime, timedelta, timezone

from glaneur.domain.entities.challenge import Challenge
from glaneur.domain.exceptions import ValidationError
from glaneur.domain.services.i_challenge_store import IChallengeStore
from glaneur.domain.value_objects.wallet_address import WalletAddress
from glaneur.infrastructure.monitoring import get_logger, metrics

logger = get_logger(__name__)


def format_timestamp(value: datetime) -> str:
    """Render a UTC timestamp as ISO-8601 with millisecond precision and Z."""
    return (
        value.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def build_challenge_message(
    domain: str,
    wallet_address: str,
    nonce: str,
    issued_at: datetime,
    expires_at: datetime,
) -> str:
    """Compose the human-readable text the wallet is asked to sign."""
    return (
        f"{domain} wants you to sign in with your Solana account:\n"
        f"{wallet_address}\n"
        f"\n"
        f"Nonce: {nonce}\n"
        f"Issued At: {format_timestamp(issued_at)}\n"
        f"Expiration Time: {format_timestamp(expires_at)}"
    )


class GenerateChallenge:
    """
    Issue a sign-in challenge.

    Business rules:
    - Wallet address must be well-formed base58 (32-44 chars)
    - Nonce is 32 random bytes, hex encoded
    - Challenge is stored keyed by nonce until it expires
    """

    def __init__(
        self,
        challenge_store: IChallengeStore,
        domain: str,
        ttl_seconds: int = 300,
    ):
        """
        Initialize use case with dependencies.

        Args:
            challenge_store: Storage for issued challenges
            domain: Name shown at the top of the challenge message
            ttl_seconds: Challenge lifetime
        """
        self.challenge_store = challenge_store
        self.domain = domain
        self.ttl_seconds = ttl_seconds

    async def execute(self, wallet_address: str) -> Challenge:
        """
        Execute challenge generation.

        Args:
            wallet_address: Wallet that will sign the challenge

        Returns:
            Stored Challenge

        Raises:
            ValidationError: If wallet address is malformed
        """
        # 1. Validate address format
        if not WalletAddress.is_valid(wallet_address):
            raise ValidationError(
                field="walletAddress",
                reason="Invalid Solana wallet address",
            )

        # 2. Compose challenge
        nonce = secrets.token_hex(32)
        issued_at = datetime.now(timezone.utc)
        expires_at = issued_at + timedelta(seconds=self.ttl_seconds)
        challenge = Challenge(
            wallet_address=wallet_address,
            nonce=nonce,
            message=build_challenge_message(
                self.domain, wallet_address, nonce, issued_at, expires_at
            ),
            issued_at=issued_at,
            expires_at=expires_at,
        )

        # 3. Store until expiry
        await self.challenge_store.save(challenge)
        metrics.challenges_issued_total.inc()

        logger.debug(
            "Challenge issued",
            extra={"wallet": wallet_address, "nonce_prefix": nonce[:8]},
        )
        return challenge
