"""
Authentication infrastructure package.
"""

from glaneur.infrastructure.auth.challenge_store import (
    InMemoryChallengeStore,
    RedisChallengeStore,
)
from glaneur.infrastructure.auth.solana_wallet_adapter import (
    SolanaWalletAdapter,
)

__all__ = [
    "InMemoryChallengeStore",
    "RedisChallengeStore",
    "SolanaWalletAdapter",
]
